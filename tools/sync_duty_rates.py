# tools/sync_duty_rates.py
"""
Synchronizacja stawek celnych do Supabase (tabela duty_rates).

Użycie:
    python -m tools.sync_duty_rates us            # Wove -> destination=US, source=WOVE
    python -m tools.sync_duty_rates eu --dry-run  # TARIC -> destination=EU, source=TARIC

Domyślne wartości flag z ENV: RESET_EXISTING (true, chyba że "false"), DRY_RUN ("true").
Kod wyjścia 1, gdy errors > 0 albo przebieg przerwał ConfigError/AuthError.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from application.rate_sync_service import RateSyncService
from core.config import Config
from core.errors import AuthError, ConfigError
from core.logging_config import configure_logging
from domain.regimes import REGIMES, get_regime

logger = logging.getLogger("tools.sync_duty_rates")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Sync import duty rates into Supabase.")
    p.add_argument("regime", choices=sorted(REGIMES), help="destination regime to sync")
    p.add_argument("--no-reset", dest="reset_existing", action="store_false", default=None,
                   help="do not clear the existing partition before inserting")
    p.add_argument("--reset", dest="reset_existing", action="store_true", default=None,
                   help="clear the existing partition before inserting")
    p.add_argument("--dry-run", dest="dry_run", action="store_true", default=None,
                   help="look up rates without writing to Supabase")
    p.add_argument("--delay", type=float, default=None,
                   help="seconds to wait after each lookup (default: regime pacing)")
    p.add_argument("--log-level", default=None, help="override LOG_LEVEL")
    return p


def main(argv: Optional[List[str]] = None, service: Optional[RateSyncService] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level_name=args.log_level or Config.LOG_LEVEL)

    regime = get_regime(args.regime)
    service = service or RateSyncService(delay_seconds=args.delay)

    try:
        summary = service.run(regime, reset_existing=args.reset_existing, dry_run=args.dry_run)
    except (ConfigError, AuthError) as e:
        logger.error("Fatal %s sync error: %s", regime.destination.value, e)
        return 1

    print(f"Inserted/Prepared: {summary.success}")
    print(f"Skipped: {summary.skipped}")
    print(f"Errors: {summary.errors}")
    return summary.exit_code


if __name__ == "__main__":
    sys.exit(main())
