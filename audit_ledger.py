"""
Standalone script that checks every user's balance against the ledger.
Respects the DB_PATH environment variable if set; otherwise uses the default.

Exit status is 0 when the ledger explains every balance, 1 otherwise.
"""

import logging
import sys

import config
from repositories.ledger_repository import LedgerRepository

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("friendly_bets.audit")


def main(db_path: str | None = None) -> int:
    db_path = db_path or config.DB_PATH
    logger.info(f"Auditing ledger in {db_path}")

    problems = LedgerRepository(db_path).find_inconsistencies()
    for problem in problems:
        logger.error(
            f"User {problem['user_id']}: balance={problem['balance']} "
            f"ledger={problem['ledger_total']} bad_entries={problem['bad_entries']}"
        )

    if problems:
        logger.error(f"{len(problems)} user(s) with inconsistent ledgers")
        return 1
    logger.info("Ledger consistent for all users")
    return 0


if __name__ == "__main__":
    sys.exit(main())
