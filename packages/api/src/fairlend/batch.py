"""CLI entrypoint for the monthly notification batch.

Usage:
    python -m fairlend.batch          # Send the monthly reminder to every applicant
    python -m fairlend.batch --quiet  # Only print the JSON result
"""

import argparse
import asyncio
import json
import logging

from fairlend_db import SessionLocal, get_db_service

from .schemas.notification import MonthlyBatchResponse
from .services.notification import run_monthly_batch


async def main() -> dict:
    """Run one monthly batch and return a summary."""
    try:
        async with SessionLocal() as session:
            created = await run_monthly_batch(session)
    finally:
        await get_db_service().close()
    return MonthlyBatchResponse(success=True, notifications_created=created).model_dump(
        by_alias=True
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Send FairLend monthly notifications")
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress log output",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)
    result = asyncio.run(main())
    print(json.dumps(result, indent=2))
