"""Bring every reservation group with mixed statuses back to a single status."""
from __future__ import annotations

import asyncio
import logging

from app.db.session import get_sessionmaker
from app.services.booking_service import reconcile_group_statuses


async def reconcile() -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        report = await reconcile_group_statuses(session)
    if not report:
        print("All reservation groups are consistent.")
        return
    for item in report:
        statuses = ", ".join(status.value for status in item.statuses)
        print(
            f"{item.group_id}: [{statuses}] -> {item.resolved_status.value} "
            f"({item.updated} updated)"
        )
        if item.overbooked:
            print(f"  over capacity after reactivation: {', '.join(item.overbooked)}")
    print(f"Reconciled {len(report)} group(s).")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(reconcile())


if __name__ == "__main__":
    main()
