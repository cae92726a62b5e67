# debug_plans.py
import json
from datetime import datetime, timezone

from pulse.catalog import default_catalog
from pulse.planner import generate_plans


def main():
    catalog = default_catalog()
    candidates = catalog.in_window(
        datetime(2026, 10, 23, tzinfo=timezone.utc),
        datetime(2026, 10, 26, tzinfo=timezone.utc),
    )
    for mode in ("SOLO", "DATE", "FRIENDS", "FAMILY"):
        plans = generate_plans(candidates, mode)
        print(f"=== {mode}: {len(plans)} plan(s) from {len(candidates)} event(s)")
        print(json.dumps([plan.model_dump(mode="json", by_alias=True) for plan in plans], indent=2))


if __name__ == "__main__":
    main()
