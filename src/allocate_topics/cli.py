"""CLI for building a deterministic edition from a day's topic snapshot."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone

from dotenv import load_dotenv

from allocate_topics.allocate_topics import build_deterministic_edition
from allocate_topics.sources import JsonSnapshotTopicSource, load_snapshot
from common.cli_helpers import parse_date, parse_years_forward, save_json_local, setup_logging
from common.serialization import serialize_dataclass, to_json

setup_logging()
logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--day",
        type=lambda v: parse_date(v, "day"),
        default=datetime.now(timezone.utc).date(),
        help="Baseline UTC day (YYYY-MM-DD) whose topics are allocated",
    )
    parser.add_argument(
        "--years-forward",
        type=parse_years_forward,
        default=0,
        help="Edition offset in years (0-10)",
    )
    parser.add_argument("--snapshot-dir", required=True, help="Directory holding <day>.json topic snapshots")
    parser.add_argument("--load-local", action="store_true", help="Save the edition to a local file")
    args = parser.parse_args()

    load_dotenv()

    day = args.day.isoformat()
    snapshot = load_snapshot(JsonSnapshotTopicSource(args.snapshot_dir), day)
    edition = build_deterministic_edition(snapshot, args.years_forward)
    logger.info(
        "Built edition %s +%dy with %d populated slots",
        day, args.years_forward, sum(1 for slot in edition.all_slots() if slot.topic_slug),
    )

    if args.load_local:
        path = save_json_local(
            serialize_dataclass(edition),
            f"edition_{day}_y{args.years_forward}",
            datetime.now(timezone.utc),
        )
        logger.info("Saved edition to %s", path)
    else:
        print(to_json(edition))


if __name__ == "__main__":
    main()
