"""CLI for generating a day's curation (all editions, or story mode for one edition)."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import datetime, timezone

from dotenv import load_dotenv

from allocate_topics.sources import JsonSnapshotTopicSource
from common.cli_helpers import parse_date, parse_years_forward, save_json_local, setup_logging
from common.serialization import serialize_dataclass, to_json
from generate_curation.config import load_config
from generate_curation.engine import CurationEngine
from generate_curation.errors import CurationError

setup_logging()
logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "content temporarily unavailable"


def _run(engine: CurationEngine, day: str, years_forward: int | None):
    if years_forward is None:
        return engine.generate_daily_curation(day), "daily_curation"

    edition = engine.build_deterministic_edition(day, years_forward)
    candidates = engine.candidates_for_edition(edition, day)
    plan = engine.generate_edition_curation_plan(candidates, day, years_forward)
    engine.store_draft_articles(plan, candidates)
    return plan, f"curation_plan_y{years_forward}"


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--day",
        type=lambda v: parse_date(v, "day"),
        default=datetime.now(timezone.utc).date(),
        help="Baseline UTC day (YYYY-MM-DD) to curate",
    )
    parser.add_argument("--snapshot-dir", required=True, help="Directory holding <day>.json topic snapshots")
    parser.add_argument("--mode", default=None, help="Override curator mode (auto, mock, anthropic, openai, http, off)")
    parser.add_argument("--config", default=None, help="YAML config name (default: CURATION_CONFIG_ENV or prod)")
    parser.add_argument(
        "--years-forward",
        type=parse_years_forward,
        default=None,
        help="Run story-mode curation for this edition instead of the full day",
    )
    parser.add_argument("--load-local", action="store_true", help="Save results to local file")
    args = parser.parse_args()

    load_dotenv()

    config = load_config(args.config)
    if args.mode:
        config = replace(config, mode=args.mode)

    day = args.day.isoformat()
    try:
        engine = CurationEngine(JsonSnapshotTopicSource(args.snapshot_dir), config=config).initialize()
        result, prefix = _run(engine, day, args.years_forward)
    except CurationError as exc:
        logger.error("Curation for %s failed: %s", day, exc.__class__.__name__)
        print(UNAVAILABLE_MESSAGE, file=sys.stderr)
        sys.exit(1)

    if result is None:
        logger.info("Curation disabled; nothing to write for %s", day)
        return

    if args.load_local:
        path = save_json_local(serialize_dataclass(result), f"{prefix}_{day}", datetime.now(timezone.utc))
        logger.info("Saved %s to %s", prefix, path)
    else:
        print(to_json(result))


if __name__ == "__main__":
    main()
