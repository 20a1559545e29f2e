from __future__ import annotations

import argparse
import dataclasses
import logging

from .collector import StatsCollector
from .config import CollectorConfig, load_collector_config, load_dotenv
from .github_client import GitHubClient


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="orgstats",
        description="Collect per-contributor issue/PR/review/commit counts for a GitHub organization.",
    )
    p.add_argument("--org", help="Organization login (default: ORGSTATS_ORG or the built-in org).")
    p.add_argument(
        "--output",
        action="append",
        help="Destination JSON path; repeat for several (default: ORGSTATS_OUTPUT or published/contributors.json).",
    )
    p.add_argument("--env-file", default=".env", help="Optional .env file to load first (default: .env).")
    p.add_argument("--log-level", help="Logging level (default: ORGSTATS_LOG_LEVEL or INFO).")
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> CollectorConfig:
    load_dotenv(args.env_file)
    config = load_collector_config()
    overrides = {}
    if args.org:
        overrides["org"] = args.org
    if args.output:
        overrides["output_paths"] = tuple(args.output)
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    return dataclasses.replace(config, **overrides)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = build_config(args)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = GitHubClient(token=config.token, base_url=config.base_url)
    collector = StatsCollector(org=config.org, client=client, retries=config.retries)
    collector.run(config.output_paths)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
