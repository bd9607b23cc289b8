#!/usr/bin/env python3
"""Main entry point for Behavior Guard."""

import argparse
import json

from behavior_guard.common.logging import get_logger
from behavior_guard.common.config import Config
from behavior_guard.orchestration.engine import BehaviorEngine

PACKAGE_LOGGER = "behavior_guard"


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Check URLs with the Behavior Guard heuristics")
    parser.add_argument("urls", nargs="*", help="URLs to analyze")
    args = parser.parse_args(argv)

    config = Config()
    get_logger(PACKAGE_LOGGER, config.log_level.value)
    logger = get_logger(__name__, config.log_level.value)
    logger.info(f"Behavior Guard initialized in {config.environment.value} mode")
    logger.info(f"Project root: {config.project_root}")

    with BehaviorEngine.from_config(config) as engine:
        for url in args.urls:
            finding = engine.analyze_url(url)
            print(json.dumps(finding.model_dump(mode="json"), indent=2))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
