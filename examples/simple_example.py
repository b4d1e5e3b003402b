#!/usr/bin/env python
"""
Minimal walk-through of durationguard with in-memory history.

Records three finished builds of a pipeline plus one running build, then
checks the running build the way a CI host would once it finishes.

Usage:
    python examples/simple_example.py [--params params.yaml] [--verbose]
"""

import argparse
import sys

from durationguard import initialize_logging, logger
from durationguard.config.yaml_config import load_feature_parameters
from durationguard.exceptions import ConfigError
from durationguard.feature import SlowTestFailureCondition
from durationguard.history.providers import InMemoryBuildHistory, InMemoryProblemSink
from durationguard.models import Build, TestExecutionRecord


def build_history() -> tuple:
    history = InMemoryBuildHistory()
    run_id = iter(range(1, 1000))

    def add(build_id, durations, successful=True, finished=True):
        build = Build(build_id, "Shop_Tests", finished=finished, successful=successful)
        history.add_build(build, [
            TestExecutionRecord(name, duration, build_id, next(run_id))
            for name, duration in durations.items()
        ])
        return build

    add(1, {"shop.CheckoutTest.pay": 1200, "shop.CartTest.add": 300})
    add(2, {"shop.CheckoutTest.pay": 1250, "shop.CartTest.add": 310})
    add(3, {"shop.CheckoutTest.pay": 1300, "shop.CartTest.add": 290}, successful=False)
    current = add(4, {"shop.CheckoutTest.pay": 2600, "shop.CartTest.add": 900}, successful=False, finished=False)
    return history, current


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--params", help="YAML file with feature parameters")
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    initialize_logging(console_level="DEBUG" if args.verbose else "INFO")

    try:
        parameters = load_feature_parameters(args.params) if args.params else load_feature_parameters({})
    except ConfigError as e:
        logger.error(f"Cannot load parameters: {e}")
        return 2

    history, current = build_history()
    sink = InMemoryProblemSink()
    feature = SlowTestFailureCondition(history, history, problem_sink=sink)

    logger.info(SlowTestFailureCondition.describe_parameters(parameters).replace("<br>", ", "))
    feature.check_build(current, parameters)

    for problem in sink.problems:
        print(f"{problem.problem_id}: {problem.description}")
    return 1 if sink.problems else 0


if __name__ == "__main__":
    sys.exit(main())
