"""
Pytest configuration for the durationguard test suite.

Provides:
- Loguru reset/test configuration around every test
- A log capture fixture returning emitted Loguru messages
- Pipeline history builders and common decision policies
"""

from typing import Dict, Iterator, List

import pytest

from durationguard import configure_test_logging, logger, reset_logging
from durationguard.config.settings import resolve_policy
from durationguard.history.providers import InMemoryProblemSink

from tests.utils import PipelineHistory


@pytest.fixture(autouse=True)
def _test_logging() -> Iterator[None]:
    """Start every test with a plain console sink and nothing else."""
    configure_test_logging(console_level="DEBUG")
    yield
    reset_logging()


@pytest.fixture
def log_messages() -> Iterator[List[str]]:
    """Collect the text of every message logged during the test."""
    messages: List[str] = []
    sink_id = logger.add(lambda msg: messages.append(msg.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)


@pytest.fixture
def default_raw_parameters() -> Dict[str, str]:
    return {"testNamesPatterns": ".*", "minDuration": "1000", "threshold": "80"}


@pytest.fixture
def default_policy(default_raw_parameters):
    return resolve_policy(default_raw_parameters)


@pytest.fixture
def pipeline() -> PipelineHistory:
    return PipelineHistory()


@pytest.fixture
def problem_sink() -> InMemoryProblemSink:
    return InMemoryProblemSink()
