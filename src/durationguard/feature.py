"""
Build feature that fails a build when tests become slower.

:class:`SlowTestFailureCondition` is what a CI host registers: it exposes the
feature's identity, its parameter defaults, presence validation and summary,
and :meth:`SlowTestFailureCondition.check_build`, called once per finished
build.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Union

from durationguard import logger
from durationguard.config.models import (
    FeatureParameters,
    InvalidProperty,
    default_parameters,
    describe_parameters,
    validate_parameters,
)
from durationguard.config.settings import DecisionPolicy, resolve_policy
from durationguard.detection.detector import RegressionDetector
from durationguard.history.providers import (
    HistoryProvider,
    ProblemSink,
    ReferenceBuildProvider,
    StatisticsProvider,
)
from durationguard.models import Build, RegressionReport

FEATURE_TYPE = "BuildFailureOnSlowTest"
DISPLAY_NAME = "Fail build if tests duration increases"

Parameters = Union[Mapping[str, Optional[str]], FeatureParameters]


class SlowTestFailureCondition:
    """
    Host-facing entry point of the slow test failure condition.

    Example:
        >>> history = InMemoryBuildHistory()
        >>> sink = InMemoryProblemSink()
        >>> feature = SlowTestFailureCondition(history, history, problem_sink=sink)
        >>> feature.check_build(build, {"testNamesPatterns": ".*", "minDuration": "1000", "threshold": "80"})
    """

    feature_type = FEATURE_TYPE
    display_name = DISPLAY_NAME

    def __init__(
        self,
        history_provider: HistoryProvider,
        statistics_provider: StatisticsProvider,
        reference_provider: Optional[ReferenceBuildProvider] = None,
        problem_sink: Optional[ProblemSink] = None,
        stop_at_first_regression: bool = False,
    ):
        self.detector = RegressionDetector(
            history_provider=history_provider,
            statistics_provider=statistics_provider,
            reference_provider=reference_provider,
            problem_sink=problem_sink,
            stop_at_first_regression=stop_at_first_regression,
        )

    @staticmethod
    def default_parameters() -> Dict[str, str]:
        return default_parameters()

    @staticmethod
    def validate_parameters(properties: Parameters) -> List[InvalidProperty]:
        return validate_parameters(_as_mapping(properties))

    @staticmethod
    def describe_parameters(properties: Parameters) -> str:
        return describe_parameters(_as_mapping(properties))

    @staticmethod
    def resolve_settings(properties: Parameters) -> DecisionPolicy:
        return resolve_policy(_as_mapping(properties))

    def check_build(self, build: Build, properties: Parameters) -> List[RegressionReport]:
        """Resolve the parameters and report every regression of ``build``."""
        logger.debug(f"Checking build {build.build_id} of {build.pipeline_id or 'unknown pipeline'}")
        policy = self.resolve_settings(properties)
        return self.detector.run(build, policy)


def _as_mapping(properties: Parameters) -> Mapping[str, Optional[str]]:
    if isinstance(properties, FeatureParameters):
        return properties.as_raw_parameters()
    return properties


__all__ = ["FEATURE_TYPE", "DISPLAY_NAME", "SlowTestFailureCondition"]
