"""Build history access and the walk between a reference and a current build."""

from durationguard.history.providers import (
    HistoryProvider,
    InMemoryBuildHistory,
    InMemoryProblemSink,
    ProblemSink,
    ReferenceBuildProvider,
    StatisticsProvider,
)
from durationguard.history.walker import builds_between

__all__ = [
    "HistoryProvider",
    "InMemoryBuildHistory",
    "InMemoryProblemSink",
    "ProblemSink",
    "ReferenceBuildProvider",
    "StatisticsProvider",
    "builds_between",
]
