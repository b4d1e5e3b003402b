"""Collaborator interfaces for build history, statistics and problem reporting."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol

from durationguard import logger
from durationguard.exceptions import HistoryError, StatisticsError
from durationguard.models import (
    Build,
    BuildProblem,
    BuildStatisticsSnapshot,
    TestExecutionRecord,
)


class HistoryProvider(Protocol):
    """Protocol for build history queries to enable dependency injection."""

    def entries_since(self, build: Build, pipeline_id: str) -> List[Build]:
        """Return finished builds of the pipeline at and after ``build``, newest first."""


class ReferenceBuildProvider(Protocol):
    """Protocol for locating the build a new build is compared against."""

    def previous_successfully_finished(self, build: Build) -> Optional[Build]:
        """Return the latest successfully finished build before ``build``."""


class StatisticsProvider(Protocol):
    """Protocol for per-build passed-test statistics."""

    def passed_test_statistics(self, build: Build) -> BuildStatisticsSnapshot:
        """Return the passed-test records of ``build``."""

    def find_records_by_identity(
        self, snapshot: BuildStatisticsSnapshot, test_name: str
    ) -> List[TestExecutionRecord]:
        """Return every record in ``snapshot`` for ``test_name``."""


class ProblemSink(Protocol):
    """Protocol for the destination of detected regressions."""

    def report(self, problem_id: str, problem_type: str, message: str, detail: str) -> None:
        """Record a problem. Reporting the same ``problem_id`` twice has no further effect."""


class InMemoryBuildHistory:
    """
    History, reference and statistics provider backed by in-process lists.

    Builds are kept in the order they were added, which is taken as
    chronological order. Suitable for embedding and for tests.
    """

    def __init__(self) -> None:
        self._builds: List[Build] = []
        self._records: Dict[int, List[TestExecutionRecord]] = {}

    def add_build(self, build: Build, records: Iterable[TestExecutionRecord] = ()) -> Build:
        if build in self._builds:
            raise HistoryError(
                f"Build {build.build_id} is already recorded",
                error_code="HISTORY_001",
                context={"build_id": build.build_id},
            )
        self._builds.append(build)
        self._records[build.build_id] = list(records)
        logger.debug(f"Recorded build {build.build_id} with {len(self._records[build.build_id])} test records")
        return build

    def _position(self, build: Build) -> Optional[int]:
        try:
            return self._builds.index(build)
        except ValueError:
            return None

    def entries_since(self, build: Build, pipeline_id: str) -> List[Build]:
        start = self._position(build)
        if start is None:
            raise HistoryError(
                f"Build {build.build_id} is not in the history",
                error_code="HISTORY_001",
                context={"build_id": build.build_id, "pipeline_id": pipeline_id},
            )
        window = [
            b for b in self._builds[start:]
            if b.finished and b.pipeline_id == pipeline_id
        ]
        window.reverse()
        return window

    def previous_successfully_finished(self, build: Build) -> Optional[Build]:
        end = self._position(build)
        if end is None:
            earlier = [b for b in self._builds if b.build_id < build.build_id]
        else:
            earlier = self._builds[:end]
        for candidate in reversed(earlier):
            if (
                candidate.pipeline_id == build.pipeline_id
                and candidate.finished
                and candidate.successful
            ):
                return candidate
        return None

    def passed_test_statistics(self, build: Build) -> BuildStatisticsSnapshot:
        if build.build_id not in self._records:
            raise StatisticsError(
                f"No statistics recorded for build {build.build_id}",
                error_code="STATS_001",
                context={"build_id": build.build_id},
            )
        return BuildStatisticsSnapshot(build.build_id, self._records[build.build_id])

    def find_records_by_identity(
        self, snapshot: BuildStatisticsSnapshot, test_name: str
    ) -> List[TestExecutionRecord]:
        return snapshot.find_records(test_name)


class InMemoryProblemSink:
    """Problem sink that keeps the first problem reported under each id."""

    def __init__(self) -> None:
        self._problems: Dict[str, BuildProblem] = {}

    def report(self, problem_id: str, problem_type: str, message: str, detail: str) -> None:
        if problem_id in self._problems:
            logger.debug(f"Problem {problem_id} already reported")
            return
        self._problems[problem_id] = BuildProblem(
            problem_id=problem_id,
            problem_type=problem_type,
            description=message,
            additional_data=detail,
        )

    @property
    def problems(self) -> List[BuildProblem]:
        return list(self._problems.values())


__all__ = [
    "HistoryProvider",
    "ReferenceBuildProvider",
    "StatisticsProvider",
    "ProblemSink",
    "InMemoryBuildHistory",
    "InMemoryProblemSink",
]
