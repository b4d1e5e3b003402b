"""
Shared test helpers for the durationguard test suite.

- PipelineHistory: builds an InMemoryBuildHistory one build at a time,
  handing out build and test run ids
- FlakyStatisticsProvider: statistics provider double failing for chosen builds
- make_build / passed: terse constructors for models
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from durationguard.exceptions import StatisticsError
from durationguard.history.providers import InMemoryBuildHistory
from durationguard.models import Build, BuildStatisticsSnapshot, TestExecutionRecord

PIPELINE_ID = "Project_Tests"

TestEntry = Union[Tuple[str, int], Tuple[str, int, Dict[str, bool]]]


def make_build(
    build_id: int,
    pipeline_id: str = PIPELINE_ID,
    finished: bool = True,
    successful: bool = True,
) -> Build:
    return Build(build_id=build_id, pipeline_id=pipeline_id, finished=finished, successful=successful)


def passed(
    name: str,
    duration_ms: int,
    build_id: int = 1,
    test_run_id: int = 1,
    ignored: bool = False,
    muted: bool = False,
) -> TestExecutionRecord:
    return TestExecutionRecord(
        test_name=name,
        duration_ms=duration_ms,
        build_id=build_id,
        test_run_id=test_run_id,
        ignored=ignored,
        muted=muted,
    )


class PipelineHistory:
    """Append-only pipeline history with automatic id assignment."""

    def __init__(self, pipeline_id: str = PIPELINE_ID):
        self.pipeline_id = pipeline_id
        self.history = InMemoryBuildHistory()
        self._next_build_id = 100
        self._next_run_id = 5000

    def add(
        self,
        tests: Sequence[TestEntry] = (),
        successful: bool = True,
        finished: bool = True,
        pipeline_id: Optional[str] = None,
    ) -> Build:
        """
        Record a build whose passed tests are ``tests``.

        Each entry is ``(name, duration_ms)`` or ``(name, duration_ms, flags)``
        with flags among ``ignored`` / ``muted``.
        """
        build = make_build(
            self._next_build_id,
            pipeline_id=pipeline_id or self.pipeline_id,
            finished=finished,
            successful=successful,
        )
        self._next_build_id += 1

        records = []
        for entry in tests:
            name, duration = entry[0], entry[1]
            flags = entry[2] if len(entry) > 2 else {}
            records.append(passed(name, duration, build.build_id, self._next_run_id, **flags))
            self._next_run_id += 1

        self.history.add_build(build, records)
        return build

    def add_running(self, tests: Sequence[TestEntry] = ()) -> Build:
        """Record the build under inspection: still running, not yet in the finished history."""
        return self.add(tests, successful=False, finished=False)

    def run_ids(self, build: Build, name: str) -> List[int]:
        snapshot = self.history.passed_test_statistics(build)
        return [record.test_run_id for record in snapshot.find_records(name)]


class FlakyStatisticsProvider:
    """Delegates to a real provider but fails for the given build ids; counts fetches."""

    def __init__(self, delegate: InMemoryBuildHistory, failing_build_ids: Iterable[int] = ()):
        self.delegate = delegate
        self.failing_build_ids: Set[int] = set(failing_build_ids)
        self.fetches: List[int] = []

    def passed_test_statistics(self, build: Build) -> BuildStatisticsSnapshot:
        self.fetches.append(build.build_id)
        if build.build_id in self.failing_build_ids:
            raise StatisticsError(
                f"Statistics storage unavailable for build {build.build_id}",
                context={"build_id": build.build_id},
            )
        return self.delegate.passed_test_statistics(build)

    def find_records_by_identity(
        self, snapshot: BuildStatisticsSnapshot, test_name: str
    ) -> List[TestExecutionRecord]:
        return self.delegate.find_records_by_identity(snapshot, test_name)
