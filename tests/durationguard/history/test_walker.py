"""Tests for builds_between."""

from unittest.mock import MagicMock

import pytest

from durationguard.history.walker import builds_between

from tests.utils import PipelineHistory, make_build


class TestBuildsBetween:
    def test_adjacent_builds_have_empty_chain(self, pipeline):
        reference = pipeline.add()
        current = pipeline.add_running()

        assert builds_between(pipeline.history, reference, current) == []

    def test_chain_is_oldest_first_without_boundaries(self, pipeline):
        reference = pipeline.add()
        b1 = pipeline.add(successful=False)
        b2 = pipeline.add(successful=False)
        b3 = pipeline.add(successful=False)
        current = pipeline.add_running()

        chain = builds_between(pipeline.history, reference, current)

        assert chain == [b1, b2, b3]
        assert reference not in chain
        assert current not in chain

    def test_builds_newer_than_finished_current_are_excluded(self, pipeline):
        reference = pipeline.add()
        between = pipeline.add(successful=False)
        current = pipeline.add()
        pipeline.add()

        assert builds_between(pipeline.history, reference, current) == [between]

    def test_adjacent_finished_builds_have_empty_chain(self, pipeline):
        reference = pipeline.add()
        current = pipeline.add()

        assert builds_between(pipeline.history, reference, current) == []

    def test_builds_finishing_after_running_current_are_excluded(self, pipeline):
        reference = pipeline.add()
        between = pipeline.add(successful=False)
        current = pipeline.add_running()
        later = pipeline.add(successful=False)

        chain = builds_between(pipeline.history, reference, current)

        assert chain == [between]
        assert later not in chain

    def test_other_pipelines_are_not_part_of_chain(self, pipeline):
        reference = pipeline.add()
        pipeline.add(pipeline_id="Other_Pipeline")
        mine = pipeline.add(successful=False)
        current = pipeline.add_running()

        assert builds_between(pipeline.history, reference, current) == [mine]

    def test_unfinished_builds_are_not_part_of_chain(self, pipeline):
        reference = pipeline.add()
        pipeline.add_running()
        finished = pipeline.add(successful=False)
        current = pipeline.add_running()

        assert builds_between(pipeline.history, reference, current) == [finished]

    def test_empty_provider_window(self):
        history = MagicMock()
        history.entries_since.return_value = []
        reference = make_build(1)

        assert builds_between(history, reference, make_build(5)) == []
        history.entries_since.assert_called_once_with(reference, reference.pipeline_id)

    def test_window_without_reference_is_kept_whole(self):
        history = MagicMock()
        history.entries_since.return_value = [make_build(4), make_build(3), make_build(2)]

        chain = builds_between(history, make_build(1), make_build(9))

        assert [b.build_id for b in chain] == [2, 3, 4]

    def test_provider_errors_propagate(self):
        history = MagicMock()
        history.entries_since.side_effect = RuntimeError("history service down")

        with pytest.raises(RuntimeError):
            builds_between(history, make_build(1), make_build(2))

    def test_builds_compare_by_id(self):
        history = MagicMock()
        # The history sees the current build as finished; the caller still holds it as running
        history.entries_since.return_value = [make_build(3), make_build(2), make_build(1)]
        running_current = make_build(3, finished=False, successful=False)

        chain = builds_between(history, make_build(1), running_current)

        assert [b.build_id for b in chain] == [2]
