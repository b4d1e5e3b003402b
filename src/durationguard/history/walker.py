"""Build chain between a reference build and the build under inspection."""

from __future__ import annotations

from typing import List

from durationguard import logger
from durationguard.history.providers import HistoryProvider
from durationguard.models import Build


def builds_between(history: HistoryProvider, reference: Build, current: Build) -> List[Build]:
    """
    Return the finished builds strictly between ``reference`` and ``current``.

    The history provider lists builds newest first, starting at the
    reference. Anything at or newer than ``current`` is dropped: by position
    when ``current`` shows up in that window, by build id when it does not
    (it is usually still running). Build ids grow in queue order.

    Args:
        history: Provider of the pipeline's finished builds
        reference: Older boundary, excluded
        current: Newer boundary, excluded

    Returns:
        Builds ordered oldest first; empty for adjacent builds or an empty window
    """
    entries = history.entries_since(reference, reference.pipeline_id)
    if not entries:
        return []

    # Newest first: skip down to the current build if it is listed
    if current in entries:
        entries = entries[entries.index(current) + 1:]
    else:
        # Builds queued after the current one may finish before it
        entries = [b for b in entries if b.build_id < current.build_id]

    chain: List[Build] = []
    for build in entries:
        if build == reference:
            break
        chain.append(build)

    chain.reverse()
    logger.debug(
        f"{len(chain)} build(s) between reference {reference.build_id} and build {current.build_id}"
    )
    return chain


__all__ = ["builds_between"]
