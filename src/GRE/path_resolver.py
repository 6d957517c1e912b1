"""Split an ambiguous ``ref/path`` string into a branch name and a file path."""

from __future__ import annotations

from typing import Iterable

from GRE.models import ResolvedPath


def resolve_path(raw_path: str, branches: Iterable[str]) -> ResolvedPath:
    """Find which leading segments of *raw_path* name a known branch.

    Branch names may contain ``/``, so each branch is compared segment by
    segment against the start of the path. A branch matches only if every
    one of its segments equals the path segment at the same position.
    Candidates are visited in ascending order and a later match replaces an
    earlier one, so with branches ``a`` and ``a/b`` the path ``a/b/c.txt``
    resolves to ``a/b``.

    Example:
        >>> resolve_path("release/v1/src/index.ts", ["main", "release/v1"])
        ResolvedPath(branch='release/v1', filepath='src/index.ts')
    """
    if not raw_path:
        return ResolvedPath(branch=None, filepath=raw_path)

    path_segments = raw_path.split("/")
    matched: list[str] = []

    for branch in sorted(branches):
        branch_segments = branch.split("/")
        if len(branch_segments) > len(path_segments):
            continue
        if all(
            segment == path_segments[i]
            for i, segment in enumerate(branch_segments)
        ):
            matched = branch_segments

    if not matched:
        return ResolvedPath(branch=None, filepath=raw_path)

    branch = "/".join(matched)
    return ResolvedPath(branch=branch, filepath=raw_path[len(branch) + 1:])
