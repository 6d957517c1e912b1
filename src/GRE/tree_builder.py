"""Nested directory builder for flat repository listings."""

from __future__ import annotations

import logging
from typing import Iterable

from GRE.models import Directory, TreeEntry

logger = logging.getLogger(__name__)


def build_directory(entries: Iterable[TreeEntry]) -> Directory:
    """Build a nested directory from a flat list of blob entries.

    Names keep the order in which they were first seen, at every level:

        [a/b.txt, a/c.txt, d.txt]  ->  {"a": {"b.txt": .., "c.txt": ..}, "d.txt": ..}

    A path that needs a directory where a file was recorded (or the other way
    around) replaces the earlier node. Git never produces such a listing, so
    the collision is only logged.
    """
    root: Directory = {}
    for entry in entries:
        *parents, name = entry.path.split("/")
        node = root
        for segment in parents:
            child = node.get(segment)
            if not isinstance(child, dict):
                if child is not None:
                    logger.warning(
                        "File %r replaced by a directory while adding %s",
                        segment,
                        entry.path,
                    )
                child = node[segment] = {}
            node = child

        if isinstance(node.get(name), dict):
            logger.warning("Directory replaced by file %s", entry.path)
        node[name] = entry.size
    return root


def count_children(directory: Directory) -> tuple[int, int]:
    """Return ``(files, dirs)`` among the immediate children."""
    dirs = sum(1 for value in directory.values() if isinstance(value, dict))
    return len(directory) - dirs, dirs


def find_node(directory: Directory, path: str) -> int | Directory | None:
    """Follow *path* down the tree. ``""`` is the root itself."""
    node: int | Directory = directory
    for segment in filter(None, path.split("/")):
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return node
