"""Request path parsing."""

from __future__ import annotations

import re

from GRE.models import RepoTarget

_OWNER_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")
_REPO_RE = re.compile(r"^[A-Za-z0-9._-]+$")


class URLParseError(Exception):
    """Raised when a request path cannot be parsed."""


def parse_owner(owner: str) -> str:
    """Validate a user or organization name."""
    if not owner or not _OWNER_RE.match(owner):
        raise URLParseError(f"Invalid owner name: {owner}")
    return owner


def parse_repo_target(owner: str, repo: str, rest: str | None = None) -> RepoTarget:
    """Parse the ``owner``, ``repo[@ref]`` and remaining parts of a path.

    Supported forms:
      - /owner/repo
      - /owner/repo/branch/path/to/file   (branch may contain slashes)
      - /owner/repo@ref
      - /owner/repo@ref/path/to/file
    """
    if not owner or not repo:
        raise URLParseError("Owner and repository are required.")

    repo, _, ref = repo.partition("@")
    repo = repo.removesuffix(".git")

    parse_owner(owner)
    if not repo or not _REPO_RE.match(repo) or repo in (".", ".."):
        raise URLParseError(f"Invalid repository name: {repo}")

    path = (rest or "").strip("/")
    return RepoTarget(
        owner=owner,
        repo=repo,
        ref=ref or None,
        path=path,
        pinned=bool(ref),
    )
