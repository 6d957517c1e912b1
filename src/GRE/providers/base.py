"""Abstract base class for repository providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from GRE.models import Owner, RawContent, Repository, TreeEntry


class RepoProvider(ABC):
    """Base class for Git hosting service providers.

    Implementations are synchronous; the server runs them on a thread pool.
    """

    @abstractmethod
    def get_owner(self, owner: str) -> Owner:
        """Return the user or organization profile."""

    @abstractmethod
    def list_owner_repos(self, owner: str) -> list[Repository]:
        """Return the owner's most recently pushed repositories."""

    @abstractmethod
    def get_repository(self, owner: str, repo: str) -> Repository:
        """Return repository metadata."""

    @abstractmethod
    def list_branches(self, owner: str, repo: str) -> list[str]:
        """Return the names of all branches."""

    @abstractmethod
    def list_tree(self, owner: str, repo: str, ref: str) -> list[TreeEntry]:
        """Return the recursive flat listing of the repository at *ref*."""

    @abstractmethod
    def get_readme(
        self,
        owner: str,
        repo: str,
        ref: str | None = None,
        directory: str = "",
    ) -> str | None:
        """Return the rendered README HTML of *directory*, or None."""

    @abstractmethod
    def fetch_raw(self, owner: str, repo: str, ref_path: str) -> RawContent | None:
        """Fetch ``ref/path/to/file`` from the raw host, or None if it cannot be served."""

    def list_blobs(self, owner: str, repo: str, ref: str) -> list[TreeEntry]:
        """File entries of the recursive listing; directory entries dropped."""
        return [entry for entry in self.list_tree(owner, repo, ref) if entry.is_blob]
