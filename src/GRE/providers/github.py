"""GitHub REST API provider."""

from __future__ import annotations

import logging
import re
import time
from urllib.parse import quote

import requests

from GRE.models import Owner, RawContent, Repository, TreeEntry
from GRE.providers.base import RepoProvider

logger = logging.getLogger(__name__)

# Anchor icons GitHub puts next to rendered README headings
_OCTICON_RE = re.compile(r'<svg class="octicon.+?</svg>')


class GitHubError(Exception):
    """Raised for GitHub API errors."""


class NotFoundError(GitHubError):
    """Raised when the requested user, repository or ref does not exist."""


class RateLimitError(GitHubError):
    """Raised when GitHub rate limit is exceeded."""

    def __init__(self, reset_at: int | None = None):
        self.reset_at = reset_at
        if reset_at:
            super().__init__(
                f"GitHub API rate limit exceeded. Resets in {self.retry_after} seconds."
            )
        else:
            super().__init__("GitHub API rate limit exceeded.")

    @property
    def retry_after(self) -> int | None:
        if not self.reset_at:
            return None
        return max(0, self.reset_at - int(time.time()))


class GitHubProvider(RepoProvider):
    """Provider for GitHub repositories using the REST API and the raw host."""

    API_BASE = "https://api.github.com"
    RAW_BASE = "https://raw.githubusercontent.com"
    API_VERSION = "2022-11-28"
    HTML_MEDIA_TYPE = "application/vnd.github.html"
    PER_PAGE = 100

    def __init__(
        self,
        token: str | None = None,
        api_base: str | None = None,
        raw_base: str | None = None,
        timeout: float = 30.0,
    ):
        self.api_base = (api_base or self.API_BASE).rstrip("/")
        self.raw_base = (raw_base or self.RAW_BASE).rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["Accept"] = "application/vnd.github+json"
        self.session.headers["User-Agent"] = "GRE/1.0"
        self.session.headers["X-GitHub-Api-Version"] = self.API_VERSION
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _check_rate_limit(self, response: requests.Response) -> None:
        if response.status_code not in (403, 429):
            return
        remaining = _header_int(response, "X-RateLimit-Remaining")
        reset_at = _header_int(response, "X-RateLimit-Reset") or None
        if remaining == 0:
            raise RateLimitError(reset_at)
        if response.status_code == 429:
            raise RateLimitError(reset_at)

    def _get(self, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.get(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("GET %s failed: %s", url, exc)
            raise GitHubError(f"Could not reach GitHub: {exc}") from exc

    def _api_request(
        self,
        path: str,
        params: dict | None = None,
        accept: str | None = None,
    ) -> requests.Response:
        headers = {"Accept": accept} if accept else None
        resp = self._get(f"{self.api_base}{path}", params=params, headers=headers)
        self._check_rate_limit(resp)

        if resp.status_code == 404:
            raise NotFoundError(f"Not found: {path}")
        if resp.status_code == 401:
            raise GitHubError("Authentication failed. Check your GitHub token.")
        if resp.status_code == 403:
            raise GitHubError(
                "Access denied. The token may lack permissions for this repository."
            )
        if not resp.ok:
            logger.error("GitHub API returned %s for %s", resp.status_code, path)
            raise GitHubError(f"GitHub API returned {resp.status_code} for {path}")
        return resp

    def _api_get(self, path: str, params: dict | None = None):
        resp = self._api_request(path, params)
        try:
            return resp.json()
        except ValueError as exc:
            raise GitHubError(f"Malformed response from GitHub for {path}") from exc

    def get_owner(self, owner: str) -> Owner:
        return Owner.from_api(self._api_get(f"/users/{owner}"))

    def list_owner_repos(self, owner: str) -> list[Repository]:
        data = self._api_get(
            f"/users/{owner}/repos",
            params={"type": "owner", "sort": "pushed", "per_page": self.PER_PAGE},
        )
        return [Repository.from_api(item) for item in data]

    def get_repository(self, owner: str, repo: str) -> Repository:
        return Repository.from_api(self._api_get(f"/repos/{owner}/{repo}"))

    def list_branches(self, owner: str, repo: str) -> list[str]:
        branches: list[str] = []
        page = 1
        while True:
            data = self._api_get(
                f"/repos/{owner}/{repo}/branches",
                params={"per_page": self.PER_PAGE, "page": page},
            )
            branches.extend(item["name"] for item in data)
            if len(data) < self.PER_PAGE:
                return branches
            page += 1

    def list_tree(self, owner: str, repo: str, ref: str) -> list[TreeEntry]:
        data = self._api_get(
            f"/repos/{owner}/{repo}/git/trees/{ref}",
            params={"recursive": "1"},
        )

        if data.get("truncated"):
            # Too many entries for one response; list each top-level subtree
            logger.info("Tree of %s/%s@%s is truncated", owner, repo, ref)
            return self._list_tree_by_subtree(owner, repo, ref)

        return [_tree_entry(item) for item in data.get("tree", [])]

    def _list_tree_by_subtree(
        self, owner: str, repo: str, ref: str
    ) -> list[TreeEntry]:
        """Handle truncated tree by walking top-level directories individually."""
        root = self._api_get(f"/repos/{owner}/{repo}/git/trees/{ref}")
        entries: list[TreeEntry] = []

        for item in root.get("tree", []):
            entry = _tree_entry(item)
            entries.append(entry)
            if entry.type != "tree":
                continue
            try:
                sub_data = self._api_get(
                    f"/repos/{owner}/{repo}/git/trees/{entry.sha}",
                    params={"recursive": "1"},
                )
            except RateLimitError:
                raise
            except GitHubError as exc:
                logger.warning("Skipping subtree %s: %s", entry.path, exc)
                continue
            if sub_data.get("truncated"):
                logger.warning("Listing of %s is incomplete", entry.path)
            entries.extend(
                _tree_entry(child, prefix=f"{entry.path}/")
                for child in sub_data.get("tree", [])
            )

        return entries

    def get_readme(
        self,
        owner: str,
        repo: str,
        ref: str | None = None,
        directory: str = "",
    ) -> str | None:
        path = f"/repos/{owner}/{repo}/readme"
        if directory:
            path += f"/{directory}"
        try:
            resp = self._api_request(
                path,
                params={"ref": ref} if ref else None,
                accept=self.HTML_MEDIA_TYPE,
            )
        except NotFoundError:
            return None
        return _OCTICON_RE.sub("", resp.text).strip()

    def fetch_raw(self, owner: str, repo: str, ref_path: str) -> RawContent | None:
        """Fetch ``ref_path`` from the raw host.

        Returns None for any unsuccessful answer so callers can fall back to
        branch resolution; the raw host answers a bare ref with 400, not 404.
        Rate limits still raise.
        """
        resp = self._get(f"{self.raw_base}/{owner}/{repo}/{quote(ref_path)}")
        self._check_rate_limit(resp)
        if resp.status_code != 200:
            logger.debug(
                "Raw host returned %s for %s/%s/%s", resp.status_code, owner, repo, ref_path
            )
            return None
        content_type = resp.headers.get("Content-Type")
        if content_type:
            return RawContent(body=resp.content, content_type=content_type)
        return RawContent(body=resp.content)


def _tree_entry(item: dict, prefix: str = "") -> TreeEntry:
    return TreeEntry(
        path=f"{prefix}{item['path']}",
        type=item["type"],
        size=item.get("size", 0),
        sha=item.get("sha", ""),
    )


def _header_int(response: requests.Response, name: str) -> int | None:
    value = response.headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring malformed %s header: %r", name, value)
        return None
