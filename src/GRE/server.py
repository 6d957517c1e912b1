"""Tornado front end: raw passthrough, repository pages and tree listings."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from functools import partial
from urllib.parse import quote

import tornado.web
from tornado import gen
from tornado.ioloop import IOLoop

from GRE.cache import TreeCache, tree_key
from GRE.config import Settings
from GRE.models import Directory, RawContent, RepoTarget
from GRE.pages import error_page, home_page, owner_page, repo_page, tree_text_page
from GRE.path_resolver import resolve_path
from GRE.providers.base import RepoProvider
from GRE.providers.github import (
    GitHubError,
    GitHubProvider,
    NotFoundError,
    RateLimitError,
)
from GRE.tree_builder import build_directory, find_node
from GRE.tree_renderer import render_html_tree, render_lines
from GRE.url_parser import URLParseError, parse_owner, parse_repo_target

logger = logging.getLogger(__name__)

# Most specific first
_ERROR_STATUS: tuple[tuple[type[Exception], int], ...] = (
    (URLParseError, 400),
    (NotFoundError, 404),
    (RateLimitError, 429),
    (GitHubError, 502),
)


def _http_error(exc: Exception) -> tornado.web.HTTPError:
    for exc_type, status in _ERROR_STATUS:
        if isinstance(exc, exc_type):
            return tornado.web.HTTPError(status, "%s", str(exc))
    return tornado.web.HTTPError(500)


class BaseHandler(tornado.web.RequestHandler):
    def initialize(
        self,
        provider: RepoProvider | None = None,
        cache: TreeCache | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.provider = provider
        self.cache = cache
        self.executor = executor

    def run_blocking(self, fn, *args):
        """Run a blocking provider call on the thread pool."""
        return IOLoop.current().run_in_executor(self.executor, partial(fn, *args))

    def write_error(self, status_code: int, **kwargs) -> None:
        detail = None
        exc_info = kwargs.get("exc_info")
        if exc_info is not None:
            exc = exc_info[1]
            if isinstance(exc, tornado.web.HTTPError) and exc.log_message:
                detail = exc.log_message % exc.args
            cause = exc.__cause__
            if isinstance(cause, RateLimitError) and cause.retry_after is not None:
                self.set_header("Retry-After", str(cause.retry_after))
        self.set_header("Content-Type", "text/html; charset=UTF-8")
        self.finish(error_page(status_code, self._reason, detail))


class HomeHandler(BaseHandler):
    def get(self) -> None:
        self.write(home_page())


class OwnerHandler(BaseHandler):
    async def get(self, owner: str) -> None:
        try:
            owner = parse_owner(owner)
            profile = await self.run_blocking(self.provider.get_owner, owner)
            # Organizations keep their profile README in .github/profile
            if profile.is_organization:
                readme_repo, readme_dir = ".github", "profile"
            else:
                readme_repo, readme_dir = profile.login, ""
            repos, readme = await gen.multi([
                self.run_blocking(self.provider.list_owner_repos, owner),
                self.run_blocking(
                    self.provider.get_readme, owner, readme_repo, None, readme_dir
                ),
            ])
        except (URLParseError, GitHubError) as exc:
            raise _http_error(exc) from exc

        self.write(owner_page(profile, repos, readme))


class RepoHandler(BaseHandler):
    async def get(self, owner: str, repo: str, rest: str | None = None) -> None:
        try:
            target = parse_repo_target(owner, repo, rest)
            if target.pinned:
                await self._serve_pinned(target)
            elif not target.path:
                await self._redirect_to_default(target)
            else:
                await self._serve_ref_path(target)
        except (URLParseError, GitHubError) as exc:
            raise _http_error(exc) from exc

    async def _serve_pinned(self, target: RepoTarget) -> None:
        """``owner/repo@ref[/path]``: raw file, or the text tree of the ref."""
        if target.path:
            raw = await self.run_blocking(
                self.provider.fetch_raw,
                target.owner,
                target.repo,
                f"{target.ref}/{target.path}",
            )
            if raw is None:
                raise tornado.web.HTTPError(404)
            self._write_raw(raw)
            return

        tree = await self._load_tree(target.owner, target.repo, target.ref)
        base_link = f"/{quote(target.owner)}/{quote(target.repo)}@{quote(target.ref, safe='')}"
        lines = render_lines(tree, base_link, show_size=True, show_counts=True)
        self.write(tree_text_page(target.full_name, target.ref, lines))

    async def _redirect_to_default(self, target: RepoTarget) -> None:
        repository = await self.run_blocking(
            self.provider.get_repository, target.owner, target.repo
        )
        self.redirect(
            f"/{quote(target.owner)}/{quote(target.repo)}"
            f"/{quote(repository.default_branch)}"
        )

    async def _serve_ref_path(self, target: RepoTarget) -> None:
        """``owner/repo/ref/path``: raw file if the literal path exists,
        otherwise the listing of the branch (or one of its directories)."""
        owner, repo = target.owner, target.repo

        raw = await self.run_blocking(self.provider.fetch_raw, owner, repo, target.path)
        if raw is not None:
            self._write_raw(raw)
            return

        repository, branches = await gen.multi([
            self.run_blocking(self.provider.get_repository, owner, repo),
            self.run_blocking(self.provider.list_branches, owner, repo),
        ])
        resolved = resolve_path(target.path, branches)
        logger.debug("Resolved %s/%s/%s to %s", owner, repo, target.path, resolved)

        if resolved.branch is None:
            default = repository.default_branch
            if default not in branches:
                raise tornado.web.HTTPError(404, "No branch matches %s", target.path)
            self.redirect(
                f"/{quote(owner)}/{quote(repo)}/{quote(default)}/{quote(target.path)}"
            )
            return

        branch, directory = resolved.branch, resolved.filepath
        tree, readme = await gen.multi([
            self._load_tree(owner, repo, branch),
            self.run_blocking(self.provider.get_readme, owner, repo, branch, directory),
        ])

        node = find_node(tree, directory)
        if not isinstance(node, dict):
            raise tornado.web.HTTPError(404, "%s not found on %s", directory, branch)

        base_link = f"/{quote(owner)}/{quote(repo)}/{quote(branch)}"
        if directory:
            base_link += f"/{quote(directory)}"
        tree_html = render_html_tree(node, base_link, show_size=True, show_counts=True)
        self.write(repo_page(repository, branch, branches, tree_html, readme, directory))

    async def _load_tree(self, owner: str, repo: str, ref: str) -> Directory:
        async def load() -> Directory:
            entries = await self.run_blocking(self.provider.list_blobs, owner, repo, ref)
            logger.info(
                "Building tree for %s/%s@%s (%d files)", owner, repo, ref, len(entries)
            )
            return build_directory(entries)

        return await self.cache.get_or_load(tree_key(owner, repo, ref), load)

    def _write_raw(self, raw: RawContent) -> None:
        self.set_header("Content-Type", raw.content_type)
        self.set_header("X-Content-Type-Options", "nosniff")
        self.write(raw.body)


def make_app(
    provider: RepoProvider,
    settings: Settings | None = None,
    cache: TreeCache | None = None,
    executor: Executor | None = None,
) -> tornado.web.Application:
    settings = settings or Settings()
    context = {
        "provider": provider,
        "cache": cache or TreeCache(maxsize=settings.cache_size),
        "executor": executor
        or ThreadPoolExecutor(
            max_workers=settings.max_workers, thread_name_prefix="gre"
        ),
    }
    return tornado.web.Application([
        (r"/", HomeHandler, context),
        (r"/favicon\.ico", tornado.web.ErrorHandler, {"status_code": 404}),
        (r"/([^/]+)/?", OwnerHandler, context),
        (r"/([^/]+)/([^/]+)(?:/(.*))?", RepoHandler, context),
    ])


async def _serve(settings: Settings) -> None:
    provider = GitHubProvider(
        token=settings.token,
        api_base=settings.api_base,
        raw_base=settings.raw_base,
        timeout=settings.timeout,
    )
    app = make_app(provider, settings)
    app.listen(settings.port, address=settings.host)
    logger.info("Listening on http://%s:%d", settings.host, settings.port)
    await asyncio.Event().wait()


def serve(settings: Settings) -> None:
    """Run the server until interrupted."""
    asyncio.run(_serve(settings))
