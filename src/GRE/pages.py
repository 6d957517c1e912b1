"""HTML page assembly."""

from __future__ import annotations

from html import escape
from urllib.parse import quote

from GRE.models import Owner, Repository

STYLES = """
:root { color-scheme: dark; }
body {
  font-family: "Inconsolata", ui-monospace, monospace;
  max-width: 960px;
  margin: 0 auto;
  padding: 1rem 2rem;
  background: #0d0d0d;
  color: #d0d0d0;
}
a { color: #7aa2f7; }
a.no-color-link { color: inherit; text-decoration: none; }
a.no-color-link:hover { text-decoration: underline; }
ul.file-list { list-style: none; padding-left: 1.2rem; margin: 0; }
summary { cursor: pointer; }
.meta { color: #505050; }
.repo { border-bottom: 1px solid #222; padding: 0.5rem 0; }
pre.tree { line-height: 1.3; }
img.avatar { border-radius: 50%; }
"""


def format_count(n: int) -> str:
    """Compact number notation: 950, 1.2K, 3.4M."""
    for divisor, unit in ((1_000_000_000, "B"), (1_000_000, "M"), (1_000, "K")):
        if n >= divisor:
            text = f"{n / divisor:.1f}".removesuffix(".0")
            return f"{text}{unit}"
    return str(n)


def _layout(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{escape(title)}</title>"
        f"<style>{STYLES}</style></head>"
        f"<body>{body}</body></html>"
    )


def _stats(repo: Repository) -> str:
    text = (
        f"{format_count(repo.stargazers_count)} stars | "
        f"{format_count(repo.forks_count)} forks"
    )
    if repo.language:
        text += f" | {repo.language}"
    return f"<p>{escape(text)}</p>"


def _readme(readme: str | None, title: str = "README.md") -> str:
    # Already rendered and sanitized by GitHub
    if not readme:
        return ""
    return f"<details open><summary>{escape(title)}</summary><div>{readme}</div></details>"


def _branch_link(owner: str, repo: str, branch: str) -> str:
    return f"/{quote(owner)}/{quote(repo)}/{quote(branch)}"


def home_page() -> str:
    body = """<main>
<h1>Hello there.</h1>
<p>Replace <b>github.com</b> with the address of this server in the URL of a
GitHub repository, and browse its files without the heavy web UI.</p>
<h2>Paths</h2>
<ul>
<li><code>/owner</code>: profile and repositories</li>
<li><code>/owner/repo</code>: the default branch</li>
<li><code>/owner/repo/branch/path</code>: a directory listing or the raw file</li>
<li><code>/owner/repo@ref</code>: a plain text tree of the whole ref</li>
<li><code>/owner/repo@ref/path</code>: the raw file</li>
</ul>
</main>"""
    return _layout("GitHub Raw Explorer", body)


def owner_page(owner: Owner, repos: list[Repository], readme: str | None = None) -> str:
    parts: list[str] = ["<main>"]

    if owner.avatar_url:
        parts.append(
            f'<img class="avatar" src="{escape(owner.avatar_url)}" width="50" alt="">'
        )
    if owner.name:
        parts.append(f"<h1>{escape(owner.name)}</h1><h3>{escape(owner.login)}</h3>")
    else:
        parts.append(f"<h1>{escape(owner.login)}</h1>")
    if owner.bio:
        parts.append(f"<p>{escape(owner.bio)}</p>")

    parts.append(_readme(readme))

    if owner.public_repos > 0:
        parts.append(f"<h3>Repositories ({owner.public_repos})</h3>")
        if len(repos) < owner.public_repos:
            parts.append(
                f'<p class="meta">Showing the {len(repos)} most recently pushed.</p>'
            )
        for repo in repos:
            fork = " (Fork)" if repo.fork else ""
            link = _branch_link(repo.owner.login, repo.name, repo.default_branch)
            parts.append('<div class="repo">')
            parts.append(
                f'<a class="no-color-link" href="{escape(link)}">'
                f"<h3>{escape(repo.name)}{fork}</h3></a>"
            )
            if repo.description:
                parts.append(f"<p>{escape(repo.description)}</p>")
            parts.append(_stats(repo))
            parts.append("</div>")
    else:
        parts.append(f"<h2>{escape(owner.login)} has no public repositories, yet.</h2>")

    parts.append("</main>")
    return _layout(owner.login, "".join(parts))


def repo_page(
    repo: Repository,
    branch: str,
    branches: list[str],
    tree_html: str,
    readme: str | None = None,
    directory: str = "",
) -> str:
    """Render the repository listing page.

    Args:
        repo: repository metadata
        branch: the branch being shown
        branches: every branch, for the branch switcher
        tree_html: output of ``render_html_tree``
        readme: rendered README HTML of *directory*, if any
        directory: subdirectory being shown, "" for the root
    """
    owner = repo.owner.login
    parts: list[str] = ["<main>"]

    parts.append(
        f'<b><a class="no-color-link" href="/{escape(quote(owner))}">'
        f"{escape(owner)}</a>/</b>"
    )
    parts.append(f"<h1>{escape(repo.name)}</h1>")
    if repo.fork and repo.parent is not None:
        parent = repo.parent
        link = _branch_link(parent.owner.login, parent.name, parent.default_branch)
        parts.append(
            f'<p><i>Forked from <a href="{escape(link)}">'
            f"{escape(parent.full_name)}</a></i></p>"
        )
    if repo.description:
        parts.append(f"<p>{escape(repo.description)}</p>")
    parts.append(_stats(repo))

    parts.append(f"<p>On <b>{escape(branch)}</b> branch</p>")
    parts.append('<details><summary>Branches</summary><ul style="padding-left: 25px;">')
    for name in branches:
        link = _branch_link(owner, repo.name, name)
        parts.append(
            f'<li><a class="no-color-link" href="{escape(link)}">{escape(name)}</a></li>'
        )
    parts.append("</ul></details>")

    heading = f"Browse Code: {directory}/" if directory else "Browse Code"
    parts.append(f"<details open><summary>{escape(heading)}</summary>{tree_html}</details>")
    parts.append(_readme(readme))
    parts.append("</main>")

    title = f"{repo.full_name} @ {branch}"
    if directory:
        title += f": {directory}"
    return _layout(title, "".join(parts))


def tree_text_page(full_name: str, ref: str, lines: list[str]) -> str:
    """Render the output of ``render_lines`` as a preformatted page."""
    header = escape(f"{full_name} ({ref})")
    tree = "\n".join([header, *lines])
    return _layout(f"{full_name} @ {ref}", f'<pre class="tree">{tree}</pre>')


def error_page(status: int, reason: str, detail: str | None = None) -> str:
    body = (
        '<div style="display: flex; flex-direction: column; align-items: center">'
        f"<h2>{status}: {escape(reason.upper())}</h2>"
    )
    if detail:
        body += f"<p>{escape(detail)}</p>"
    return _layout(reason, body + "</div>")
