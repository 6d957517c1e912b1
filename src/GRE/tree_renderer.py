"""Directory tree rendering as box-drawing lines or nested HTML lists."""

from __future__ import annotations

from html import escape
from urllib.parse import quote

from GRE.models import Directory
from GRE.tree_builder import count_children

CONNECTOR = "├── "
LAST_CONNECTOR = "└── "
CONTINUATION = "│   "
BLANK = "    "


def format_size(n: int) -> str:
    """Human-readable bytes: integer for B, one decimal for KiB and above."""
    units = ["B", "KiB", "MiB", "GiB", "TiB"]
    f = float(n)
    i = 0
    while f >= 1024.0 and i < len(units) - 1:
        f /= 1024.0
        i += 1
    if i == 0:
        return f"{int(f)} {units[i]}"
    return f"{f:.1f} {units[i]}"


def describe_counts(files: int, dirs: int) -> str:
    """``(2 file)``, ``(1 dir)``, ``(2 file, 1 dir)``; ``()`` when empty."""
    clauses = []
    if files > 0:
        clauses.append(f"{files} file")
    if dirs > 0:
        clauses.append(f"{dirs} dir")
    return f"({', '.join(clauses)})"


def _suffix(value: int | Directory, show_size: bool, show_counts: bool) -> str:
    if isinstance(value, dict):
        return f" {describe_counts(*count_children(value))}" if show_counts else ""
    return f" ({format_size(value)})" if show_size else ""


def _child_link(link: str, name: str) -> str:
    return f"{link}/{quote(name)}"


def _entries(tree: Directory):
    """Iterate ``(name, value, is_last)`` over the children of ``tree``."""
    last = len(tree) - 1
    return iter([
        (name, value, i == last) for i, (name, value) in enumerate(tree.items())
    ])


def render_lines(
    tree: Directory,
    base_link: str,
    show_size: bool = True,
    show_counts: bool = True,
) -> list[str]:
    """Render the tree as one line per entry.

    Example output (markup omitted):
        ├── src/ (2 file)
        │   ├── main.py (120 B)
        │   └── utils.py (2.0 KiB)
        └── README.md (1.1 KiB)

    The walk keeps its own stack of ``(entries, prefix, link)`` frames, so
    depth is bounded only by memory.
    """
    lines: list[str] = []
    stack = [(_entries(tree), "", base_link)]
    while stack:
        entries, prefix, link = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue

        name, value, is_last = entry
        connector = LAST_CONNECTOR if is_last else CONNECTOR
        href = _child_link(link, name)
        suffix = _suffix(value, show_size, show_counts)

        if isinstance(value, dict):
            lines.append(f"{prefix}{connector}<b>{escape(name)}</b>/{suffix}")
            extension = BLANK if is_last else CONTINUATION
            stack.append((_entries(value), prefix + extension, href))
        else:
            lines.append(
                f'{prefix}{connector}<a href="{escape(href)}">{escape(name)}</a>{suffix}'
            )
    return lines


def render_html_tree(
    tree: Directory,
    base_link: str,
    show_size: bool = True,
    show_counts: bool = True,
) -> str:
    """Render the tree as nested ``<ul>`` lists with collapsible directories.

    Entries, links and size/count texts are the same as ``render_lines``.
    """
    parts = ['<ul class="file-list">']
    stack = [(iter(tree.items()), base_link)]
    while stack:
        entries, link = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            parts.append("</ul>")
            if stack:
                parts.append("</details></li>")
            continue

        name, value = entry
        href = _child_link(link, name)
        suffix = escape(_suffix(value, show_size, show_counts))
        if isinstance(value, dict):
            parts.append(
                "<li><details><summary>"
                f'<b>{escape(name)}/</b><span class="meta">{suffix}</span>'
                '</summary><ul class="file-list">'
            )
            stack.append((iter(value.items()), href))
        else:
            parts.append(
                f'<li><a class="no-color-link" href="{escape(href)}">'
                f'{escape(name)}</a><span class="meta">{suffix}</span></li>'
            )
    return "".join(parts)
