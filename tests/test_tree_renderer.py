"""Tests for tree_renderer module."""

import re

from GRE.models import TreeEntry
from GRE.tree_builder import build_directory
from GRE.tree_renderer import (
    describe_counts,
    format_size,
    render_html_tree,
    render_lines,
)

TREE = {"a": {"b.txt": 10, "c.txt": 20}, "d.txt": 5}

# Deeper than the default interpreter recursion limit
DEEP_PATH = "/".join(["d"] * 3000) + "/leaf.txt"
BLANK_INDENT = " " * 4


def _strip_tags(line: str) -> str:
    return re.sub(r"<[^>]+>", "", line)


class TestFormatSize:
    def test_bytes(self):
        assert format_size(0) == "0 B"
        assert format_size(1023) == "1023 B"

    def test_kib(self):
        assert format_size(1024) == "1.0 KiB"
        assert format_size(1536) == "1.5 KiB"

    def test_mib(self):
        assert format_size(5 * 1024 * 1024) == "5.0 MiB"

    def test_largest_unit_caps(self):
        assert format_size(2048 * 1024**4) == "2048.0 TiB"


class TestDescribeCounts:
    def test_files_only(self):
        assert describe_counts(2, 0) == "(2 file)"

    def test_dirs_only(self):
        assert describe_counts(0, 3) == "(3 dir)"

    def test_both(self):
        assert describe_counts(1, 2) == "(1 file, 2 dir)"

    def test_empty(self):
        assert describe_counts(0, 0) == "()"


class TestRenderLines:
    def test_empty(self):
        assert render_lines({}, "repo/main") == []

    def test_example_tree(self):
        lines = render_lines(TREE, "repo/main")
        assert lines == [
            "├── <b>a</b>/ (2 file)",
            '│   ├── <a href="repo/main/a/b.txt">b.txt</a> (10 B)',
            '│   └── <a href="repo/main/a/c.txt">c.txt</a> (20 B)',
            '└── <a href="repo/main/d.txt">d.txt</a> (5 B)',
        ]

    def test_last_directory_uses_blank_indent(self):
        lines = render_lines({"README.md": 1, "src": {"main.py": 2}}, "/r")
        assert lines[1].startswith("└── <b>src</b>/")
        assert lines[2].startswith("    └── ")

    def test_prefix_accumulates(self):
        tree = {"a": {"b": {"c.txt": 1}, "z.txt": 2}, "last.txt": 3}
        text = [_strip_tags(line) for line in render_lines(tree, "")]
        assert text == [
            "├── a/ (1 file, 1 dir)",
            "│   ├── b/ (1 file)",
            "│   │   └── c.txt (1 B)",
            "│   └── z.txt (2 B)",
            "└── last.txt (3 B)",
        ]

    def test_options_off(self):
        lines = render_lines(TREE, "", show_size=False, show_counts=False)
        assert [_strip_tags(line) for line in lines] == [
            "├── a/",
            "│   ├── b.txt",
            "│   └── c.txt",
            "└── d.txt",
        ]

    def test_empty_directory_counts(self):
        lines = render_lines({"empty": {}}, "")
        assert lines == ["└── <b>empty</b>/ ()"]

    def test_names_escaped_and_links_quoted(self):
        lines = render_lines({"a <b>.txt": 1}, "/o/r/main")
        assert lines == [
            '└── <a href="/o/r/main/a%20%3Cb%3E.txt">a &lt;b&gt;.txt</a> (1 B)'
        ]

    def test_very_deep_tree(self):
        tree = build_directory([TreeEntry(path=DEEP_PATH, size=1)])
        lines = render_lines(tree, "/o/r/main")
        assert len(lines) == 3001
        assert lines[0] == "└── <b>d</b>/ (1 dir)"
        assert lines[-1] == (
            BLANK_INDENT * 3000
            + f'└── <a href="/o/r/main/{DEEP_PATH}">leaf.txt</a> (1 B)'
        )

    def test_idempotent(self):
        assert render_lines(TREE, "repo/main") == render_lines(TREE, "repo/main")


class TestRenderHtmlTree:
    def test_structure(self):
        html = render_html_tree(TREE, "/o/r/main")
        assert html.startswith('<ul class="file-list">')
        assert html.count("<ul") == 2
        assert "<details><summary><b>a/</b>" in html
        assert '<a class="no-color-link" href="/o/r/main/a/b.txt">b.txt</a>' in html
        assert '<a class="no-color-link" href="/o/r/main/d.txt">d.txt</a>' in html

    def test_agrees_with_lines(self):
        tree = {"src": {"lib": {"x.py": 2048}, "main.py": 7}, "README.md": 12}
        html = render_html_tree(tree, "/o/r/main")
        lines = render_lines(tree, "/o/r/main")

        hrefs_html = re.findall(r'href="([^"]+)"', html)
        hrefs_lines = re.findall(r'href="([^"]+)"', "\n".join(lines))
        assert hrefs_html == hrefs_lines

        for suffix in ["(1 file, 1 dir)", "(1 file)", "(2.0 KiB)", "(7 B)", "(12 B)"]:
            assert suffix in html
            assert any(line.endswith(suffix) for line in lines)

        # Same entry order in both presentations
        names_html = re.findall(r"<b>([^<]+)/</b>|>([^<>]+)</a>", html)
        names_html = [d or f for d, f in names_html]
        names_lines = [
            re.sub(r"\s*\(.*\)$", "", _strip_tags(line)).lstrip("│├└─ ").rstrip("/")
            for line in lines
        ]
        assert names_html == names_lines

    def test_options_off(self):
        html = render_html_tree(TREE, "", show_size=False, show_counts=False)
        assert "(" not in html

    def test_idempotent(self):
        assert render_html_tree(TREE, "x") == render_html_tree(TREE, "x")

    def test_very_deep_tree(self):
        tree = build_directory([TreeEntry(path=DEEP_PATH, size=1)])
        html = render_html_tree(tree, "/o/r/main")
        assert html.count("<ul") == html.count("</ul>") == 3001
        assert html.count("<details>") == html.count("</details>") == 3000
        assert f'href="/o/r/main/{DEEP_PATH}">leaf.txt</a>' in html
        assert html.endswith("</ul>" + "</details></li></ul>" * 3000)
