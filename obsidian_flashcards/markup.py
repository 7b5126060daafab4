"""
Markdown rendering and math conversion for card fields.

Card text is rendered to HTML with markdown-it-py, then the math
delimiters Obsidian uses ($$...$$ and $...$) are rewritten into the
\\(...\\) form Anki's MathJax understands.
"""

from __future__ import annotations

import re

from markdown_it import MarkdownIt
from mdit_py_plugins.tasklists import tasklists_plugin

MATH_BLOCK_RE = re.compile(r'\$\$(.*)\$\$')
MATH_INLINE_RE = re.compile(r'\$(.*)\$')


class MarkdownRenderer:
    """Markdown → HTML with bare-URL linking, GFM tables and task lists."""

    def __init__(self):
        self.md = (
            MarkdownIt("commonmark", {"html": True, "linkify": True})
            .enable(["linkify", "table"])
            .use(tasklists_plugin)
        )

    def render(self, text: str) -> str:
        return self.md.render(text).rstrip("\n")


def math_to_anki(text: str) -> str:
    """
    Convert $$...$$ and $...$ spans into \\(...\\).

    Matching is greedy within a line: the span runs from the first
    delimiter to the last one on that line.
    """
    text = MATH_BLOCK_RE.sub(r'\\(\1\\)', text)
    text = MATH_INLINE_RE.sub(r'\\(\1\\)', text)
    return text
