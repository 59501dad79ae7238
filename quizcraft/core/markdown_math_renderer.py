"""Markdown + LaTeX rendering helpers for question text shown in the browser.

Architecture note:
    Question text is rendered to HTML on the server and typeset by MathJax in
    the page, so a quiz looks the same in the list, the taking view and the
    answer key. Code snippets are never run through markdown; they are
    escaped verbatim into a ``<pre><code>`` block.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

from markdown_it import MarkdownIt

from quizcraft.core.models import Question


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""

        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_code_snippet(self, code: str | None) -> str | None:
        if not code:
            return None
        return f"<pre class=\"code-snippet\"><code>{escape(code)}</code></pre>"

    def render_question(self, question: Question) -> dict[str, str | None]:
        return {
            "text_html": self.render_fragment(question.text),
            "code_html": self.render_code_snippet(question.code_snippet),
        }


renderer = MarkdownMathRenderer()
