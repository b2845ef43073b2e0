"""
Markdown rendering for the analyst narrative.

The narrative is split on ``##`` headers; each section is rendered with
Python-Markdown and wrapped in ``<div class="section">`` so the email
stylesheet can box it. Input is HTML-escaped before rendering, so raw tags
in model output show up as text.
"""

import html
import re

import markdown as md

MARKDOWN_EXTENSIONS = ["sane_lists"]

_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*+]|\d+\.)\s+")


def _separate_lists(text: str) -> str:
    """Insert a blank line where a list starts right under a paragraph line.

    Python-Markdown only opens a list after a blank line; model output
    usually puts "Key points:" directly above its bullets.
    """
    lines: list[str] = []
    previous = ""
    for line in text.splitlines():
        if (
            _LIST_ITEM_RE.match(line)
            and previous.strip()
            and not _LIST_ITEM_RE.match(previous)
            and not previous.startswith((" ", "\t"))
            and not previous.lstrip().startswith("#")
        ):
            lines.append("")
        lines.append(line)
        previous = line
    return "\n".join(lines)


def render_markdown(text: str) -> str:
    """Render one block of markdown to an HTML fragment."""
    if not (text or "").strip():
        return ""
    escaped = html.escape(_separate_lists(text), quote=False)
    return md.markdown(escaped, extensions=MARKDOWN_EXTENSIONS)


def inline_markup(text: str) -> str:
    """Render a single line (e.g. a heading) without the wrapping <p>."""
    rendered = render_markdown(text)
    if rendered.startswith("<p>") and rendered.endswith("</p>"):
        return rendered[3:-4]
    return rendered


def markdown_to_html(markdown_text: str) -> str:
    """Convert analyst markdown to HTML fragments for the report body."""
    parts: list[str] = []
    for heading, body in split_sections(markdown_text):
        rendered = render_markdown(body)
        if heading:
            parts.append(
                f'<div class="section"><h2>{inline_markup(heading)}</h2>\n'
                f"{rendered}\n</div>"
            )
        elif rendered:
            parts.append(rendered)
    return "\n".join(parts)


def split_sections(markdown_text: str) -> list[tuple[str, str]]:
    """Split markdown on ``##`` headers into (heading, body) pairs.

    Text before the first header is returned under an empty heading.
    """
    sections: list[tuple[str, list[str]]] = [("", [])]
    for line in (markdown_text or "").splitlines():
        stripped = line.strip()
        if stripped.startswith("## "):
            sections.append((stripped[3:].strip(), []))
        else:
            sections[-1][1].append(line)

    return [
        (heading, "\n".join(body).strip())
        for heading, body in sections
        if heading or "\n".join(body).strip()
    ]
