"""Post-processing of model answers into Telegram MarkdownV2 messages.

Three transforms run in order: relative documentation links are made
absolute, Markdown headings are demoted to bold lines (Telegram has no
headings), and the text is escaped for MarkdownV2 while keeping links
clickable.
"""

import re

from .config import config

_RELATIVE_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_ESCAPE_LINK_RE = re.compile(r"\[([^\]]*)\]\(([^)\s]+)\)")
_HEADING_RE = re.compile(r"^#{1,6}[ \t]+(.+?)[ \t]*$", re.MULTILINE)

# Order matters only in that each rule inserts backslashes, never the
# characters matched by a later rule.
_ESCAPE_RULES = (
    (".", "\\."),
    ("* ", "\\* "),
    ("-", "\\-"),
    ("[", "\\["),
    ("]", "\\]"),
    ("(", "\\("),
    (")", "\\)"),
)


def fix_relative_links(text: str, base_url: str | None = None) -> str:
    """Prefix root-relative Markdown link targets with the docs base URL.

    ``[a](/x)`` becomes ``[a](<base>/x)``. Absolute, protocol-relative
    (``//host``) and other links are left unchanged.

    Returns:
        The text with rewritten links.
    """
    if not text:
        return ""
    if base_url is None:
        base_url = config.DOCS_BASE_URL
    base_url = base_url.rstrip("/")

    def _rewrite(match: re.Match[str]) -> str:
        link_text, link_url = match.group(1), match.group(2)
        if link_url.startswith("/") and not link_url.startswith("//"):
            return f"[{link_text}]({base_url}{link_url})"
        return match.group(0)

    return _RELATIVE_LINK_RE.sub(_rewrite, text)


def demote_headings(text: str) -> str:
    """Rewrite ``# Heading`` lines (levels 1-6) as ``*Heading*``.

    Returns:
        The text without Markdown heading markers.
    """
    if not text:
        return ""
    return _HEADING_RE.sub(lambda match: f"*{match.group(1).strip()}*", text)


def _escape_plain(text: str) -> str:
    for target, replacement in _ESCAPE_RULES:
        text = text.replace(target, replacement)
    return text


def escape_markdown_v2(text: str) -> str:
    """Escape reserved characters while leaving Markdown links intact.

    Links are pulled out first, the surrounding text is escaped piece by
    piece, and the untouched links are put back between the pieces. Text
    with no reserved characters is returned unchanged. The transform is
    meant to run exactly once; escaping escaped output adds more
    backslashes.

    Returns:
        The MarkdownV2-safe text.
    """
    if not text:
        return ""

    links: list[str] = []
    segments: list[str] = []
    cursor = 0
    for match in _ESCAPE_LINK_RE.finditer(text):
        segments.append(text[cursor : match.start()])
        links.append(match.group(0))
        cursor = match.end()
    segments.append(text[cursor:])

    escaped_segments = [_escape_plain(segment) for segment in segments]

    parts = [escaped_segments[0]]
    for link, segment in zip(links, escaped_segments[1:], strict=True):
        parts.extend((link, segment))
    return "".join(parts)


def prepare_answer(text: str, base_url: str | None = None) -> str:
    """Apply link fixing and heading demotion, but not escaping.

    Returns:
        The readable answer, as stored in conversation history.
    """
    return demote_headings(fix_relative_links(text, base_url))


def format_for_chat(text: str, base_url: str | None = None) -> str:
    """Run the full post-processing chain on a model answer.

    Returns:
        Text ready to send with ``parse_mode=MarkdownV2``.
    """
    return escape_markdown_v2(prepare_answer(text, base_url))
