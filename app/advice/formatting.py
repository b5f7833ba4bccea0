from __future__ import annotations

import re

_HEADING_RE = re.compile(r"^#{1,6}[ \t]*(.*?)$", flags=re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_ITALIC_RE = re.compile(r"\*(.*?)\*")


def format_response(text: str) -> str:
    """Convert the model's Markdown-ish reply into inline markup.

    Rules run in a fixed order: headings are line-anchored so they go before
    newline substitution, and both go before emphasis so ``**`` inside an
    already converted heading is still picked up by the bold rule.

    The output is meant to be inserted as raw HTML and is not sanitized.
    """
    formatted = _HEADING_RE.sub(r"<b>\1</b>", text or "")
    formatted = formatted.replace("\n", "<br>")
    formatted = _BOLD_RE.sub(r"<b>\1</b>", formatted)
    formatted = _ITALIC_RE.sub(r"<i>\1</i>", formatted)
    return formatted
