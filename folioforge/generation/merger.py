"""Stitching a continuation onto a truncated document.

Continuation output often re-emits document boilerplate even when told not
to. ``merge`` strips that boilerplate from the front of the continuation,
appends it to the partial, and guarantees the closing ``</body>`` and
``</html>`` tags exist. There is no attempt to dedupe overlapping content.
"""

import re

# Applied in order, each anchored at the start of the (already stripped) text.
_LEADING_BOILERPLATE = (
    re.compile(r"^<!DOCTYPE[^>]*>", re.IGNORECASE),
    re.compile(r"^<html[^>]*>", re.IGNORECASE),
    re.compile(r"^<head[^>]*>.*?</head>", re.IGNORECASE | re.DOTALL),
    re.compile(r"^<body[^>]*>", re.IGNORECASE),
)

_FENCE_OPEN_HTML_RE = re.compile(r"^```html\n")
_FENCE_OPEN_RE = re.compile(r"^```\n")
_FENCE_CLOSE_RE = re.compile(r"\n```$")


def strip_code_fences(text: str) -> str:
    """Trim model output and drop a surrounding markdown code fence, if any."""
    cleaned = text.strip()
    if cleaned.startswith("```html"):
        cleaned = _FENCE_OPEN_HTML_RE.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    elif cleaned.startswith("```"):
        cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    return cleaned


def strip_leading_boilerplate(continuation: str) -> str:
    """Remove a re-emitted doctype, ``<html>``, ``<head>`` block and ``<body>`` from the front."""
    cleaned = continuation.strip()
    for pattern in _LEADING_BOILERPLATE:
        cleaned = pattern.sub("", cleaned, count=1).strip()
    return cleaned


def merge(partial: str, continuation: str) -> str:
    """
    Join a truncated document and its continuation into one document.

    The result always contains ``</body>`` and ``</html>`` and is never
    shorter than the trimmed partial.
    """
    merged = partial.strip() + strip_leading_boilerplate(continuation)
    if "</body>" not in merged:
        merged += "\n</body>"
    if "</html>" not in merged:
        merged += "\n</html>"
    return merged
