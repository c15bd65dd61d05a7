"""Heuristic completeness analysis for generated HTML documents.

Model output is token-capped, so a generated portfolio is often cut off
mid-document. ``analyze`` looks for a fixed set of structural markers and a
rough open/close tag balance, and returns a ``CompletionVerdict`` saying:

- whether the document is complete enough to ship (``is_complete``),
- how far along it looks (``estimated_completion``, 0-100),
- whether a continuation call can resume it (``can_continue``).

Pure and total: any input, including ``None`` and non-strings, yields a
verdict. All marker checks are case-insensitive.
"""

import re
from typing import Any

from ..schemas.generation import CompletionVerdict, StructureFlags, TagStats

AGENCY_NAME = "Interract Agency"

CONTENT_LENGTH_THRESHOLD = 1000
"""Trimmed length above which a document counts as having real content."""

CONTINUE_LENGTH_THRESHOLD = 500
"""
Minimum trimmed length for a continuation to be worth attempting.

Below this the model has produced little more than a head section, and
regenerating from scratch is cheaper than resuming.
"""

TAG_BALANCE_THRESHOLD = 0.8

MISSING_CONTENT_ISSUE = "No HTML content provided"

_OPEN_TAG_RE = re.compile(r"<[^/][^>]*>")
_CLOSE_TAG_RE = re.compile(r"</[^>]*>")
_SELF_CLOSING_RE = re.compile(r"<[^>]*/>")
_TRAILING_TAG_RE = re.compile(r"<[^>]*\Z")

_SCORE_WEIGHTS = (
    ("has_doctype", 5),
    ("has_html_open", 10),
    ("has_head_section", 10),
    ("has_body_open", 15),
    ("has_style_tag", 20),
    ("has_content", 20),
    ("has_footer", 10),
    ("has_body_close", 5),
    ("has_html_close", 5),
)


def fallback_verdict() -> CompletionVerdict:
    """Verdict for empty or non-string input."""
    return CompletionVerdict(
        is_complete=False,
        estimated_completion=0,
        issues=[MISSING_CONTENT_ISSUE],
        can_continue=False,
    )


def count_tags(html: str) -> TagStats:
    """Count open, closing and self-closing tags with loose regexes.

    Self-closing tags also match the open-tag pattern, so they are subtracted
    from the expected closing count rather than from the open count.
    """
    open_tags = len(_OPEN_TAG_RE.findall(html))
    close_tags = len(_CLOSE_TAG_RE.findall(html))
    self_closing = len(_SELF_CLOSING_RE.findall(html))
    expected_close = open_tags - self_closing
    return TagStats(
        total_length=len(html),
        open_tags=open_tags,
        close_tags=close_tags,
        self_closing_tags=self_closing,
        tag_balance=close_tags / max(expected_close, 1),
    )


def _has_unclosed_comment(html: str) -> bool:
    start = html.rfind("<!--")
    return start != -1 and start > html.rfind("-->")


def _ends_abruptly(lowered: str) -> bool:
    return not lowered.endswith(("</html>", "</body>", "-->"))


def analyze(html: Any) -> CompletionVerdict:
    """Produce a completeness verdict for *html*. Never raises."""
    if not html or not isinstance(html, str):
        return fallback_verdict()

    clean = html.strip()
    if not clean:
        return fallback_verdict()
    lowered = clean.lower()

    structure = StructureFlags(
        has_doctype="<!doctype" in lowered,
        has_html_open="<html" in lowered,
        has_html_close="</html>" in lowered,
        has_body_open="<body" in lowered,
        has_body_close="</body>" in lowered,
        has_head_section="<head" in lowered,
        has_style_tag="<style" in lowered,
        has_script_tag="<script" in lowered,
        has_footer=AGENCY_NAME.lower() in lowered or "<footer" in lowered,
    )
    stats = count_tags(clean)
    has_content = len(clean) > CONTENT_LENGTH_THRESHOLD

    issues = []
    if not structure.has_doctype and structure.has_html_open:
        issues.append("Missing DOCTYPE declaration")
    if not structure.has_html_open:
        issues.append("Missing opening <html> tag")
    if not structure.has_head_section:
        issues.append("Missing <head> section")
    if not structure.has_body_open:
        issues.append("Missing opening <body> tag")
    if not structure.has_style_tag and "<link" not in lowered:
        issues.append("No CSS styling detected")
    if not structure.has_footer:
        issues.append(f"Missing required {AGENCY_NAME} footer")
    if not structure.has_body_close:
        issues.append("Missing closing </body> tag")
    if not structure.has_html_close:
        issues.append("Missing closing </html> tag")
    if _TRAILING_TAG_RE.search(clean):
        issues.append("Incomplete HTML tag at end")
    if _has_unclosed_comment(clean):
        issues.append("Unclosed HTML comment")
    if _ends_abruptly(lowered):
        issues.append("Content appears to end abruptly")
    # Tagless text never trips this: the expected count is then zero.
    expected_close = stats.open_tags - stats.self_closing_tags
    if stats.close_tags < expected_close * TAG_BALANCE_THRESHOLD:
        issues.append("Significant number of unclosed HTML tags")

    flags = structure.model_dump()
    flags["has_content"] = has_content
    score = sum(weight for name, weight in _SCORE_WEIGHTS if flags[name])
    if len(issues) > 5:
        score = max(score - 20, 10)
    if not structure.has_body_close or not structure.has_html_close:
        score = min(score, 75)

    can_continue = (
        structure.has_html_open
        and structure.has_body_open
        and len(clean) > CONTINUE_LENGTH_THRESHOLD
    )
    # Up to two residual issues are tolerated once all three hard markers exist.
    is_complete = not issues or (
        structure.has_html_close
        and structure.has_body_close
        and structure.has_footer
        and len(issues) <= 2
    )

    return CompletionVerdict(
        is_complete=is_complete,
        estimated_completion=min(max(score, 0), 100),
        issues=issues,
        can_continue=can_continue,
        structure=structure,
        stats=stats,
    )
