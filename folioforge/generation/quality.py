"""Quality review of finished portfolios.

Runs only on verdict-complete documents, after image injection. Two steps:

- ``apply_fixes`` splices in the cheap repairs (``lang`` attribute, charset
  and viewport meta tags, a page title, image alt text). Fixes are inserted
  into the original text rather than re-serialized from the parse tree, so
  everything else stays exactly as the model wrote it.
- ``assess`` parses the result with BeautifulSoup and runs a fixed list of
  accessibility and technical checks. The score is the share of checks that
  pass.

Nothing here can fail a generation: the report is informational.
"""

import logging
import re
from html import escape
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup

from ..schemas.generation import QualityIssue, QualityReport
from .completeness import AGENCY_NAME

logger = logging.getLogger(__name__)

DEFAULT_ALT_TEXT = "Portfolio image"
DEFAULT_LANG = "en"
CHARSET_META = '<meta charset="UTF-8">'
VIEWPORT_META = '<meta name="viewport" content="width=device-width, initial-scale=1.0">'

_HTML_OPEN_RE = re.compile(r"<html\b", re.IGNORECASE)
_HEAD_OPEN_RE = re.compile(r"<head\b[^>]*>", re.IGNORECASE)
_IMG_TAG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_ALT_ATTR_RE = re.compile(r"\salt\s*=", re.IGNORECASE)
_HEADING_RE = re.compile(r"^h[1-6]$")

Check = Callable[[BeautifulSoup], Optional[QualityIssue]]


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def _issue(code: str, severity: str, message: str) -> QualityIssue:
    return QualityIssue(code=code, severity=severity, message=message)


def check_alt_text(soup: BeautifulSoup) -> Optional[QualityIssue]:
    missing = [img for img in soup.find_all("img") if img.get("alt") is None]
    if missing:
        return _issue("missing_alt_text", "high", f"{len(missing)} image(s) have no alt attribute")
    return None


def check_h1(soup: BeautifulSoup) -> Optional[QualityIssue]:
    count = len(soup.find_all("h1"))
    if count == 0:
        return _issue("missing_h1", "high", "Page has no <h1> heading")
    if count > 1:
        return _issue("multiple_h1", "medium", f"Page has {count} <h1> headings")
    return None


def check_heading_order(soup: BeautifulSoup) -> Optional[QualityIssue]:
    """Heading levels may go down by any amount but up by one at a time."""
    levels = [int(tag.name[1]) for tag in soup.find_all(_HEADING_RE)]
    for previous, current in zip(levels, levels[1:]):
        if current > previous + 1:
            return _issue(
                "heading_hierarchy_skip", "medium",
                f"Heading level jumps from h{previous} to h{current}",
            )
    return None


def check_main_landmark(soup: BeautifulSoup) -> Optional[QualityIssue]:
    if soup.find("main") or soup.find(attrs={"role": "main"}):
        return None
    return _issue("missing_main_landmark", "medium", "No <main> landmark")


def check_viewport(soup: BeautifulSoup) -> Optional[QualityIssue]:
    if soup.find("meta", attrs={"name": "viewport"}):
        return None
    return _issue("missing_viewport", "high", "No viewport meta tag; page will not scale on mobile")


def check_charset(soup: BeautifulSoup) -> Optional[QualityIssue]:
    if soup.find("meta", attrs={"charset": True}):
        return None
    return _issue("missing_charset", "medium", "No charset meta tag")


def check_title(soup: BeautifulSoup) -> Optional[QualityIssue]:
    title = soup.find("title")
    if title and title.get_text(strip=True):
        return None
    return _issue("missing_title", "medium", "Missing or empty <title>")


def check_lang(soup: BeautifulSoup) -> Optional[QualityIssue]:
    root = soup.find("html")
    if root is not None and root.get("lang"):
        return None
    return _issue("missing_lang_attribute", "medium", "<html> has no lang attribute")


def check_footer(soup: BeautifulSoup) -> Optional[QualityIssue]:
    for footer in soup.find_all("footer"):
        if AGENCY_NAME.lower() in footer.get_text().lower():
            return None
    return _issue("missing_footer", "high", f"No <footer> carrying the {AGENCY_NAME} attribution")


def check_placeholder_text(soup: BeautifulSoup) -> Optional[QualityIssue]:
    if "lorem ipsum" in soup.get_text().lower():
        return _issue("placeholder_content", "medium", "Page still contains lorem ipsum text")
    return None


def check_empty_links(soup: BeautifulSoup) -> Optional[QualityIssue]:
    empty = [
        a for a in soup.find_all("a")
        if not a.get_text(strip=True) and not a.get("aria-label") and not a.find("img")
    ]
    if empty:
        return _issue("empty_link", "high", f"{len(empty)} link(s) have no text or label")
    return None


CHECKS: Tuple[Tuple[str, Check], ...] = (
    ("alt_text", check_alt_text),
    ("h1", check_h1),
    ("heading_order", check_heading_order),
    ("main_landmark", check_main_landmark),
    ("viewport", check_viewport),
    ("charset", check_charset),
    ("title", check_title),
    ("lang", check_lang),
    ("footer", check_footer),
    ("placeholder_text", check_placeholder_text),
    ("empty_links", check_empty_links),
)


def quality_status(score: int) -> str:
    if score >= 90:
        return "excellent"
    if score >= 80:
        return "good"
    if score >= 70:
        return "fair"
    if score >= 60:
        return "poor"
    return "critical"


def assess(html: str) -> QualityReport:
    """Run every check in ``CHECKS`` against *html*."""
    soup = BeautifulSoup(html, "html.parser")
    issues: List[QualityIssue] = []
    passed: List[str] = []
    for name, check in CHECKS:
        issue = check(soup)
        if issue is None:
            passed.append(name)
        else:
            issues.append(issue)

    score = round(len(passed) / len(CHECKS) * 100)
    return QualityReport(score=score, status=quality_status(score), issues=issues, passed=passed)


# ---------------------------------------------------------------------------
# Automatic fixes
# ---------------------------------------------------------------------------


def _add_alt_text(html: str) -> Tuple[str, int]:
    added = 0

    def repl(match: re.Match) -> str:
        nonlocal added
        tag = match.group(0)
        if _ALT_ATTR_RE.search(tag):
            return tag
        added += 1
        return f'{tag[:4]} alt="{DEFAULT_ALT_TEXT}"{tag[4:]}'

    return _IMG_TAG_RE.sub(repl, html), added


def apply_fixes(html: str, person_name: Optional[str] = None) -> Tuple[str, List[str]]:
    """Splice cheap repairs into *html*. Returns the new text and what was fixed.

    Head additions need an existing ``<head>`` tag; without one they are
    skipped. The title is only added when *person_name* is known.
    """
    soup = BeautifulSoup(html, "html.parser")
    fixes: List[str] = []

    root = soup.find("html")
    if root is not None and root.get("lang") is None:
        html = _HTML_OPEN_RE.sub(f'<html lang="{DEFAULT_LANG}"', html, count=1)
        fixes.append("Added language attribute")

    head_additions: List[Tuple[str, str]] = []
    if not soup.find("meta", attrs={"charset": True}):
        head_additions.append((CHARSET_META, "Added charset meta tag"))
    if not soup.find("meta", attrs={"name": "viewport"}):
        head_additions.append((VIEWPORT_META, "Added viewport meta tag"))
    if person_name and soup.find("title") is None:
        head_additions.append((f"<title>{escape(person_name)} - Portfolio</title>", "Added page title"))

    head = _HEAD_OPEN_RE.search(html) if head_additions else None
    if head:
        inserted = "".join("\n" + markup for markup, _ in head_additions)
        html = html[:head.end()] + inserted + html[head.end():]
        fixes.extend(note for _, note in head_additions)

    html, alt_count = _add_alt_text(html)
    if alt_count:
        fixes.append(f"Added alt text to {alt_count} image(s)")

    return html, fixes


def review(html: str, person_name: Optional[str] = None) -> Tuple[str, QualityReport]:
    """Fix, then assess. The report describes the document that is returned."""
    fixed, fixes = apply_fixes(html, person_name)
    report = assess(fixed).model_copy(update={"fixes_applied": fixes})
    logger.info(
        "Quality score %d/100 (%s), %d fix(es) applied",
        report.score, report.status, len(fixes),
        extra={"issues": [issue.code for issue in report.issues], "fixes": fixes},
    )
    return fixed, report
