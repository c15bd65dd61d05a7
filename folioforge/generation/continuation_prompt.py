"""Continuation prompt: asks the model to resume a truncated portfolio.

The builder re-analyzes the partial document so the prompt can tell the
model exactly which landmarks are still missing. Only the orchestrator
depends on the output, and only as plain text.
"""

import json
import random
from datetime import date
from typing import Optional

from ..schemas.generation import GenerationContext
from .completeness import AGENCY_NAME, TAG_BALANCE_THRESHOLD, analyze

CREATIVE_EMOJIS = (
    "🎨", "✨", "🚀", "💫", "🎯", "💡", "🌟", "🎪", "🎭", "🖌️", "📐", "🎬", "📸",
)

PARTIAL_START_MARKER = "---START OF INCOMPLETE HTML---"
PARTIAL_END_MARKER = "---END OF INCOMPLETE HTML---"

FOOTER_STYLE = (
    "text-align: center; font-size: 12px; color: #888; margin-top: 40px; "
    "padding: 20px 0; border-top: 1px solid #eee;"
)


def build_required_footer(
    name: Optional[str],
    year: Optional[int] = None,
    emoji: Optional[str] = None,
) -> str:
    """The exact attribution line every portfolio must end with."""
    if year is None:
        year = date.today().year
    if emoji is None:
        emoji = random.choice(CREATIVE_EMOJIS)
    return f"{year} {name or '[Name]'} — product of {AGENCY_NAME}. All rights reserved. {emoji}"


def build_continuation_prompt(
    partial_html: str,
    context: GenerationContext,
    *,
    year: Optional[int] = None,
    emoji: Optional[str] = None,
) -> str:
    """
    Render the instruction text for one continuation call.

    Args:
        partial_html: The current (truncated) document, embedded verbatim.
        context: Original generation parameters to restate.
        year: Footer year; defaults to the current year.
        emoji: Footer emoji; defaults to a random pick from ``CREATIVE_EMOJIS``.

    Returns:
        The prompt text. Deterministic once *year* and *emoji* are pinned.
    """
    verdict = analyze(partial_html)
    footer = build_required_footer(context.person_name, year=year, emoji=emoji)

    missing = []
    if not verdict.structure.has_footer:
        missing.append(f'- MISSING REQUIRED FOOTER: Must add footer with exact text: "{footer}"')
    if not verdict.structure.has_body_close:
        missing.append("- Missing closing </body> tag")
    if not verdict.structure.has_html_close:
        missing.append("- Missing closing </html> tag")
    if verdict.stats.tag_balance < TAG_BALANCE_THRESHOLD:
        unclosed_pct = round((1 - verdict.stats.tag_balance) * 100)
        missing.append(f"- Approximately {unclosed_pct}% of tags are unclosed")

    sections = [
        "CONTINUE GENERATING THE INCOMPLETE HTML PORTFOLIO:\n\n"
        "CRITICAL INSTRUCTIONS:\n"
        "1. You are continuing an incomplete HTML generation that was cut off\n"
        "2. DO NOT restart or regenerate from the beginning\n"
        "3. Analyze the incomplete HTML and continue from where it left off\n"
        "4. Complete all missing sections and fix any structural issues\n"
        "5. Ensure the final result is a complete, valid HTML document\n"
        "6. Maintain consistency with the existing style and structure",

        f"INCOMPLETE HTML TO CONTINUE:\n{PARTIAL_START_MARKER}\n{partial_html}\n{PARTIAL_END_MARKER}",

        "ANALYSIS OF WHAT'S MISSING:\n" + "\n".join(missing)
        + f"\n\nCOMPLETION STATUS: {verdict.estimated_completion}% complete",

        "MANDATORY FOOTER REQUIREMENTS:\n"
        "- Add this EXACT footer before closing </body>:\n"
        f'  <footer style="{FOOTER_STYLE}">\n'
        f"    {footer}\n"
        "  </footer>",

        "ORIGINAL PROJECT REQUIREMENTS:\n"
        f"- Personal Info: {context.person_name} - {context.title}\n"
        f"- Number of Projects: {context.project_count}\n"
        f"- Style Preferences: {json.dumps(context.style_preferences, ensure_ascii=False)}",

        "CONTINUATION INSTRUCTIONS:\n"
        "1. Continue the HTML from exactly where it was cut off\n"
        "2. Complete any unfinished sections\n"
        "3. Add the MANDATORY footer with exact text above\n"
        "4. Add missing closing tags (</body>, </html>, etc.)\n"
        "5. Ensure all projects are included\n"
        "6. Maintain the same design style and structure\n"
        "7. Fix any broken HTML tags or syntax errors\n"
        "8. Return ONLY the completion part that should be appended to fix the incomplete HTML\n"
        "9. If adding new sections, maintain consistent styling\n"
        "10. Ensure all images have proper alt text\n"
        "11. Verify all links work properly\n\n"
        "RETURN FORMAT: Only return the HTML content needed to complete the incomplete "
        "portfolio. Do not include the original partial content.",
    ]
    return "\n\n".join(sections)
