"""Prompts for AI edits of an existing portfolio.

An edit sends the whole current document back with a change request and
asks for the whole modified document. Edit output is token-capped like any
other generation, so a truncated edit is resumed with
``build_edit_continuation_prompt`` and merged the same way as a truncated
portfolio.
"""

from .completeness import AGENCY_NAME
from .continuation_prompt import PARTIAL_END_MARKER, PARTIAL_START_MARKER
from .prompts import RESPONSE_FORMAT


def build_edit_prompt(html: str, edit_request: str) -> str:
    return "\n\n".join([
        "You are a web design assistant that modifies HTML/CSS based on user requests.\n"
        "The user has provided their current portfolio HTML and wants the following changes:\n"
        f'"{edit_request}"',
        f"CURRENT HTML:\n{html}",
        "EDIT RULES:\n"
        "- Apply ONLY the requested changes; keep everything else as it is\n"
        "- Keep every image src and every [PROJECT_n_...] placeholder unchanged\n"
        f"- Keep the existing {AGENCY_NAME} footer exactly as it is\n"
        "- Return the complete modified document, not a diff",
        RESPONSE_FORMAT,
    ])


def build_edit_continuation_prompt(partial_html: str, edit_request: str) -> str:
    """Ask the model to finish a modified document that was cut off."""
    return "\n\n".join([
        "CONTINUE THE MODIFIED HTML EXACTLY WHERE IT STOPS. DO NOT restart the document.",
        f'The edit being applied: "{edit_request}"',
        f"INCOMPLETE MODIFIED HTML:\n{PARTIAL_START_MARKER}\n{partial_html}\n{PARTIAL_END_MARKER}",
        "CONTINUATION INSTRUCTIONS:\n"
        "1. Start with the very next characters after the last character above\n"
        "2. Do not repeat the DOCTYPE, <html>, <head> or any content already written\n"
        "3. Close any open tags and sections\n"
        f"4. Keep the {AGENCY_NAME} footer from the original document before </body>\n"
        "5. End with </body> and </html>",
        "RETURN FORMAT: only the remaining HTML, no explanations, no markdown code blocks.",
    ])
