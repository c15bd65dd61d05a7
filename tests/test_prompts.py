"""Tests for the initial generation and continuation prompt builders."""

import json

from folioforge.generation.continuation_prompt import (
    CREATIVE_EMOJIS,
    PARTIAL_END_MARKER,
    PARTIAL_START_MARKER,
    build_continuation_prompt,
    build_required_footer,
)
from folioforge.generation.prompts import build_generation_prompt, format_social_links
from folioforge.schemas.generation import GenerationContext
from folioforge.schemas.portfolio import PersonalInfo, PortfolioRequest
from tests.conftest import make_complete_html, make_portfolio, make_truncated_html


def _context(**overrides) -> GenerationContext:
    values = {
        "person_name": "Ada Moreau",
        "title": "Brand Designer",
        "project_count": 3,
        "style_preferences": {"color_scheme": "warm"},
    }
    values.update(overrides)
    return GenerationContext(**values)


# ---------------------------------------------------------------------------
# Footer
# ---------------------------------------------------------------------------


class TestRequiredFooter:

    def test_pinned_values(self):
        footer = build_required_footer("Ada Moreau", year=2026, emoji="🚀")
        assert footer == "2026 Ada Moreau — product of Interract Agency. All rights reserved. 🚀"

    def test_missing_name_uses_placeholder(self):
        assert build_required_footer(None, year=2026, emoji="✨").startswith("2026 [Name] — ")
        assert build_required_footer("", year=2026, emoji="✨").startswith("2026 [Name] — ")

    def test_random_emoji_comes_from_palette(self):
        footer = build_required_footer("Ada", year=2026)
        assert footer.rsplit(" ", 1)[1] in CREATIVE_EMOJIS


# ---------------------------------------------------------------------------
# Continuation prompt
# ---------------------------------------------------------------------------


class TestContinuationPrompt:

    def test_embeds_partial_verbatim_between_markers(self):
        partial = make_truncated_html()
        prompt = build_continuation_prompt(partial, _context(), year=2026, emoji="🎯")
        start = prompt.index(PARTIAL_START_MARKER) + len(PARTIAL_START_MARKER) + 1
        end = prompt.index(PARTIAL_END_MARKER) - 1
        assert prompt[start:end] == partial

    def test_deterministic_when_pinned(self):
        partial = make_truncated_html()
        first = build_continuation_prompt(partial, _context(), year=2026, emoji="🎯")
        second = build_continuation_prompt(partial, _context(), year=2026, emoji="🎯")
        assert first == second

    def test_sections_in_order(self):
        prompt = build_continuation_prompt(make_truncated_html(), _context(), year=2026, emoji="🎯")
        positions = [
            prompt.index("DO NOT restart"),
            prompt.index(PARTIAL_START_MARKER),
            prompt.index("ANALYSIS OF WHAT'S MISSING"),
            prompt.index("MANDATORY FOOTER REQUIREMENTS"),
            prompt.index("ORIGINAL PROJECT REQUIREMENTS"),
            prompt.index("RETURN FORMAT"),
        ]
        assert positions == sorted(positions)

    def test_lists_missing_landmarks(self):
        prompt = build_continuation_prompt(make_truncated_html(), _context(), year=2026, emoji="🎯")
        assert (
            '- MISSING REQUIRED FOOTER: Must add footer with exact text: '
            '"2026 Ada Moreau — product of Interract Agency. All rights reserved. 🎯"'
        ) in prompt
        assert "- Missing closing </body> tag" in prompt
        assert "- Missing closing </html> tag" in prompt
        assert "COMPLETION STATUS: 75% complete" in prompt

    def test_unclosed_tag_percentage(self):
        partial = "<html><body>" + "<div><p>text" * 60
        prompt = build_continuation_prompt(partial, _context(), year=2026, emoji="🎯")
        # 122 open tags, no closing tags
        assert "- Approximately 100% of tags are unclosed" in prompt

    def test_closed_document_lists_no_missing_landmarks(self):
        prompt = build_continuation_prompt(make_complete_html(), _context(), year=2026, emoji="🎯")
        assert "MISSING REQUIRED FOOTER" not in prompt
        assert "- Missing closing" not in prompt
        assert "COMPLETION STATUS: 100% complete" in prompt

    def test_restates_original_parameters(self):
        prompt = build_continuation_prompt(make_truncated_html(), _context(), year=2026, emoji="🎯")
        assert "- Personal Info: Ada Moreau - Brand Designer" in prompt
        assert "- Number of Projects: 3" in prompt
        assert f"- Style Preferences: {json.dumps({'color_scheme': 'warm'})}" in prompt

    def test_footer_block_uses_name(self):
        prompt = build_continuation_prompt(
            make_truncated_html(), _context(person_name="Zoé Park"), year=2026, emoji="🎯"
        )
        assert "    2026 Zoé Park — product of Interract Agency. All rights reserved. 🎯\n  </footer>" in prompt


# ---------------------------------------------------------------------------
# Initial generation prompt
# ---------------------------------------------------------------------------


class TestGenerationPrompt:

    def test_includes_profile_and_projects(self):
        request = PortfolioRequest(**make_portfolio())
        prompt = build_generation_prompt(request, year=2026, emoji="🎨")
        assert "- Name: Ada Moreau" in prompt
        assert "- Title: Brand Designer" in prompt
        assert 'PROJECT 1: "Lumen Coffee"' in prompt
        assert "- Category: branding" in prompt
        assert "- Tags: identity, packaging" in prompt

    def test_lists_image_placeholders_not_urls(self):
        request = PortfolioRequest(**make_portfolio())
        prompt = build_generation_prompt(request, year=2026, emoji="🎨")
        assert 'src="project_1_final_1"' in prompt
        assert 'src="project_1_process_1"' in prompt
        assert "res.cloudinary.com" not in prompt

    def test_includes_footer_and_response_format(self):
        request = PortfolioRequest(**make_portfolio())
        prompt = build_generation_prompt(request, year=2026, emoji="🎨")
        assert "2026 Ada Moreau — product of Interract Agency. All rights reserved. 🎨" in prompt
        assert prompt.rstrip().endswith("- END immediately with </html>")

    def test_custom_design_request_only_when_given(self):
        plain = build_generation_prompt(PortfolioRequest(**make_portfolio()))
        assert "CUSTOM DESIGN REQUEST" not in plain

        custom = build_generation_prompt(
            PortfolioRequest(**make_portfolio(custom_design_request="Brutalist, black and yellow"))
        )
        assert 'CUSTOM DESIGN REQUEST: "Brutalist, black and yellow"' in custom

    def test_social_links(self):
        info = PersonalInfo(name="Ada", title="Designer", linkedin="ada-m", instagram="@ada")
        assert format_social_links(info) == (
            "LinkedIn: https://linkedin.com/in/ada-m | Instagram: https://instagram.com/ada"
        )
        assert format_social_links(PersonalInfo(name="Ada", title="Designer")) == "No social links provided"
