"""Tests for fragment merging and model-output cleanup."""

import pytest

from folioforge.generation.completeness import analyze
from folioforge.generation.merger import merge, strip_code_fences, strip_leading_boilerplate
from tests.conftest import FOOTER, make_truncated_html


class TestMerge:

    @pytest.mark.parametrize("partial, continuation", [
        ("<html><body><p>a", "b</p>"),
        ("<html><body><p>a", ""),
        ("", ""),
        ("<html><body></body></html>", "<p>after</p>"),
        ("  <html><body>  ", "   "),
    ])
    def test_output_has_closing_tags_and_never_shrinks(self, partial, continuation):
        merged = merge(partial, continuation)
        assert "</body>" in merged
        assert "</html>" in merged
        assert len(merged) >= len(partial.strip())

    def test_plain_concatenation(self):
        merged = merge("<html><body><p>Hel", "lo</p></body></html>")
        assert merged == "<html><body><p>Hello</p></body></html>"

    def test_appends_missing_closing_tags_in_order(self):
        merged = merge("<html><body><p>a", "b</p>")
        assert merged == "<html><body><p>ab</p>\n</body>\n</html>"

    def test_only_missing_html_close_is_appended(self):
        merged = merge("<html><body><p>a", "</p></body>")
        assert merged.endswith("</body>\n</html>")
        assert merged.count("</body>") == 1

    def test_partial_is_trimmed(self):
        merged = merge("  <html><body><p>a  \n", "</p></body></html>")
        assert merged == "<html><body><p>a</p></body></html>"

    def test_length_bound_is_against_trimmed_partial(self):
        partial = "<html><body><p>x</p>" + " " * 60
        merged = merge(partial, "</body></html>")
        assert merged == "<html><body><p>x</p></body></html>"
        assert len(merged) < len(partial)
        assert len(merged) >= len(partial.strip())

    def test_strips_restarted_document_boilerplate(self):
        continuation = (
            "<!DOCTYPE html>\n<html lang=\"en\">\n<head><title>x</title>\n<style>a{}</style></head>\n"
            "<body class=\"page\">\n<p>more</p></body></html>"
        )
        merged = merge("<html><body><p>start</p>", continuation)
        assert merged == "<html><body><p>start</p><p>more</p></body></html>"

    def test_boilerplate_in_the_middle_is_kept(self):
        merged = merge("<html><body>", "<p>x</p><body>")
        assert "<p>x</p><body>" in merged

    def test_merged_truncated_document_becomes_complete(self):
        partial = make_truncated_html()
        continuation = "ished</h2></section>\n" + FOOTER + "\n</body>\n</html>"
        merged = merge(partial, continuation)
        assert merged.startswith(partial.strip())
        assert analyze(merged).is_complete is True


class TestStripLeadingBoilerplate:

    def test_case_insensitive(self):
        assert strip_leading_boilerplate("<!doctype html><HTML><BODY><p>x</p>") == "<p>x</p>"

    def test_head_block_spanning_lines(self):
        text = "<head>\n<meta charset=\"utf-8\">\n</head>\n<main>x</main>"
        assert strip_leading_boilerplate(text) == "<main>x</main>"

    def test_header_element_is_not_a_head_block(self):
        text = "<header>Top</header><main>x</main>"
        assert strip_leading_boilerplate(text) == text


class TestStripCodeFences:

    def test_html_fence(self):
        assert strip_code_fences("```html\n<p>x</p>\n```") == "<p>x</p>"

    def test_bare_fence(self):
        assert strip_code_fences("```\n<p>x</p>\n```") == "<p>x</p>"

    def test_surrounding_whitespace(self):
        assert strip_code_fences("\n  ```html\n<p>x</p>\n```  \n") == "<p>x</p>"

    def test_unfenced_text_is_only_trimmed(self):
        assert strip_code_fences("  <p>x</p>\n") == "<p>x</p>"

    def test_truncated_output_without_closing_fence(self):
        assert strip_code_fences("```html\n<html><body><p>cut") == "<html><body><p>cut"

    def test_inner_fences_are_kept(self):
        text = "<pre>\n```\ncode\n```\n</pre>"
        assert strip_code_fences(text) == text
