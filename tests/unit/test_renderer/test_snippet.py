"""Unit tests for snippet generation."""

from src.renderer.snippet import clean_markdown, generate_snippet


class TestCleanMarkdown:
    """Tests for clean_markdown."""

    def test_strips_reader_noise(self) -> None:
        """Test headers, headings, rules and images are removed."""
        content = (
            "URL Source: https://example.com\n"
            "Published Time: 2026-03-01\n"
            "Markdown Content:\n"
            "# Heading\n"
            "---\n"
            "![logo](https://example.com/logo.png)Read [the docs](https://d.example)."
        )

        assert clean_markdown(content) == "Read the docs."

    def test_collapses_blank_lines(self) -> None:
        """Test runs of blank lines shrink to one."""
        assert clean_markdown("a\n\n\n\nb") == "a\n\nb"


class TestGenerateSnippet:
    """Tests for generate_snippet."""

    def test_blank(self) -> None:
        """Test that blank input yields an empty snippet."""
        assert generate_snippet("   \n") == ""

    def test_short_text_unchanged(self) -> None:
        """Test text under the limit is returned cleaned."""
        assert generate_snippet("Short text.", max_len=50) == "Short text."

    def test_cuts_at_sentence_end(self) -> None:
        """Test a sentence end past 40% of the limit is used."""
        content = "First sentence here. Second sentence runs much longer than the cap"

        assert generate_snippet(content, max_len=30) == "First sentence here."

    def test_cuts_at_chinese_full_stop(self) -> None:
        """Test CJK sentence ends."""
        content = "这是第一句话。这是第二句话而且它很长很长很长很长"

        assert generate_snippet(content, max_len=12) == "这是第一句话。"

    def test_cuts_at_word_with_ellipsis(self) -> None:
        """Test the word boundary fallback."""
        content = "alpha beta gamma delta epsilon zeta"

        assert generate_snippet(content, max_len=20) == "alpha beta gamma..."

    def test_hard_cut(self) -> None:
        """Test the hard cut when there is no usable boundary."""
        assert generate_snippet("x" * 40, max_len=10) == "x" * 10 + "..."
