"""
Tests for fleet_digest.llm.prompt module.
"""

from fleet_digest.llm import build_summary_prompt


class TestBuildSummaryPrompt:
    """Test build_summary_prompt()."""

    def test_report_follows_separator(self) -> None:
        digest_text = 'Fleet Digest: 2024-01-01 to 2024-01-08\n\nTotals:\n'

        prompt = build_summary_prompt(digest_text)

        instructions, report = prompt.split('\n---\n\n', 1)
        assert report == digest_text + '\n'
        assert 'recommendations' in instructions
        assert 'Do not invent information.' in instructions

    def test_report_braces_are_not_formatted(self) -> None:
        """Curly braces in record text should pass through untouched."""
        prompt = build_summary_prompt('  - Replace {left} mirror')

        assert '  - Replace {left} mirror' in prompt
