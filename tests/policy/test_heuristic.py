"""
启发式摘要测试
"""

from policy_digest.policy.heuristic import (
    HEURISTIC_HEADER,
    HEURISTIC_NOTE,
    build_heuristic_summary,
)


class TestHeuristicSummary:
    """测试 build_heuristic_summary"""

    def test_empty_input(self):
        assert build_heuristic_summary("") == ""
        assert build_heuristic_summary("   \n ") == ""
        assert build_heuristic_summary(None) == ""

    def test_header_and_note(self):
        result = build_heuristic_summary("Passwords must be long.")
        assert result.startswith(f"{HEURISTIC_HEADER}\n\n{HEURISTIC_NOTE}")
        assert "summarization was unavailable" in result

    def test_sections_split_on_separator_lines(self):
        text = "Phishing rules\n---\nPassword rules\n  ---  \nIncident response"
        result = build_heuristic_summary(text)
        assert "SECTION 1 EXCERPT:\nPhishing rules" in result
        assert "SECTION 2 EXCERPT:\nPassword rules" in result
        assert "SECTION 3 EXCERPT:\nIncident response" in result

    def test_inline_dashes_do_not_split(self):
        result = build_heuristic_summary("Use pass---phrases everywhere")
        assert "SECTION 2" not in result

    def test_max_sections(self):
        text = "\n---\n".join(f"Section {i}" for i in range(1, 9))
        result = build_heuristic_summary(text, max_sections=3)
        assert "SECTION 3 EXCERPT" in result
        assert "SECTION 4 EXCERPT" not in result
        assert "Section 4" not in result

    def test_blank_sections_skipped(self):
        result = build_heuristic_summary("---\n\n---\nOnly section\n---\n")
        assert "SECTION 1 EXCERPT:\nOnly section" in result
        assert "SECTION 2" not in result

    def test_excerpts_truncated(self):
        result = build_heuristic_summary("a" * 5000, excerpt_max_chars=100)
        assert "[TRUNCATED: policy section excerpt exceeded 100 characters]" in result
        assert "a" * 101 not in result

    def test_only_separators_returns_empty(self):
        assert build_heuristic_summary("---\n---") == ""
