"""
Heuristic policy summary

Non-AI fallback: excerpts of the first policy sections under a header that
says this is not a real summary.
"""

import re

from policy_digest.pipeline.text import truncate_text

HEURISTIC_HEADER = "COMPANY POLICY SUMMARY (fallback, heuristic)"
HEURISTIC_NOTE = (
    "Automated summarization was unavailable; "
    "this is an excerpt-based fallback, not a true summary."
)

DEFAULT_MAX_SECTIONS = 5
DEFAULT_EXCERPT_MAX_CHARS = 1200

# A line holding only "---" separates policy sections
_SECTION_SEPARATOR = re.compile(r"^[ \t]*---[ \t]*$", re.MULTILINE)


def build_heuristic_summary(
    full_text: str,
    max_sections: int = DEFAULT_MAX_SECTIONS,
    excerpt_max_chars: int = DEFAULT_EXCERPT_MAX_CHARS,
) -> str:
    """
    Build an excerpt-based stand-in for an AI summary.

    Args:
        full_text: Raw policy text
        max_sections: Number of leading sections to keep
        excerpt_max_chars: Character budget per section

    Returns:
        Fallback summary, or "" for empty input
    """
    if not isinstance(full_text, str) or not full_text.strip():
        return ""

    sections = [s.strip() for s in _SECTION_SEPARATOR.split(full_text)]
    sections = [s for s in sections if s][:max(max_sections, 0)]
    if not sections:
        return ""

    parts = [HEURISTIC_HEADER, HEURISTIC_NOTE]
    for i, section in enumerate(sections, start=1):
        excerpt = truncate_text(section, excerpt_max_chars, "policy section excerpt")
        parts.append(f"SECTION {i} EXCERPT:\n{excerpt}")

    return "\n\n".join(parts)


__all__ = [
    "HEURISTIC_HEADER",
    "HEURISTIC_NOTE",
    "build_heuristic_summary",
]
