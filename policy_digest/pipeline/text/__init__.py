"""
Text Bounding

Deterministic truncation used before text is handed to a model or
embedded in a fallback summary.
"""

TRUNCATION_MARKER = "[TRUNCATED: {label} exceeded {max_chars} characters]"


def truncate_text(text: str, max_chars: int, label: str = "text") -> str:
    """
    Trim ``text`` and cut it down to ``max_chars`` characters.

    A truncated result ends with a blank line and the marker
    ``[TRUNCATED: {label} exceeded {max_chars} characters]``. Feeding a
    result back in with the same bound and label returns it unchanged.

    Args:
        text: Input text
        max_chars: Character budget for the kept text (marker excluded)
        label: Name of the text in the marker

    Returns:
        Trimmed, possibly truncated text
    """
    trimmed = (text or "").strip()
    if len(trimmed) <= max_chars:
        return trimmed

    marker = TRUNCATION_MARKER.format(label=label, max_chars=max_chars)
    if trimmed.endswith(marker):
        head = trimmed[: -len(marker)].rstrip()
        if len(head) <= max_chars:
            return trimmed

    head = trimmed[: max(max_chars, 0)].strip()
    if not head:
        return marker
    return f"{head}\n\n{marker}"


__all__ = [
    "TRUNCATION_MARKER",
    "truncate_text",
]
