"""Utility functions for the Brain MCP server."""

NOTE_SUFFIX = ".md"


def sanitize_note_filename(title: str) -> str:
    """Turn a note title into the stem of a safe file name.

    Keeps alphanumeric characters (any script) and spaces, drops everything
    else, then trims surrounding whitespace.

    Examples:
        "Hello World" -> "Hello World"
        "  Plan: v2/final?  " -> "Plan v2final"
        "../../etc/passwd" -> "etcpasswd"

    Args:
        title: The note title.

    Returns:
        The sanitized stem, possibly empty.
    """
    if not title:
        return ""
    return "".join(c for c in title if c.isalnum() or c == " ").strip()


def note_filename(title: str) -> str:
    """Sanitized stem plus the markdown suffix, or "" if nothing is left."""
    stem = sanitize_note_filename(title)
    return f"{stem}{NOTE_SUFFIX}" if stem else ""


def is_note_name(name: str) -> bool:
    """Whether a file name is treated as a note (case-sensitive ``.md``)."""
    return name.endswith(NOTE_SUFFIX)
