"""UI-facing copy builders for errors and notifications."""

from __future__ import annotations


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_placeholder_notice(message: str) -> str:
    """Status text shown when the feed served placeholder papers."""
    reason = _ensure_sentence(message) if message else "The arXiv API is unavailable."
    return f"Showing sample papers. {reason}"


def build_toggle_message(collection: str, title: str, present: bool) -> str:
    """Confirmation for a saved/liked toggle."""
    verb = "Added to" if present else "Removed from"
    short = title if len(title) <= 60 else f"{title[:57]}..."
    return f"{verb} {collection}: {short}"


__all__ = [
    "build_actionable_error",
    "build_next_step_hint",
    "build_placeholder_notice",
    "build_toggle_message",
]
