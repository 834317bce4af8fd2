"""Prompt-ready rendering of a coaching context snapshot."""

from __future__ import annotations

from coach_context.models.snapshot import ContextSnapshot


def format_compact_context(snapshot: ContextSnapshot) -> str:
    """Render the snapshot as a markdown heading followed by indented JSON.

    Prompt assembly itself happens in the language-model layer, which only
    needs this block of text.
    """
    return f"## Training Context\n{snapshot.model_dump_json(indent=2)}"
