"""Small text utilities shared by the rewrite passes."""

from tagsplice.utils.edits import apply_edits

__all__ = ["apply_edits"]
