from __future__ import annotations

from typing import Iterable

from propgen.store.models import KnowledgeItem


def build_context(items: Iterable[KnowledgeItem]) -> str:
    """Concatenate knowledge-base items into one generation context string."""
    return "\n\n".join(f"--- FILE: {item.name} ---\n{item.content}" for item in items)
