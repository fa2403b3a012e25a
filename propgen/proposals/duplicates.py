from __future__ import annotations

import asyncio
import logging

from propgen.core.config import settings
from propgen.core.errors import DuplicateCheckFailure, ProposalError
from propgen.proposals.normalizer import fingerprint, short_hash
from propgen.store.db import Store

logger = logging.getLogger(__name__)


class DuplicateDetector:
    """Flags job descriptions whose opening characters were already answered.

    Lookup failures count as "not a duplicate" so a store outage never blocks
    generation.
    """

    def __init__(self, store: Store, user_id: str, prefix_chars: int | None = None):
        self._store = store
        self._user_id = user_id
        self._prefix_chars = prefix_chars or settings.duplicate_prefix_chars

    async def is_duplicate(self, text: str) -> bool:
        if not text:
            raise ValueError("text must be non-empty")
        try:
            return await asyncio.to_thread(self._lookup, text)
        except DuplicateCheckFailure as exc:
            logger.warning(
                "duplicate_check_failed user=%s fingerprint=%s error=%s",
                short_hash(self._user_id),
                short_hash(text[: self._prefix_chars]),
                exc,
            )
            return False

    def _lookup(self, text: str) -> bool:
        prefix = fingerprint(text, self._prefix_chars)
        try:
            matches = self._store.find_proposal_ids_with_prefix(self._user_id, prefix, limit=1)
        except ProposalError as exc:
            raise DuplicateCheckFailure(str(exc)) from exc
        return len(matches) > 0
