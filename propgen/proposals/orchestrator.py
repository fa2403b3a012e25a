from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Literal

from propgen.ai.types import Generator
from propgen.core.errors import PersistenceFailure
from propgen.knowledge.context import build_context
from propgen.proposals.duplicates import DuplicateDetector
from propgen.proposals.normalizer import fingerprint, normalize_input, short_hash
from propgen.proposals.score_parser import parse
from propgen.proposals.state import AppState, Message, OrchestratorStatus, new_message
from propgen.store.db import Store
from propgen.store.models import JobRecord

logger = logging.getLogger("propgen.proposals")

OutcomeStatus = Literal["generated", "duplicate", "failed", "ignored"]


@dataclass(frozen=True)
class ProposalOutcome:
    status: OutcomeStatus
    state: AppState
    message: Message | None = None
    record: JobRecord | None = None
    score: str | None = None
    body: str | None = None
    persisted: bool = False
    persistence_error: str | None = None
    transitions: tuple[OrchestratorStatus, ...] = field(default_factory=tuple)


class ProposalOrchestrator:
    """Runs one submission from duplicate check to saved record.

    Every step produces a new ``AppState``; ``publish`` receives each one as it
    happens so other requests see the in-flight flag while generation is
    suspended.
    """

    def __init__(
        self,
        *,
        store: Store,
        generator: Generator,
        user_id: str,
        detector: DuplicateDetector | None = None,
        publish: Callable[[AppState], None] | None = None,
    ):
        self._store = store
        self._generator = generator
        self._user_id = user_id
        self._detector = detector or DuplicateDetector(store, user_id)
        self._publish = publish or (lambda state: None)
        self._transitions: list[OrchestratorStatus] = []
        self._last: AppState | None = None

    def _enter(self, state: AppState, status: OrchestratorStatus, **changes) -> AppState:
        state = replace(state, status=status, **changes)
        self._transitions.append(status)
        self._last = state
        self._publish(state)
        return state

    def _outcome(self, status: OutcomeStatus, state: AppState, **fields) -> ProposalOutcome:
        return ProposalOutcome(status=status, state=state, transitions=tuple(self._transitions), **fields)

    async def submit(
        self,
        state: AppState,
        text: str,
        *,
        override_duplicate: bool = False,
        credential: str | None = None,
    ) -> ProposalOutcome:
        self._transitions = []
        self._last = None
        job_description = normalize_input(text)
        if not job_description or state.is_generating:
            return self._outcome("ignored", state)

        started_at = time.perf_counter()
        fingerprint_hash = short_hash(fingerprint(job_description))
        logger.info(
            json.dumps(
                {
                    "event": "proposal_request",
                    "user_hash": short_hash(self._user_id),
                    "fingerprint_hash": fingerprint_hash,
                    "message_len": len(job_description),
                    "override_duplicate": override_duplicate,
                    "override_credential": credential is not None,
                }
            )
        )

        state = self._enter(state, OrchestratorStatus.CHECKING, is_generating=True, error=None)
        try:
            return await self._run(
                state,
                job_description,
                override_duplicate=override_duplicate,
                credential=credential,
                fingerprint_hash=fingerprint_hash,
                started_at=started_at,
            )
        finally:
            # Cancellation and unexpected errors must not leave the session locked.
            if self._last is not None and self._last.is_generating:
                logger.warning(
                    json.dumps(
                        {
                            "event": "proposal_abandoned",
                            "fingerprint_hash": fingerprint_hash,
                            "status": self._last.status.value,
                        }
                    )
                )
                self._enter(self._last, OrchestratorStatus.IDLE, is_generating=False)

    async def _run(
        self,
        state: AppState,
        job_description: str,
        *,
        override_duplicate: bool,
        credential: str | None,
        fingerprint_hash: str,
        started_at: float,
    ) -> ProposalOutcome:
        if not override_duplicate and await self._detector.is_duplicate(job_description):
            state = self._enter(
                state,
                OrchestratorStatus.DUPLICATE_FOUND,
                is_generating=False,
                duplicate_pending=True,
            )
            logger.info(json.dumps({"event": "proposal_duplicate", "fingerprint_hash": fingerprint_hash}))
            return self._outcome("duplicate", state)

        state = state.with_message(new_message("user", job_description))
        state = self._enter(state, OrchestratorStatus.GENERATING, duplicate_pending=False)

        try:
            items = await asyncio.to_thread(self._store.list_knowledge_items, self._user_id)
            generated = await self._generator.generate(job_description, build_context(items), credential)
        except Exception as exc:
            error_text = str(exc) or exc.__class__.__name__
            logger.exception(
                json.dumps(
                    {
                        "event": "proposal_failed",
                        "fingerprint_hash": fingerprint_hash,
                        "error_code": getattr(exc, "code", exc.__class__.__name__),
                        "duration_ms": int((time.perf_counter() - started_at) * 1000),
                    }
                )
            )
            error_message = new_message("model", f"Error: {error_text}")
            state = self._enter(state.with_message(error_message), OrchestratorStatus.FAILED, error=error_text)
            state = self._enter(state, OrchestratorStatus.IDLE, is_generating=False)
            return self._outcome("failed", state, message=error_message)

        model_message = new_message("model", generated)
        state = self._enter(state.with_message(model_message), OrchestratorStatus.PARSING)
        parsed = parse(generated)

        state = self._enter(state, OrchestratorStatus.PERSISTING)
        record: JobRecord | None = None
        persistence_error: str | None = None
        try:
            record = await asyncio.to_thread(
                self._store.insert_proposal,
                user_id=self._user_id,
                job_description=job_description,
                proposal_text=generated,
                match_score=parsed.score,
            )
        except PersistenceFailure as exc:
            persistence_error = str(exc)
            logger.warning(
                json.dumps(
                    {
                        "event": "proposal_persist_failed",
                        "fingerprint_hash": fingerprint_hash,
                        "error": persistence_error,
                    }
                )
            )

        state = self._enter(state, OrchestratorStatus.IDLE, is_generating=False)
        logger.info(
            json.dumps(
                {
                    "event": "proposal_generated",
                    "fingerprint_hash": fingerprint_hash,
                    "has_score": parsed.score is not None,
                    "persisted": record is not None,
                    "duration_ms": int((time.perf_counter() - started_at) * 1000),
                }
            )
        )
        return self._outcome(
            "generated",
            state,
            message=model_message,
            record=record,
            score=parsed.score,
            body=parsed.body,
            persisted=record is not None,
            persistence_error=persistence_error,
        )
