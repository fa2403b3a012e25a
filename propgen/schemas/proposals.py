from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from propgen.proposals.orchestrator import ProposalOutcome
from propgen.proposals.state import AppState, Message
from propgen.store.models import JobRecord

GroupMode = Literal["day", "week", "month"]


class GenerateRequest(BaseModel):
    job_description: str = Field(default="", max_length=60000)
    override_duplicate: bool = False


class DuplicateCheckRequest(BaseModel):
    job_description: str = Field(min_length=1, max_length=60000)


class DuplicateCheckResponse(BaseModel):
    duplicate: bool


class JobRecordOut(BaseModel):
    id: str
    created_at: datetime
    job_description: str
    proposal_text: str
    match_score: str | None = None

    @classmethod
    def from_record(cls, record: JobRecord) -> "JobRecordOut":
        return cls(
            id=record.id,
            created_at=record.created_at,
            job_description=record.job_description,
            proposal_text=record.proposal_text,
            match_score=record.match_score,
        )


class ProposalGroup(BaseModel):
    label: str
    proposals: list[JobRecordOut] = Field(default_factory=list)


class ProposalListResponse(BaseModel):
    total: int
    mode: GroupMode | None = None
    proposals: list[JobRecordOut] = Field(default_factory=list)
    groups: list[ProposalGroup] = Field(default_factory=list)


class MessageOut(BaseModel):
    id: str
    role: Literal["user", "model"]
    text: str
    timestamp: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageOut":
        return cls(id=message.id, role=message.role, text=message.text, timestamp=message.timestamp)


class ConversationResponse(BaseModel):
    status: str
    is_generating: bool
    duplicate_pending: bool
    error: str | None = None
    messages: list[MessageOut] = Field(default_factory=list)

    @classmethod
    def from_state(cls, state: AppState) -> "ConversationResponse":
        return cls(
            status=state.status.value,
            is_generating=state.is_generating,
            duplicate_pending=state.duplicate_pending,
            error=state.error,
            messages=[MessageOut.from_message(m) for m in state.messages],
        )


class GenerateResponse(BaseModel):
    status: Literal["generated", "duplicate", "failed", "ignored"]
    message: MessageOut | None = None
    proposal: JobRecordOut | None = None
    match_score: str | None = None
    body: str | None = None
    persisted: bool = False
    persistence_error: str | None = None
    conversation: ConversationResponse

    @classmethod
    def from_outcome(cls, outcome: ProposalOutcome) -> "GenerateResponse":
        return cls(
            status=outcome.status,
            message=MessageOut.from_message(outcome.message) if outcome.message else None,
            proposal=JobRecordOut.from_record(outcome.record) if outcome.record else None,
            match_score=outcome.score,
            body=outcome.body,
            persisted=outcome.persisted,
            persistence_error=outcome.persistence_error,
            conversation=ConversationResponse.from_state(outcome.state),
        )
