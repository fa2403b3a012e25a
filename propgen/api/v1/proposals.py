from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from propgen.ai.generation import get_generator
from propgen.ai.types import Generator
from propgen.core.rate_limit import rate_limit
from propgen.core.security import override_credential, require_session
from propgen.proposals.duplicates import DuplicateDetector
from propgen.proposals.grouping import group_records
from propgen.proposals.orchestrator import ProposalOrchestrator
from propgen.proposals.state import ConversationPublisher, StateRegistry, get_state_registry, open_record
from propgen.schemas.proposals import (
    ConversationResponse,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    GenerateRequest,
    GenerateResponse,
    GroupMode,
    JobRecordOut,
    ProposalGroup,
    ProposalListResponse,
)
from propgen.store.db import Store, get_store
from propgen.store.models import Session

router = APIRouter()


@router.post("/proposals/check-duplicate", response_model=DuplicateCheckResponse)
async def check_duplicate(
    payload: DuplicateCheckRequest,
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
):
    text = payload.job_description.strip()
    if not text:
        return DuplicateCheckResponse(duplicate=False)
    detector = DuplicateDetector(store, session.user_id)
    return DuplicateCheckResponse(duplicate=await detector.is_duplicate(text))


@router.post("/proposals/generate", response_model=GenerateResponse)
@rate_limit()
async def generate_proposal(
    request: Request,
    payload: GenerateRequest,
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
    generator: Generator = Depends(get_generator),
    credential: str | None = Depends(override_credential),
    registry: StateRegistry = Depends(get_state_registry),
):
    _ = request
    user_id = session.user_id
    current = registry.get(user_id)
    orchestrator = ProposalOrchestrator(
        store=store,
        generator=generator,
        user_id=user_id,
        publish=ConversationPublisher(registry, user_id, current),
    )
    outcome = await orchestrator.submit(
        current,
        payload.job_description,
        override_duplicate=payload.override_duplicate,
        credential=credential,
    )
    if outcome.status != "ignored":
        outcome = replace(outcome, state=registry.get(user_id))
    return GenerateResponse.from_outcome(outcome)


@router.get("/proposals", response_model=ProposalListResponse)
def list_proposals(
    group: GroupMode | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=1000),
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
):
    records = store.list_proposals(session.user_id, limit=limit)
    proposals = [JobRecordOut.from_record(r) for r in records]
    groups: list[ProposalGroup] = []
    if group is not None:
        grouped = group_records(proposals, group)
        groups = [ProposalGroup(label=label, proposals=items) for label, items in grouped.items()]
    return ProposalListResponse(total=len(proposals), mode=group, proposals=proposals, groups=groups)


@router.get("/proposals/{proposal_id}", response_model=JobRecordOut)
def get_proposal(
    proposal_id: str,
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
):
    record = store.get_proposal(session.user_id, proposal_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Proposal not found.")
    return JobRecordOut.from_record(record)


@router.delete("/proposals/{proposal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_proposal(
    proposal_id: str,
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
):
    if not store.delete_proposal(session.user_id, proposal_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Proposal not found.")


@router.post("/proposals/{proposal_id}/open", response_model=ConversationResponse)
def open_proposal(
    proposal_id: str,
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
    registry: StateRegistry = Depends(get_state_registry),
):
    record = store.get_proposal(session.user_id, proposal_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Proposal not found.")
    state = open_record(registry.get(session.user_id), record)
    registry.set(session.user_id, state)
    return ConversationResponse.from_state(state)


@router.get("/conversation", response_model=ConversationResponse)
def get_conversation(
    session: Session = Depends(require_session),
    registry: StateRegistry = Depends(get_state_registry),
):
    return ConversationResponse.from_state(registry.get(session.user_id))


@router.delete("/conversation", response_model=ConversationResponse)
def reset_conversation(
    session: Session = Depends(require_session),
    registry: StateRegistry = Depends(get_state_registry),
):
    return ConversationResponse.from_state(registry.reset(session.user_id))
