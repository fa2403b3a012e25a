import asyncio

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from propgen.core.config import settings
from propgen.core.security import require_session
from propgen.knowledge.parse import UnsupportedUpload, parse_upload
from propgen.schemas.knowledge import KnowledgeItemCreate, KnowledgeItemOut, KnowledgeUploadResponse
from propgen.store.db import Store, get_store
from propgen.store.models import Session

router = APIRouter()


@router.get("/knowledge", response_model=list[KnowledgeItemOut])
def list_knowledge(
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
):
    return [KnowledgeItemOut.from_item(item) for item in store.list_knowledge_items(session.user_id)]


@router.post("/knowledge", response_model=KnowledgeItemOut, status_code=status.HTTP_201_CREATED)
def add_knowledge(
    payload: KnowledgeItemCreate,
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
):
    [item] = store.insert_knowledge_items(session.user_id, [(payload.name, payload.content, payload.type)])
    return KnowledgeItemOut.from_item(item)


@router.post("/knowledge/upload", response_model=KnowledgeUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_knowledge(
    files: list[UploadFile] = File(...),
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
):
    parsed = []
    for upload in files:
        data = await upload.read()
        if len(data) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"'{upload.filename}' exceeds the {settings.max_upload_bytes} byte upload limit.",
            )
        try:
            parsed.append(parse_upload(upload.filename or "", data, upload.content_type))
        except UnsupportedUpload as exc:
            raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc)) from exc

    items = await asyncio.to_thread(
        store.insert_knowledge_items,
        session.user_id,
        [(doc.name, doc.text, doc.mime_type) for doc in parsed],
    )
    warnings = {doc.name: doc.parsing_warnings for doc in parsed if doc.parsing_warnings}
    return KnowledgeUploadResponse(
        items=[KnowledgeItemOut.from_item(item) for item in items],
        warnings=warnings,
    )


@router.delete("/knowledge/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_knowledge(
    item_id: str,
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
):
    if not store.delete_knowledge_item(session.user_id, item_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Knowledge base item not found.")
