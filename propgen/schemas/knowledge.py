from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from propgen.store.models import KnowledgeItem


class KnowledgeItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1, max_length=500000)
    type: str = Field(default="text/plain", max_length=255)


class KnowledgeItemOut(BaseModel):
    id: str
    name: str
    content: str
    type: str
    created_at: datetime | None = None

    @classmethod
    def from_item(cls, item: KnowledgeItem) -> "KnowledgeItemOut":
        return cls(
            id=item.id,
            name=item.name,
            content=item.content,
            type=item.type,
            created_at=item.created_at,
        )


class KnowledgeUploadResponse(BaseModel):
    items: list[KnowledgeItemOut] = Field(default_factory=list)
    warnings: dict[str, list[str]] = Field(default_factory=dict)
