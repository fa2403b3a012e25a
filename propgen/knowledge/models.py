from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

SOURCE_TYPES = {"txt", "pdf", "docx"}


class ParsedUpload(BaseModel):
    name: str
    source_type: str
    mime_type: str
    text: str
    parsing_warnings: list[str] = Field(default_factory=list)

    @field_validator("source_type")
    @classmethod
    def _validate_source_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in SOURCE_TYPES:
            raise ValueError("source_type must be one of: pdf, docx, txt")
        return normalized
