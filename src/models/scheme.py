from __future__ import annotations

from pydantic import BaseModel, Field

from src.models.enums import SchemeCategory


class SchemeRecord(BaseModel):
    name: str
    slug: str
    details: str
    benefits: str
    eligibility: str
    application_url: str | None = None
    documents: str | None = None
    level: str | None = None
    category: SchemeCategory = SchemeCategory.GENERAL
    tags: list[str] = Field(default_factory=list)
