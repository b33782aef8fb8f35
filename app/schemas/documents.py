"""
app/schemas/documents.py

Purpose: Document and roster response schemas
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional

from app.models.document import Document
from app.models.roster import ClientRosterEntry


class DocumentResponse(BaseModel):
    document: Document


class DocumentListResponse(BaseModel):
    documents: List[Document]


class UploadErrorItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_name: str
    error: str


class BatchUploadResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    documents: List[Document]
    errors: Optional[List[UploadErrorItem]] = None
    total_files: int
    success_count: int
    error_count: int


class ClientRosterResponse(BaseModel):
    clients: List[ClientRosterEntry]
