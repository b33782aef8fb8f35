"""
app/models/document.py

Purpose: Document metadata model

- Owned by a client phone number (which may have no account)
- References binary content held by the storage backend
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from utils.constants import PDF_CONTENT_TYPE


class Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    file_name: str
    client_phone_number: str
    upload_date: str = Field(..., description="ISO-8601 UTC timestamp, set by the server")
    file_size: int = Field(..., ge=0, description="Stored content length in bytes")
    content_type: str = PDF_CONTENT_TYPE
    content_ref: str = Field(..., description="GridFS file id or in-memory blob key")
    uploaded_by: str
