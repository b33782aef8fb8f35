"""
app/models/roster.py

Purpose: Client roster entries (derived, never persisted)

- RegisteredClient: a client account plus its document count
- UnregisteredClient: a phone number that only appears on documents
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.user import UserRole


class RegisteredClient(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    kind: Literal["registered"] = "registered"
    id: str
    phone_number: str
    name: Optional[str] = None
    role: Literal[UserRole.CLIENT] = UserRole.CLIENT
    document_count: int = Field(default=0, ge=0)


class UnregisteredClient(BaseModel):
    """
    Phone number with uploaded documents but no account. The phone number
    doubles as the id since there is no stored identity.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    kind: Literal["unregistered"] = "unregistered"
    id: str
    phone_number: str
    name: None = None
    role: None = None
    document_count: int = Field(default=1, ge=1)


ClientRosterEntry = Annotated[
    Union[RegisteredClient, UnregisteredClient],
    Field(discriminator="kind"),
]
