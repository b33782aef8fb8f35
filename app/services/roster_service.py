"""
app/services/roster_service.py

Purpose: Client roster aggregation

- Joins registered clients with the phone numbers found on documents
- Surfaces phone numbers that have documents but no account, so admins
  can spot numbers mistyped at upload time
"""

from typing import Dict, Iterable, List, Union

from app.core.logging import get_logger
from app.models.document import Document
from app.models.roster import RegisteredClient, UnregisteredClient
from app.models.user import PublicUser
from app.storage.base import Storage

logger = get_logger(__name__)


def build_roster(
    clients: Iterable[PublicUser],
    documents: Iterable[Document]
) -> List[Union[RegisteredClient, UnregisteredClient]]:
    """
    Groups documents by phone number on top of the registered clients.

    Args:
        clients: Registered client accounts
        documents: Every stored document

    Returns:
        Registered clients in the given order (count may be 0), followed by
        unregistered phone numbers in order of first appearance (count >= 1)
    """
    roster: Dict[str, Union[RegisteredClient, UnregisteredClient]] = {}

    for client in clients:
        roster[client.phone_number] = RegisteredClient(
            id=client.id,
            phone_number=client.phone_number,
            name=client.name,
        )

    for document in documents:
        phone = document.client_phone_number
        entry = roster.get(phone)
        if entry is None:
            roster[phone] = UnregisteredClient(id=phone, phone_number=phone)
        else:
            entry.document_count += 1

    return list(roster.values())


async def get_client_roster(storage: Storage) -> List[Union[RegisteredClient, UnregisteredClient]]:
    """
    Loads clients and documents and builds the roster.
    """
    clients = await storage.get_all_clients()
    documents = await storage.get_all_documents()

    roster = build_roster(clients, documents)

    unregistered = sum(1 for entry in roster if isinstance(entry, UnregisteredClient))
    logger.debug(
        f"Roster built: {len(roster)} entries, {unregistered} without account"
    )
    return roster
