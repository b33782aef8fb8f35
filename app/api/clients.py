"""
app/api/clients.py

Purpose: Client roster route (admin only)
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_storage, require_admin_session
from app.models.session import SessionIdentity
from app.schemas.documents import ClientRosterResponse
from app.services.roster_service import get_client_roster
from app.storage.base import Storage

router = APIRouter(prefix="/clients")


@router.get("", response_model=ClientRosterResponse, response_model_by_alias=True)
async def list_clients(
    _: SessionIdentity = Depends(require_admin_session),
    storage: Storage = Depends(get_storage)
):
    roster = await get_client_roster(storage)
    return ClientRosterResponse(clients=roster)
