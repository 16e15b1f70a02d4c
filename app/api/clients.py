"""Routes Clients / Client API routes."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.client import Client
from app.schemas.planning import ClientRead, ProjetRead
from app.services.planning_service import ProjetSortMode, list_client_projets, search_clients

router = APIRouter()


@router.get("/", response_model=list[ClientRead])
async def list_clients(
    search: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Clients par nom (recherche partielle) / Clients by name (partial search)."""
    return await search_clients(db, search)


@router.get("/{client_id}/projets", response_model=list[ProjetRead])
async def list_projets(
    client_id: int,
    sort: ProjetSortMode = Query(default="recent_first"),
    q: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Projets affectés / en cours du client / Client's assigned or running projects."""
    client = await db.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return await list_client_projets(db, client_id, sort, q)
