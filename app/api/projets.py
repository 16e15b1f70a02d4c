"""Routes Projets / Project API routes."""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from app.schemas.planning import PrestaSortKey, ProjetPlanning
from app.schemas.reservation import ReservationRead
from app.services.exceptions import ProjetNotFoundError
from app.services.reservation_service import ReservationService
from app.api.deps import get_reservation_service

router = APIRouter()


@router.get("/{projet_id}/planning", response_model=ProjetPlanning)
async def get_planning(
    projet_id: int,
    prestation_id: int | None = Query(default=None),
    sort_key: PrestaSortKey = Query(default="prestation"),
    sort_dir: Literal["asc", "desc"] = Query(default="asc"),
    service: ReservationService = Depends(get_reservation_service),
):
    """Vue de planification avec statistiques / Planning view with statistics."""
    try:
        return await service.load_planning(projet_id, prestation_id, sort_key, sort_dir)
    except ProjetNotFoundError:
        raise HTTPException(status_code=404, detail="Projet not found")


@router.get("/{projet_id}/reservations", response_model=list[ReservationRead])
async def list_reservations(
    projet_id: int,
    prestation_id: int | None = Query(default=None),
    include_cancelled: bool = Query(default=False),
    service: ReservationService = Depends(get_reservation_service),
):
    """Réservations visibles du projet / Visible project reservations."""
    return await service.list_visible_reservations(projet_id, prestation_id, include_cancelled)
