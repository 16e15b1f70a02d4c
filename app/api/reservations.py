"""Routes Réservations / Reservation API routes."""

from fastapi import APIRouter, Depends, HTTPException, Request

from app.config import settings
from app.rate_limit import limiter
from app.schemas.planning import ReservationMutationResult
from app.schemas.reservation import (
    ReservationCreate,
    ReservationRead,
    ReservationUpdate,
    StatusTransition,
)
from app.services.exceptions import (
    ConfirmationRequiredError,
    InvalidTransitionError,
    ProjetNotFoundError,
    ReservationBlockedError,
    ReservationNotFoundError,
)
from app.services.reservation_service import ReservationService
from app.api.deps import get_reservation_service

router = APIRouter()


def _blocked(exc: ReservationBlockedError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"error": exc.message, "warnings": exc.warnings},
    )


@router.get("/{reservation_id}", response_model=ReservationRead)
async def get_reservation(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service),
):
    """Réservation par id, annulées comprises / Reservation by id, cancelled included."""
    try:
        return await service.get(reservation_id)
    except ReservationNotFoundError:
        raise HTTPException(status_code=404, detail="Reservation not found")


@router.post("/", response_model=ReservationMutationResult, status_code=201)
@limiter.limit(settings.RATE_LIMIT_WRITE)
async def create_reservation(
    request: Request,
    data: ReservationCreate,
    service: ReservationService = Depends(get_reservation_service),
):
    try:
        return await service.create(data)
    except ReservationBlockedError as exc:
        raise _blocked(exc)


@router.put("/{reservation_id}", response_model=ReservationMutationResult)
@limiter.limit(settings.RATE_LIMIT_WRITE)
async def update_reservation(
    request: Request,
    reservation_id: int,
    data: ReservationUpdate,
    service: ReservationService = Depends(get_reservation_service),
):
    try:
        return await service.update(reservation_id, data)
    except ReservationNotFoundError:
        raise HTTPException(status_code=404, detail="Reservation not found")
    except ReservationBlockedError as exc:
        raise _blocked(exc)


@router.put("/{reservation_id}/statut", response_model=ReservationMutationResult)
@limiter.limit(settings.RATE_LIMIT_WRITE)
async def set_reservation_status(
    request: Request,
    reservation_id: int,
    data: StatusTransition,
    service: ReservationService = Depends(get_reservation_service),
):
    """Annuler / terminer une réservation, confirmation requise /
    Cancel or complete a reservation, confirmation required.
    """
    try:
        return await service.transition_status(reservation_id, data.statut, data.confirm)
    except ReservationNotFoundError:
        raise HTTPException(status_code=404, detail="Reservation not found")
    except ProjetNotFoundError:
        raise HTTPException(status_code=404, detail="Projet not found")
    except ConfirmationRequiredError as exc:
        raise HTTPException(
            status_code=409,
            detail={"confirmation": exc.prompt},
        )
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
