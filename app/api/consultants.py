"""Routes Consultants / Consultant API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import SchemaCapability, StoreCapabilities, get_db
from app.models.consultant import Consultant
from app.models.periode_eviter import PeriodeEviter
from app.schemas.consultant import ConsultantRead, PeriodeEviterRead
from app.api.deps import get_capabilities

router = APIRouter()


@router.get("/", response_model=list[ConsultantRead])
async def list_consultants(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Consultant).order_by(Consultant.nom, Consultant.prenom))
    return result.scalars().all()


@router.get("/{consultant_id}/periodes", response_model=list[PeriodeEviterRead])
async def list_periodes(
    consultant_id: int,
    db: AsyncSession = Depends(get_db),
    caps: StoreCapabilities = Depends(get_capabilities),
):
    """Périodes à éviter du consultant / Consultant blocked periods."""
    if caps.periodes_eviter is SchemaCapability.UNSUPPORTED:
        raise HTTPException(status_code=503, detail="Table consultants_periodes_eviter indisponible")
    consultant = await db.get(Consultant, consultant_id)
    if not consultant:
        raise HTTPException(status_code=404, detail="Consultant not found")
    result = await db.execute(
        select(PeriodeEviter)
        .where(PeriodeEviter.consultant_id == consultant_id)
        .order_by(PeriodeEviter.date_debut)
    )
    return result.scalars().all()
