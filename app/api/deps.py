"""
Dépendances partagées des routes / Shared route dependencies.
Injectées dans les routes via Depends().
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import StoreCapabilities, get_db
from app.services.reservation_service import ReservationService


def get_capabilities(request: Request) -> StoreCapabilities:
    """Capacités détectées au démarrage / Capabilities probed at startup.

    Avant le probe (ou s'il n'a pas tourné) : tout est « unknown ».
    """
    return getattr(request.app.state, "capabilities", None) or StoreCapabilities()


async def get_reservation_service(
    db: AsyncSession = Depends(get_db),
    caps: StoreCapabilities = Depends(get_capabilities),
) -> ReservationService:
    return ReservationService(db, caps)
