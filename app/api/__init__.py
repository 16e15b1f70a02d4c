"""Routes API / API routes."""

from fastapi import APIRouter

from app.api import (
    audit,
    clients,
    consultants,
    meta,
    projets,
    reservations,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(projets.router, prefix="/projets", tags=["projets"])
api_router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
api_router.include_router(consultants.router, prefix="/consultants", tags=["consultants"])
api_router.include_router(meta.router, prefix="/meta", tags=["meta"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
