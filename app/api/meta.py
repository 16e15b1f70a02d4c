"""Routes Méta / Store metadata routes."""

from fastapi import APIRouter, Depends

from app.database import StoreCapabilities
from app.api.deps import get_capabilities

router = APIRouter()


@router.get("/schema")
async def schema_capabilities(caps: StoreCapabilities = Depends(get_capabilities)):
    """Capacités du schéma détectées au démarrage / Schema capabilities probed at startup."""
    return {
        "reservation_prestation": caps.reservation_prestation.value,
        "periodes_eviter": caps.periodes_eviter.value,
        "prestation_tracking": caps.prestation_supported,
    }
