"""
Connexion a la base de donnees / Database connection.
Supporte SQLite (dev) et PostgreSQL (prod) via SQLAlchemy 2.0 async.
"""

import enum
import logging
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

log = logging.getLogger(__name__)

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

# Configuration moteur / Engine configuration
_engine_kwargs: dict = {
    "echo": settings.DEBUG,
}

# PostgreSQL : connection pooling / PostgreSQL: connection pooling
if not _is_sqlite:
    _engine_kwargs.update({
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "pool_pre_ping": True,
    })

engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """Dependance FastAPI pour obtenir une session DB / FastAPI dependency for DB session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


class SchemaCapability(str, enum.Enum):
    """Etat d'une capacite du schema / Tri-state schema capability."""
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


@dataclass
class StoreCapabilities:
    """Capacites detectees au demarrage / Capabilities probed at startup.

    reservation_prestation : colonne reservations.prestation_id
    periodes_eviter : table consultants_periodes_eviter
    """
    reservation_prestation: SchemaCapability = SchemaCapability.UNKNOWN
    periodes_eviter: SchemaCapability = SchemaCapability.UNKNOWN

    @property
    def prestation_supported(self) -> bool:
        return self.reservation_prestation is SchemaCapability.SUPPORTED


def store_error_message(exc: Exception, fallback: str = "Erreur base de donnees") -> str:
    """Message du driver sans la requete SQL / Driver message without the SQL statement."""
    orig = getattr(exc, "orig", None)
    message = str(orig if orig is not None else exc).strip()
    return message or fallback


def is_missing_column_error(exc: Exception, column: str) -> bool:
    msg = store_error_message(exc).lower()
    return column in msg and ("does not exist" in msg or "column" in msg)


def is_missing_relation_error(exc: Exception) -> bool:
    """Table absente (PostgreSQL, PostgREST ou SQLite) / Missing table."""
    msg = store_error_message(exc).lower()
    return any(
        marker in msg
        for marker in ("does not exist", "relation", "schema cache", "no such table")
    )


async def probe_reservation_schema(target: AsyncEngine | None = None) -> SchemaCapability:
    """Detecter reservations.prestation_id par une lecture minimale /
    Probe reservations.prestation_id with a minimal read.
    """
    target = target or engine
    try:
        async with target.connect() as conn:
            await conn.execute(text("SELECT prestation_id FROM reservations LIMIT 1"))
    except SQLAlchemyError as exc:
        if is_missing_column_error(exc, "prestation_id"):
            log.warning("reservations.prestation_id absent: suivi par prestation desactive")
            return SchemaCapability.UNSUPPORTED
        log.warning("Probe reservations.prestation_id indetermine: %s", store_error_message(exc))
        return SchemaCapability.UNKNOWN
    return SchemaCapability.SUPPORTED


async def probe_periodes_table(target: AsyncEngine | None = None) -> SchemaCapability:
    """Detecter la table consultants_periodes_eviter / Probe the blocked-period table."""
    target = target or engine
    try:
        async with target.connect() as conn:
            await conn.execute(text("SELECT id FROM consultants_periodes_eviter LIMIT 1"))
    except SQLAlchemyError as exc:
        if is_missing_relation_error(exc):
            log.warning("Table consultants_periodes_eviter absente: controle conges/preferences non applique")
            return SchemaCapability.UNSUPPORTED
        log.warning("Probe consultants_periodes_eviter indetermine: %s", store_error_message(exc))
        return SchemaCapability.UNKNOWN
    return SchemaCapability.SUPPORTED


async def probe_store_capabilities(target: AsyncEngine | None = None) -> StoreCapabilities:
    caps = StoreCapabilities(
        reservation_prestation=await probe_reservation_schema(target),
        periodes_eviter=await probe_periodes_table(target),
    )
    log.info(
        "Capacites base: prestation_id=%s, periodes_eviter=%s",
        caps.reservation_prestation.value, caps.periodes_eviter.value,
    )
    return caps


async def init_db():
    """Creer les tables au demarrage / Create tables on startup.

    create_all ne modifie pas les tables existantes : une table reservations
    anterieure garde son schema et la detection de capacite s'applique.
    """
    import app.models  # noqa: F401  enregistre les modeles / registers the models

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

