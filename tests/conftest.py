"""Fixtures partagées / Shared test fixtures.

Chaque test utilise sa propre base SQLite temporaire.
Each test runs against its own temporary SQLite database.
"""

import os

# Avant tout import de l'app / Before any app import
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DEBUG"] = "false"

from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401
from app.database import Base, get_db, probe_store_capabilities
from app.main import app as fastapi_app
from app.models.client import Client
from app.models.commande import Commande
from app.models.competence import Competence
from app.models.consultant import Consultant, ConsultantCompetence
from app.models.periode_eviter import PeriodeEviter
from app.models.prestation import Prestation, PrestationCompetence
from app.models.projet import Projet
from app.schemas.reservation import ReservationCreate

# Semaine du lundi 5 janvier 2026 / Week of Monday 5 January 2026
MONDAY = "2026-01-05"
WEDNESDAY = "2026-01-07"
THURSDAY = "2026-01-08"
FRIDAY = "2026-01-09"
NEXT_MONDAY = "2026-01-12"

LEGACY_RESERVATIONS_DDL = """
CREATE TABLE reservations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    projet_id INTEGER NOT NULL,
    consultant_id INTEGER NOT NULL,
    date_debut VARCHAR(10) NOT NULL,
    date_fin VARCHAR(10) NOT NULL,
    charge_pct NUMERIC(5, 2),
    statut VARCHAR(20),
    role_projet VARCHAR(100),
    notes TEXT,
    created_at VARCHAR(25),
    updated_at VARCHAR(25)
)
"""


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Base fraîche avec toutes les tables / Fresh database with every table."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def legacy_engine(engine):
    """Base antérieure : reservations sans prestation_id, pas de périodes à éviter /
    Legacy store: reservations without prestation_id, no blocked-period table.
    """
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE reservations"))
        await conn.execute(text("DROP TABLE consultants_periodes_eviter"))
        await conn.execute(text(LEGACY_RESERVATIONS_DDL))
    return engine


@pytest_asyncio.fixture
async def session(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as s:
        yield s


@pytest_asyncio.fixture
async def caps(engine):
    return await probe_store_capabilities(engine)


async def seed_catalog(session: AsyncSession) -> SimpleNamespace:
    """Client, projets, prestations, compétences et consultants de test."""
    client = Client(nom="Acme Industrie")
    other_client = Client(nom="Boulangerie Martin")
    session.add_all([client, other_client])
    await session.flush()

    commande = Commande(numero_commande="CMD-2026-001", statut="signee", client_id=client.id)
    python = Competence(nom="Python", code="PY")
    sql = Competence(nom="SQL", code="SQL")
    session.add_all([commande, python, sql])
    await session.flush()

    audit = Prestation(
        commande_id=commande.id, code_prestation="AUD", type_prestation="audit",
        libelle="Audit applicatif", quantite=5,
    )
    formation = Prestation(
        commande_id=commande.id, code_prestation="FOR", type_prestation="formation",
        libelle="Formation équipe", quantite=2,
    )
    session.add_all([audit, formation])
    await session.flush()
    session.add_all([
        PrestationCompetence(
            prestation_id=audit.id, competence_id=python.id, niveau_requis="Confirmé", obligatoire=True
        ),
        PrestationCompetence(
            prestation_id=audit.id, competence_id=sql.id, niveau_requis="Expert", obligatoire=False
        ),
    ])

    projet = Projet(
        numero_projet="P-001", titre="Refonte ERP", statut="affecte", client_id=client.id,
        commande_id=commande.id, date_affectation="2026-01-02",
    )
    projet_old = Projet(
        numero_projet="P-000", titre="Migration base", statut="en_cours", client_id=client.id,
        date_affectation="2025-06-01",
    )
    projet_closed = Projet(
        numero_projet="P-999", titre="Ancien projet", statut="termine", client_id=client.id,
        date_affectation="2025-01-01",
    )
    projet.prestations = [audit, formation]
    session.add_all([projet, projet_old, projet_closed])

    alice = Consultant(nom="Durand", prenom="Alice")
    bob = Consultant(nom="Bernard", prenom="Bob")
    carol = Consultant(nom="Petit", prenom="Carol")
    session.add_all([alice, bob, carol])
    await session.flush()
    session.add_all([
        ConsultantCompetence(consultant_id=alice.id, competence_id=python.id, niveau_maitrise="Senior"),
        ConsultantCompetence(consultant_id=carol.id, competence_id=python.id, niveau_maitrise="Junior"),
    ])
    await session.commit()
    session.expunge_all()

    return SimpleNamespace(
        client=client, other_client=other_client, commande=commande,
        python=python, sql=sql, audit=audit, formation=formation,
        projet=projet, projet_old=projet_old, projet_closed=projet_closed,
        alice=alice, bob=bob, carol=carol,
    )


async def add_periode(session: AsyncSession, consultant_id: int, debut: str, fin: str, type_: str, motif=None):
    session.add(PeriodeEviter(
        consultant_id=consultant_id, date_debut=debut, date_fin=fin, type=type_, motif=motif,
    ))
    await session.commit()


@pytest_asyncio.fixture
async def data(session):
    return await seed_catalog(session)


@pytest.fixture
def make_form(data):
    """Formulaire valide par défaut (Alice sur l'audit) / Valid default form."""

    def _make(**overrides) -> ReservationCreate:
        values = {
            "projet_id": data.projet.id,
            "prestation_id": data.audit.id,
            "consultant_id": data.alice.id,
            "date_debut": MONDAY,
            "date_fin": WEDNESDAY,
            "charge_pct": 100,
        }
        values.update(overrides)
        return ReservationCreate(**values)

    return _make


@pytest_asyncio.fixture
async def client(engine, caps, data):
    """Client HTTP sur l'app, base de test injectée / HTTP client with the test database injected."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _get_test_db():
        async with factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = _get_test_db
    fastapi_app.state.capabilities = caps
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()
    fastapi_app.state.capabilities = None
