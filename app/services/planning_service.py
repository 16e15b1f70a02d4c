"""
Service Planification / Planning service.
Sélection client -> projet -> prestation, chargement des réservations
d'un projet et calcul de la vue de planification (stats par prestation).
"""

from typing import Literal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import StoreCapabilities
from app.models.client import Client
from app.models.consultant import Consultant
from app.models.prestation import Prestation, PrestationCompetence
from app.models.projet import PLANNABLE_PROJET_STATUTS, Projet
from app.models.reservation import Reservation, ReservationStatut
from app.schemas.planning import (
    CompetenceRequirementRead,
    PrestaSortKey,
    PrestationPlanning,
    PrestationRead,
    ProjetPlanning,
    ProjetRead,
)
from app.schemas.reservation import ReservationRead
from app.services.quantity_reconciler import STATUT_LABEL_RANK, QuantityReconcilerService
from app.utils.formatting import date_of, normalize_label, parse_iso_date

MAX_CLIENTS = 1000

ProjetSortMode = Literal["recent_first", "old_first"]


# ─── Clients / projets ───

async def search_clients(db: AsyncSession, search: str | None = None) -> list[Client]:
    query = select(Client).order_by(Client.nom).limit(MAX_CLIENTS)
    term = (search or "").strip()
    if term:
        query = query.where(Client.nom.ilike(f"%{term}%"))
    result = await db.execute(query)
    return list(result.scalars().all())


def _projet_options():
    return (
        selectinload(Projet.commande),
        selectinload(Projet.prestations).selectinload(Prestation.commande),
        selectinload(Projet.prestations)
        .selectinload(Prestation.competences)
        .selectinload(PrestationCompetence.competence),
    )


def _to_float(value) -> float | None:
    return float(value) if value is not None else None


def build_prestation(prestation: Prestation, projet: Projet) -> PrestationRead:
    """Prestation + exigences pré-jointes / Service line with pre-joined requirements."""
    competences = [
        CompetenceRequirementRead(
            competence_id=pc.competence.id,
            nom=pc.competence.nom,
            code=pc.competence.code or "",
            niveau_requis=pc.niveau_requis or "",
            obligatoire=bool(pc.obligatoire),
        )
        for pc in prestation.competences
        if pc.competence is not None and pc.competence.nom
    ]
    commande = prestation.commande or projet.commande
    return PrestationRead(
        prestation_id=prestation.id,
        commande_id=prestation.commande_id,
        code_prestation=prestation.code_prestation or "",
        type_prestation=prestation.type_prestation or "",
        libelle=prestation.libelle or "",
        quantite=float(prestation.quantite if prestation.quantite is not None else 1),
        prix_unitaire=_to_float(prestation.prix_unitaire),
        montant_total=_to_float(prestation.montant_total),
        competences=competences,
        numero_commande=commande.numero_commande if commande else None,
        statut_commande=commande.statut if commande else None,
    )


def build_projet(projet: Projet) -> ProjetRead:
    return ProjetRead(
        projet_id=projet.id,
        numero_projet=projet.numero_projet or "",
        projet_titre=projet.titre or "",
        statut_projet=projet.statut or "",
        date_debut_prevue=projet.date_debut_prevue,
        date_fin_prevue=projet.date_fin_prevue,
        priorite=projet.priorite or "normale",
        date_affectation=projet.date_affectation,
        complexite=projet.complexite,
        type_intervention=projet.type_intervention,
        client_id=projet.client_id,
        prestations=[build_prestation(p, projet) for p in projet.prestations],
    )


def _projet_haystack(projet: ProjetRead) -> str:
    parts = [projet.numero_projet, projet.projet_titre, projet.statut_projet, projet.priorite]
    for p in projet.prestations:
        parts += [p.libelle, p.code_prestation, p.type_prestation, p.numero_commande or ""]
        parts += [f"{c.nom} {c.code} {c.niveau_requis}" for c in p.competences]
    return " ".join(parts).lower()


def _affectation_ts(projet: ProjetRead) -> float:
    parsed = date_of(projet.date_affectation)
    return parsed.toordinal() if parsed else 0


async def list_client_projets(
    db: AsyncSession,
    client_id: int,
    sort: ProjetSortMode = "recent_first",
    q: str | None = None,
) -> list[ProjetRead]:
    """Projets affectés / en cours d'un client / Assigned or running projects of a client."""
    result = await db.execute(
        select(Projet)
        .options(*_projet_options())
        .where(Projet.client_id == client_id, Projet.statut.in_(PLANNABLE_PROJET_STATUTS))
    )
    projets = [build_projet(p) for p in result.scalars().all()]

    term = (q or "").strip().lower()
    if term:
        projets = [p for p in projets if term in _projet_haystack(p)]

    # Tri stable : numéro puis date d'affectation / Stable sort: number then assignment date
    projets.sort(key=lambda p: p.numero_projet.lower())
    projets.sort(key=_affectation_ts, reverse=(sort == "recent_first"))
    return projets


async def load_projet(db: AsyncSession, projet_id: int) -> ProjetRead | None:
    result = await db.execute(
        select(Projet).options(*_projet_options()).where(Projet.id == projet_id)
    )
    projet = result.scalar_one_or_none()
    return build_projet(projet) if projet else None


# ─── Réservations ───

def reservation_columns(caps: StoreCapabilities) -> list:
    """Colonnes lues, prestation_id seulement si la base la porte /
    Selected columns, prestation_id only when the store has it.
    """
    columns = [
        Reservation.id,
        Reservation.projet_id,
        Reservation.consultant_id,
        Reservation.date_debut,
        Reservation.date_fin,
        Reservation.charge_pct,
        Reservation.statut,
        Reservation.role_projet,
        Reservation.notes,
        Reservation.created_at,
        Reservation.updated_at,
        Consultant.prenom.label("consultant_prenom"),
        Consultant.nom.label("consultant_nom"),
    ]
    if caps.prestation_supported:
        columns.insert(2, Reservation.prestation_id)
    return columns


def _reservation_query(caps: StoreCapabilities):
    return select(*reservation_columns(caps)).outerjoin(
        Consultant, Consultant.id == Reservation.consultant_id
    )


async def load_projet_reservations(
    db: AsyncSession, projet_id: int, caps: StoreCapabilities
) -> list[ReservationRead]:
    """Toutes les réservations du projet, annulées comprises / All project reservations, cancelled included."""
    result = await db.execute(
        _reservation_query(caps)
        .where(Reservation.projet_id == projet_id)
        .order_by(Reservation.date_debut, Reservation.id)
    )
    return [ReservationRead(**row._mapping) for row in result.all()]


async def fetch_reservation(
    db: AsyncSession, reservation_id: int, caps: StoreCapabilities
) -> ReservationRead | None:
    result = await db.execute(_reservation_query(caps).where(Reservation.id == reservation_id))
    row = result.one_or_none()
    return ReservationRead(**row._mapping) if row else None


def visible_reservations(
    reservations: list[ReservationRead],
    caps: StoreCapabilities,
    prestation_id: int | None = None,
    include_cancelled: bool = False,
) -> list[ReservationRead]:
    """Réservations affichées : annulées masquées par défaut / Visible reservations."""
    rows = reservations if include_cancelled else [
        r for r in reservations if r.statut != ReservationStatut.ANNULEE
    ]
    if prestation_id is None or not caps.prestation_supported:
        return rows
    return [r for r in rows if r.prestation_id == prestation_id]


# ─── Vue de planification / Planning view ───

def _sort_value(key: PrestaSortKey, item: PrestationPlanning):
    p, st = item.prestation, item.stats
    if key == "commande":
        return normalize_label(p.numero_commande)
    if key == "prestation":
        return normalize_label(p.libelle)
    if key == "competences":
        return normalize_label(" • ".join(f"{c.nom} {c.niveau_requis}".strip() for c in p.competences))
    if key == "vendu":
        return p.quantite
    if key == "planifie":
        return st.planned if st else 0
    if key == "realise":
        return st.done if st else 0
    if key == "reste":
        return st.remaining if st else p.quantite
    if key == "dates":
        parsed = parse_iso_date(st.min_start) if st else None
        return parsed.toordinal() if parsed else 0
    return STATUT_LABEL_RANK[st.statut_label] if st else 0


def sort_prestations(
    items: list[PrestationPlanning],
    sort_key: PrestaSortKey = "prestation",
    sort_dir: Literal["asc", "desc"] = "asc",
) -> list[PrestationPlanning]:
    return sorted(items, key=lambda item: _sort_value(sort_key, item), reverse=(sort_dir == "desc"))


def build_planning(
    projet: ProjetRead,
    reservations: list[ReservationRead],
    caps: StoreCapabilities,
    prestation_id: int | None = None,
    sort_key: PrestaSortKey = "prestation",
    sort_dir: Literal["asc", "desc"] = "asc",
) -> ProjetPlanning:
    """Stats recalculées à chaque chargement / Stats recomputed on every load.

    Sans prestation_id en base, aucune statistique par prestation.
    """
    items = []
    for p in projet.prestations:
        stats = None
        if caps.prestation_supported:
            linked = [r for r in reservations if r.prestation_id == p.prestation_id]
            stats = QuantityReconcilerService.compute_stats(p.quantite, linked)
        items.append(PrestationPlanning(prestation=p, stats=stats))

    return ProjetPlanning(
        projet_id=projet.projet_id,
        prestation_tracking=caps.prestation_supported,
        prestations=sort_prestations(items, sort_key, sort_dir),
        reservations=visible_reservations(reservations, caps, prestation_id),
    )
