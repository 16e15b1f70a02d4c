"""Schémas Planification (client -> projet -> prestation) / Planning schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from app.schemas.reservation import ReservationRead

StatutLabel = Literal["Non planifié", "Partiellement planifié", "Entièrement planifié", "Réalisé"]

PrestaSortKey = Literal[
    "commande", "prestation", "competences", "vendu", "planifie", "realise", "reste", "dates", "statut",
]


class ClientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nom: str


class CompetenceRequirementRead(BaseModel):
    competence_id: int
    nom: str
    code: str = ""
    niveau_requis: str = ""
    obligatoire: bool = False


class PrestationRead(BaseModel):
    prestation_id: int
    commande_id: int | None = None
    code_prestation: str = ""
    type_prestation: str = ""
    libelle: str = ""
    quantite: float = 1
    prix_unitaire: float | None = None
    montant_total: float | None = None
    competences: list[CompetenceRequirementRead] = []
    numero_commande: str | None = None
    statut_commande: str | None = None


class ProjetRead(BaseModel):
    projet_id: int
    numero_projet: str
    projet_titre: str
    statut_projet: str
    date_debut_prevue: str | None = None
    date_fin_prevue: str | None = None
    priorite: str = "normale"
    date_affectation: str | None = None
    complexite: str | None = None
    type_intervention: str | None = None
    client_id: int
    prestations: list[PrestationRead] = []


class PrestationStats(BaseModel):
    """Statistiques dérivées, jamais stockées / Derived statistics, never stored."""
    planned: float = 0
    done: float = 0
    remaining: float = 0
    sessions_count: int = 0
    min_start: str | None = None
    max_end: str | None = None
    statut_label: StatutLabel = "Non planifié"


class PrestationPlanning(BaseModel):
    prestation: PrestationRead
    stats: PrestationStats | None = None


class ProjetPlanning(BaseModel):
    """Vue rechargée après chaque mutation / View reloaded after each mutation."""
    projet_id: int
    prestation_tracking: bool
    prestations: list[PrestationPlanning] = []
    reservations: list[ReservationRead] = []


class ReservationMutationResult(BaseModel):
    reservation: ReservationRead
    warnings: list[str] = []
    planning: ProjetPlanning

