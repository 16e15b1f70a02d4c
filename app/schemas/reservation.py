"""Schémas Réservation / Reservation schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.reservation import ReservationStatut


class ReservationBase(BaseModel):
    """Formulaire de réservation / Reservation form.

    Champs volontairement souples : la validation métier produit les
    messages d'erreur (voir services.reservation_validator).
    """
    projet_id: int | None = None
    prestation_id: int | None = None
    consultant_id: int | None = None
    date_debut: str | None = None  # YYYY-MM-DD
    date_fin: str | None = None  # YYYY-MM-DD, inclusive
    charge_pct: float = 100
    statut: ReservationStatut = ReservationStatut.PREVUE
    role_projet: str | None = None
    notes: str | None = None


class ReservationCreate(ReservationBase):
    pass


class ReservationUpdate(ReservationBase):
    pass


class ReservationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    projet_id: int
    prestation_id: int | None = None
    consultant_id: int
    date_debut: str
    date_fin: str
    charge_pct: float
    statut: ReservationStatut
    role_projet: str | None = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    consultant_prenom: str | None = None
    consultant_nom: str | None = None


class StatusTransition(BaseModel):
    """Passage à un statut final / Transition to a final status."""
    statut: Literal["annulee", "terminee"]
    confirm: bool = False


class ValidationOutcome(BaseModel):
    """Résultat de validation : erreur bloquante ou avertissements /
    Validation result: blocking error or warnings.
    """
    blocking_error: str | None = None
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_blocking(self) -> bool:
        return self.blocking_error is not None
