"""Modèle Réservation / Reservation model."""

import enum

from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ReservationStatut(str, enum.Enum):
    """Statut de réservation / Reservation status."""
    PREVUE = "prevue"
    CONFIRMEE = "confirmee"
    EN_COURS = "en_cours"
    TERMINEE = "terminee"
    ANNULEE = "annulee"


class Reservation(Base):
    """Affectation d'un consultant à un projet sur une période /
    Consultant booked on a project over an inclusive date range.

    prestation_id peut manquer dans les bases antérieures : la colonne est
    détectée au démarrage (voir database.probe_store_capabilities).
    """
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_consultant_dates", "consultant_id", "date_debut", "date_fin"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    projet_id: Mapped[int] = mapped_column(ForeignKey("projets.id"), nullable=False)
    prestation_id: Mapped[int | None] = mapped_column(ForeignKey("prestations.id"), nullable=True)
    consultant_id: Mapped[int] = mapped_column(ForeignKey("consultants.id"), nullable=False)
    date_debut: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    date_fin: Mapped[str] = mapped_column(String(10), nullable=False)  # inclusive
    charge_pct: Mapped[float] = mapped_column(Numeric(5, 2), default=100)
    statut: Mapped[str] = mapped_column(String(20), default=ReservationStatut.PREVUE.value)
    role_projet: Mapped[str | None] = mapped_column(String(100))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[str | None] = mapped_column(String(25))  # ISO 8601
    updated_at: Mapped[str | None] = mapped_column(String(25))

    def __repr__(self) -> str:
        return f"<Reservation consultant={self.consultant_id} {self.date_debut}->{self.date_fin} {self.statut}>"
