"""Modèle Consultant / Consultant model."""

import enum

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class ConsultantStatut(str, enum.Enum):
    """Statut du consultant / Consultant status."""
    ACTIF = "actif"
    DISPONIBLE = "disponible"
    EN_MISSION = "en_mission"
    INACTIF = "inactif"


class Consultant(Base):
    __tablename__ = "consultants"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nom: Mapped[str] = mapped_column(String(100), nullable=False)
    prenom: Mapped[str] = mapped_column(String(100), nullable=False)
    statut: Mapped[str] = mapped_column(String(20), default=ConsultantStatut.ACTIF.value)

    # Relations
    competences: Mapped[list["ConsultantCompetence"]] = relationship(
        back_populates="consultant", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Consultant {self.prenom} {self.nom}>"


class ConsultantCompetence(Base):
    """Niveau de maîtrise d'un consultant / Consultant proficiency level."""
    __tablename__ = "consultant_competences"
    __table_args__ = (UniqueConstraint("consultant_id", "competence_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    consultant_id: Mapped[int] = mapped_column(ForeignKey("consultants.id"), nullable=False)
    competence_id: Mapped[int] = mapped_column(ForeignKey("competences.id"), nullable=False)
    niveau_maitrise: Mapped[str | None] = mapped_column(String(50))  # texte libre

    # Relations
    consultant: Mapped["Consultant"] = relationship(back_populates="competences")
