"""Modèle Prestation (ligne de service vendue) / Service line model."""

from sqlalchemy import Boolean, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Prestation(Base):
    """Ligne vendue et planifiable d'une commande / Sold, plannable line of an order.

    Créée par la transformation commande -> projet, lecture seule pour la planification.
    Created by the order -> project transformation, read-only for scheduling.
    """
    __tablename__ = "prestations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    commande_id: Mapped[int | None] = mapped_column(ForeignKey("commandes.id"))
    code_prestation: Mapped[str | None] = mapped_column(String(50))
    type_prestation: Mapped[str | None] = mapped_column(String(50))
    libelle: Mapped[str] = mapped_column(String(255), nullable=False)
    quantite: Mapped[float] = mapped_column(Numeric(10, 2), default=1)  # jours vendus
    prix_unitaire: Mapped[float | None] = mapped_column(Numeric(10, 2))
    montant_total: Mapped[float | None] = mapped_column(Numeric(12, 2))

    # Relations
    commande: Mapped["Commande"] = relationship()
    competences: Mapped[list["PrestationCompetence"]] = relationship(
        back_populates="prestation", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Prestation {self.code_prestation} - {self.libelle}>"


class PrestationCompetence(Base):
    """Compétence exigée par une prestation / Competency required by a service line."""
    __tablename__ = "prestation_competences"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    prestation_id: Mapped[int] = mapped_column(ForeignKey("prestations.id"), nullable=False)
    competence_id: Mapped[int] = mapped_column(ForeignKey("competences.id"), nullable=False)
    niveau_requis: Mapped[str | None] = mapped_column(String(50))  # texte libre
    obligatoire: Mapped[bool] = mapped_column(Boolean, default=False)

    # Relations
    prestation: Mapped["Prestation"] = relationship(back_populates="competences")
    competence: Mapped["Competence"] = relationship(lazy="selectin")
