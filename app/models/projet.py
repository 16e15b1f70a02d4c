"""Modèle Projet / Project model."""

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# Table de jonction Projet <-> Prestation / Junction table Project <-> Service line
projet_prestations = Table(
    "projet_prestations",
    Base.metadata,
    Column("projet_id", ForeignKey("projets.id", ondelete="CASCADE"), primary_key=True),
    Column("prestation_id", ForeignKey("prestations.id", ondelete="CASCADE"), primary_key=True),
)

# Statuts de projet ouverts a la planification / Project statuses open to planning
PLANNABLE_PROJET_STATUTS = ("affecte", "en_cours")


class Projet(Base):
    """Projet issu d'une commande / Project created from an order."""
    __tablename__ = "projets"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    numero_projet: Mapped[str] = mapped_column(String(50), nullable=False)
    titre: Mapped[str] = mapped_column(String(200), nullable=False)
    statut: Mapped[str] = mapped_column(String(30), default="affecte")
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), nullable=False)
    commande_id: Mapped[int | None] = mapped_column(ForeignKey("commandes.id"))
    date_debut_prevue: Mapped[str | None] = mapped_column(String(10))  # YYYY-MM-DD
    date_fin_prevue: Mapped[str | None] = mapped_column(String(10))
    priorite: Mapped[str] = mapped_column(String(20), default="normale")
    date_affectation: Mapped[str | None] = mapped_column(String(25))  # ISO 8601
    complexite: Mapped[str | None] = mapped_column(String(30))
    type_intervention: Mapped[str | None] = mapped_column(String(50))

    # Relations
    client: Mapped["Client"] = relationship(back_populates="projets")
    commande: Mapped["Commande"] = relationship()
    prestations: Mapped[list["Prestation"]] = relationship(secondary=projet_prestations)

    def __repr__(self) -> str:
        return f"<Projet {self.numero_projet} - {self.titre}>"
