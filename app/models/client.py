"""Modèle Client / Client model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Client(Base):
    """Client (collectivité, établissement public) / Client organisation."""
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nom: Mapped[str] = mapped_column(String(200), nullable=False)

    # Relations
    projets: Mapped[list["Projet"]] = relationship(back_populates="client")

    def __repr__(self) -> str:
        return f"<Client {self.nom}>"
