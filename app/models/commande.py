"""Modèle Commande / Order model."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Commande(Base):
    """En-tête de commande transformée en projet / Order header turned into a project."""
    __tablename__ = "commandes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    numero_commande: Mapped[str] = mapped_column(String(50), nullable=False)
    statut: Mapped[str | None] = mapped_column(String(30))
    client_id: Mapped[int | None] = mapped_column(ForeignKey("clients.id"))

    def __repr__(self) -> str:
        return f"<Commande {self.numero_commande}>"
