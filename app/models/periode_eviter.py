"""Modèle Période à éviter / Consultant blocked period model."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# Types bloquants (contrainte dure) / Blocking types (hard constraint)
BLOCKING_PERIODE_TYPES = frozenset({"conges", "formation"})
# Type indicatif (avertissement) / Advisory type (warning only)
PREFERENCE_PERIODE_TYPE = "preference"


class PeriodeEviter(Base):
    """Congés, formation ou préférence d'un consultant / Consultant leave, training or preference.

    Table optionnelle : absente de certaines bases, détectée au démarrage.
    Optional table: missing from some stores, probed at startup.
    """
    __tablename__ = "consultants_periodes_eviter"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    consultant_id: Mapped[int] = mapped_column(ForeignKey("consultants.id"), nullable=False)
    date_debut: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    date_fin: Mapped[str] = mapped_column(String(10), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)  # conges | formation | preference
    motif: Mapped[str | None] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"<PeriodeEviter consultant={self.consultant_id} {self.type} {self.date_debut}->{self.date_fin}>"
