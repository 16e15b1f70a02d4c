"""
Service de rapprochement des quantités / Quantity reconciliation service.
Compare la quantité vendue d'une prestation aux unités déjà planifiées,
et calcule les statistiques dérivées par prestation (jamais stockées).
"""

from collections.abc import Iterable

from app.config import settings
from app.models.reservation import ReservationStatut
from app.schemas.planning import PrestationStats
from app.services.unit_calculator import UnitCalculatorService
from app.utils.formatting import format_qty

# Ordre des libellés de statut (tri) / Status label ordering (sorting)
STATUT_LABEL_RANK = {
    "Non planifié": 0,
    "Partiellement planifié": 1,
    "Entièrement planifié": 2,
    "Réalisé": 3,
}


def _is_cancelled(reservation) -> bool:
    return reservation.statut == ReservationStatut.ANNULEE


class QuantityReconcilerService:
    """Reste à planifier et statistiques / Remaining quantity and statistics."""

    @staticmethod
    def planned_units(reservations: Iterable, exclude_reservation_id: int | None = None) -> float:
        """Somme des unités, réservation éditée exclue / Sum of units, edited reservation excluded."""
        return sum(
            UnitCalculatorService.units_of(r)
            for r in reservations
            if exclude_reservation_id is None or r.id != exclude_reservation_id
        )

    @staticmethod
    def remaining(quantite: float, planned: float) -> float:
        return max(0.0, float(quantite or 0) - planned)

    @staticmethod
    def check(
        quantite: float,
        other_reservations: Iterable,
        date_debut: str | None,
        date_fin: str | None,
        charge_pct: float | None,
        statut: ReservationStatut | str,
    ) -> str | None:
        """Erreur bloquante si la proposition dépasse le reste à planifier /
        Blocking error when the proposal exceeds the remaining quantity.

        other_reservations : réservations de la prestation hors celle éditée.
        """
        planned_without_current = QuantityReconcilerService.planned_units(other_reservations)
        remaining = QuantityReconcilerService.remaining(quantite, planned_without_current)
        new_units = UnitCalculatorService.reservation_units(date_debut, date_fin, charge_pct, statut)

        if new_units > remaining + settings.QUANTITY_TOLERANCE:
            return (
                f"Quantité planifiée ({format_qty(new_units)}) > reste à planifier "
                f"({format_qty(remaining)}). Ajustez les dates et/ou la charge."
            )
        return None

    @staticmethod
    def compute_stats(quantite: float, reservations: list) -> PrestationStats:
        """Statistiques d'une prestation à partir de ses réservations /
        Service-line statistics from its reservations.
        """
        sold = float(quantite or 0)
        planned = QuantityReconcilerService.planned_units(reservations)
        done = sum(
            UnitCalculatorService.units_of(r)
            for r in reservations
            if r.statut == ReservationStatut.TERMINEE
        )
        active = [r for r in reservations if not _is_cancelled(r)]

        if sold > 0 and done >= sold:
            label = "Réalisé"
        elif sold > 0 and planned >= sold:
            label = "Entièrement planifié"
        elif planned > 0:
            label = "Partiellement planifié"
        else:
            label = "Non planifié"

        return PrestationStats(
            planned=planned,
            done=done,
            remaining=QuantityReconcilerService.remaining(sold, planned),
            sessions_count=len(active),
            min_start=min((r.date_debut for r in active), default=None),
            max_end=max((r.date_fin for r in active), default=None),
            statut_label=label,
        )
