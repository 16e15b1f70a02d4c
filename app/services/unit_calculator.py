"""
Service de calcul des unités de charge / Workload unit calculation service.
Une unité = un jour ouvré (lundi-vendredi) à 100 % de charge.
One unit = one business day (Monday-Friday) at 100% allocation.
"""

from datetime import date

from app.models.reservation import ReservationStatut
from app.utils.formatting import parse_iso_date


class UnitCalculatorService:
    """Conversion période + charge -> unités / Date range + allocation -> units."""

    @staticmethod
    def count_business_days_inclusive(start: date | str | None, end: date | str | None) -> int:
        """Jours ouvrés bornes incluses / Inclusive business days.

        0 si une date est absente ou invalide, ou si fin < début.
        """
        start_date = parse_iso_date(start)
        end_date = parse_iso_date(end)
        if start_date is None or end_date is None or end_date < start_date:
            return 0

        total_days = (end_date - start_date).days + 1
        full_weeks, remainder = divmod(total_days, 7)
        count = full_weeks * 5
        first_weekday = start_date.weekday()
        for offset in range(remainder):
            if (first_weekday + offset) % 7 < 5:
                count += 1
        return count

    @staticmethod
    def reservation_units(
        date_debut: date | str | None,
        date_fin: date | str | None,
        charge_pct: float | None,
        statut: ReservationStatut | str | None,
    ) -> float:
        """Unités d'une réservation / Units of a reservation (annulee -> 0)."""
        if statut == ReservationStatut.ANNULEE:
            return 0.0
        days = UnitCalculatorService.count_business_days_inclusive(date_debut, date_fin)
        if days == 0:
            return 0.0
        try:
            pct = float(charge_pct or 0)
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, days * pct / 100)

    @staticmethod
    def units_of(reservation) -> float:
        """Unités d'un objet réservation (ORM, schéma ou ligne) / Units of any reservation-like object."""
        return UnitCalculatorService.reservation_units(
            reservation.date_debut,
            reservation.date_fin,
            reservation.charge_pct,
            reservation.statut,
        )
