"""
Validation d'une réservation avant création / modification.
Reservation validation before create / update.

Phase 1 (synchrone) : champs requis, charge, dates, reste à planifier,
sur les données déjà chargées. Phase 2 (asynchrone, seulement si la phase 1
passe) : compétences, chevauchements, périodes à éviter.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.database import StoreCapabilities
from app.models.reservation import ReservationStatut
from app.schemas.planning import PrestationRead
from app.schemas.reservation import ReservationBase, ReservationRead, ValidationOutcome
from app.services.calendar_conflicts import CalendarConflictService
from app.services.quantity_reconciler import QuantityReconcilerService
from app.services.skill_matcher import SkillMatcherService
from app.utils.formatting import parse_iso_date

log = logging.getLogger(__name__)


class ReservationValidator:
    """Pipeline de validation en deux phases / Two-phase validation pipeline."""

    def __init__(
        self,
        db: AsyncSession,
        caps: StoreCapabilities,
        prestations: dict[int, PrestationRead],
        reservations: list[ReservationRead],
        editing_id: int | None = None,
    ):
        self.db = db
        self.caps = caps
        self.prestations = prestations
        self.reservations = reservations
        self.editing_id = editing_id

    def validate_sync(self, form: ReservationBase) -> str | None:
        """Contrôles locaux, première erreur retournée / Local checks, first error returned."""
        if not form.projet_id:
            return "Projet requis"
        if not form.consultant_id:
            return "Consultant requis"
        if not form.date_debut:
            return "Date début requise"
        if not form.date_fin:
            return "Date fin requise"
        if form.charge_pct < 0 or form.charge_pct > 100:
            return "Charge invalide (0..100)"

        debut = parse_iso_date(form.date_debut)
        fin = parse_iso_date(form.date_fin)
        if debut is None:
            return "Date début invalide (AAAA-MM-JJ)"
        if fin is None:
            return "Date fin invalide (AAAA-MM-JJ)"
        if debut > fin:
            return "La date de fin doit être ≥ date de début"

        if not self.caps.prestation_supported:
            return None
        if not form.prestation_id:
            return "Prestation requise (reservations.prestation_id)"

        prestation = self.prestations.get(form.prestation_id)
        if prestation is None:
            return "Prestation inconnue"

        others = [
            r for r in self.reservations
            if r.prestation_id == form.prestation_id and r.id != self.editing_id
        ]
        return QuantityReconcilerService.check(
            prestation.quantite, others, form.date_debut, form.date_fin, form.charge_pct, form.statut,
        )

    async def validate_async(self, form: ReservationBase) -> ValidationOutcome:
        """Contrôles inter-enregistrements / Cross-record checks.

        Chaque contrôle peut bloquer immédiatement ou ajouter des avertissements.
        """
        warnings: list[str] = []

        if self.caps.prestation_supported and form.prestation_id:
            # Prestation deja verifiee par validate_sync / Already checked by validate_sync
            prestation = self.prestations[form.prestation_id]
            skills = await SkillMatcherService.check(self.db, prestation.competences, form.consultant_id)
            warnings += skills.warnings
            if skills.is_blocking:
                return ValidationOutcome(blocking_error=skills.blocking_error, warnings=warnings)

        # Une réservation annulée ne peut pas entrer en conflit de calendrier
        if form.statut == ReservationStatut.ANNULEE:
            return ValidationOutcome(warnings=warnings)

        debut = parse_iso_date(form.date_debut).isoformat()
        fin = parse_iso_date(form.date_fin).isoformat()
        calendar = await CalendarConflictService.check(
            self.db,
            form.consultant_id,
            debut,
            fin,
            exclude_reservation_id=self.editing_id,
            periodes_capability=self.caps.periodes_eviter,
        )
        warnings += calendar.warnings
        return ValidationOutcome(blocking_error=calendar.blocking_error, warnings=warnings)

    async def validate(self, form: ReservationBase) -> ValidationOutcome:
        error = self.validate_sync(form)
        if error:
            log.info("Reservation refusee (controle local): %s", error)
            return ValidationOutcome(blocking_error=error)

        outcome = await self.validate_async(form)
        if outcome.is_blocking:
            log.info("Reservation refusee: %s", outcome.blocking_error)
        elif outcome.warnings:
            log.info("Reservation acceptee avec %d avertissement(s)", len(outcome.warnings))
        return outcome


def is_final_statut(statut: ReservationStatut | str) -> bool:
    return statut in (ReservationStatut.ANNULEE, ReservationStatut.TERMINEE)
