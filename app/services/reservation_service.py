"""
Service Cycle de vie des réservations / Reservation lifecycle service.
Création et modification validées, passage aux statuts finaux avec
confirmation, listes visibles. Chaque mutation réussie recharge la vue
de planification du projet.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import insert, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import StoreCapabilities
from app.models.audit import AuditLog
from app.models.reservation import Reservation, ReservationStatut
from app.schemas.planning import PrestaSortKey, ProjetPlanning, ReservationMutationResult
from app.schemas.reservation import ReservationBase, ReservationRead, ValidationOutcome
from app.services.exceptions import (
    ConfirmationRequiredError,
    InvalidTransitionError,
    ProjetNotFoundError,
    ReservationBlockedError,
    ReservationNotFoundError,
)
from app.services.planning_service import (
    build_planning,
    fetch_reservation,
    load_projet,
    load_projet_reservations,
    visible_reservations,
)
from app.services.reservation_validator import ReservationValidator, is_final_statut
from app.utils.formatting import parse_iso_date

log = logging.getLogger(__name__)

CONFIRMATION_PROMPTS = {
    ReservationStatut.ANNULEE: (
        "Confirmez-vous l’annulation de cette réservation ? "
        "Elle ne sera plus affichée dans la liste."
    ),
    ReservationStatut.TERMINEE: 'Confirmez-vous le passage de cette réservation au statut "terminee" ?',
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _clean_text(value: str | None) -> str | None:
    return (value or "").strip() or None


class ReservationService:
    """Cycle de vie des réservations / Reservation lifecycle manager."""

    def __init__(self, db: AsyncSession, caps: StoreCapabilities):
        self.db = db
        self.caps = caps

    # ─── Lecture / Read ───

    async def get(self, reservation_id: int) -> ReservationRead:
        """Réservation par id, annulées comprises (historique) / By id, cancelled included."""
        reservation = await fetch_reservation(self.db, reservation_id, self.caps)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        return reservation

    async def list_visible_reservations(
        self,
        projet_id: int,
        prestation_id: int | None = None,
        include_cancelled: bool = False,
    ) -> list[ReservationRead]:
        reservations = await load_projet_reservations(self.db, projet_id, self.caps)
        return visible_reservations(reservations, self.caps, prestation_id, include_cancelled)

    async def load_planning(
        self,
        projet_id: int,
        prestation_id: int | None = None,
        sort_key: PrestaSortKey = "prestation",
        sort_dir: Literal["asc", "desc"] = "asc",
    ) -> ProjetPlanning:
        projet = await load_projet(self.db, projet_id)
        if projet is None:
            raise ProjetNotFoundError(projet_id)
        reservations = await load_projet_reservations(self.db, projet_id, self.caps)
        return build_planning(projet, reservations, self.caps, prestation_id, sort_key, sort_dir)

    # ─── Validation ───

    async def validate(self, form: ReservationBase, editing_id: int | None = None) -> ValidationOutcome:
        """Charger le contexte du projet puis valider / Load project context then validate."""
        prestations = {}
        reservations: list[ReservationRead] = []
        if form.projet_id:
            projet = await load_projet(self.db, form.projet_id)
            if projet is None:
                return ValidationOutcome(blocking_error="Projet inconnu")
            prestations = {p.prestation_id: p for p in projet.prestations}
            reservations = await load_projet_reservations(self.db, form.projet_id, self.caps)

        validator = ReservationValidator(self.db, self.caps, prestations, reservations, editing_id)
        return await validator.validate(form)

    def _payload(self, form: ReservationBase) -> dict:
        payload = {
            "projet_id": form.projet_id,
            "consultant_id": form.consultant_id,
            "date_debut": parse_iso_date(form.date_debut).isoformat(),
            "date_fin": parse_iso_date(form.date_fin).isoformat(),
            "charge_pct": form.charge_pct,
            "statut": ReservationStatut(form.statut).value,
            "role_projet": _clean_text(form.role_projet),
            "notes": _clean_text(form.notes),
        }
        # Colonne écrite seulement si la base la porte / Written only when the store has it
        if self.caps.prestation_supported:
            payload["prestation_id"] = form.prestation_id or None
        return payload

    async def _log_audit(self, reservation_id: int, action: str, changes: dict) -> None:
        """Enregistrer une action dans l'historique / Log an action to audit_logs."""
        self.db.add(AuditLog(
            entity_type="reservation",
            entity_id=reservation_id,
            action=action,
            changes=json.dumps(changes, ensure_ascii=False),
            timestamp=_now(),
        ))
        await self.db.flush()

    async def _result(self, reservation_id: int, projet_id: int, warnings: list[str]) -> ReservationMutationResult:
        return ReservationMutationResult(
            reservation=await self.get(reservation_id),
            warnings=warnings,
            planning=await self.load_planning(projet_id),
        )

    # ─── Mutations ───

    async def create(self, form: ReservationBase) -> ReservationMutationResult:
        outcome = await self.validate(form)
        if outcome.is_blocking:
            raise ReservationBlockedError(outcome.blocking_error, outcome.warnings)

        now = _now()
        payload = self._payload(form)
        result = await self.db.execute(
            insert(Reservation.__table__).values(**payload, created_at=now, updated_at=now)
        )
        reservation_id = result.inserted_primary_key[0]
        await self._log_audit(reservation_id, "CREATE", payload)
        log.info(
            "Reservation %s creee: consultant=%s %s->%s",
            reservation_id, form.consultant_id, payload["date_debut"], payload["date_fin"],
        )
        return await self._result(reservation_id, form.projet_id, outcome.warnings)

    async def update(self, reservation_id: int, form: ReservationBase) -> ReservationMutationResult:
        await self.get(reservation_id)

        outcome = await self.validate(form, editing_id=reservation_id)
        if outcome.is_blocking:
            raise ReservationBlockedError(outcome.blocking_error, outcome.warnings)

        payload = self._payload(form)
        await self.db.execute(
            update(Reservation.__table__)
            .where(Reservation.__table__.c.id == reservation_id)
            .values(**payload, updated_at=_now())
        )
        await self._log_audit(reservation_id, "UPDATE", payload)
        log.info("Reservation %s modifiee", reservation_id)
        return await self._result(reservation_id, form.projet_id, outcome.warnings)

    async def transition_status(
        self,
        reservation_id: int,
        statut: ReservationStatut | str,
        confirmed: bool = False,
    ) -> ReservationMutationResult:
        """Passage à annulee / terminee : confirmation requise, statut seul modifié.

        Pas de revalidation complète (chevauchement, compétences, quantité).
        """
        statut = ReservationStatut(statut)
        if not is_final_statut(statut):
            raise ValueError(f"Transition directe non autorisee vers {statut.value}")

        current = await self.get(reservation_id)
        # Annulee est definitif / Cancelled is final
        if current.statut == ReservationStatut.ANNULEE:
            raise InvalidTransitionError(reservation_id, current.statut.value, statut.value)
        if not confirmed:
            raise ConfirmationRequiredError(CONFIRMATION_PROMPTS[statut])

        await self.db.execute(
            update(Reservation.__table__)
            .where(Reservation.__table__.c.id == reservation_id)
            .values(statut=statut.value)
        )
        await self._log_audit(
            reservation_id, "STATUS", {"from": current.statut.value, "to": statut.value}
        )
        log.info("Reservation %s: %s -> %s", reservation_id, current.statut.value, statut.value)
        return await self._result(reservation_id, current.projet_id, [])
