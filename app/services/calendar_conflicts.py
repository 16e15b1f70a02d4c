"""
Service de détection des conflits de calendrier / Calendar conflict detection service.
1. Chevauchement avec les autres réservations non annulées du consultant (tous projets).
2. Périodes à éviter : congés/formation bloquants, préférence indicative.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import SchemaCapability, is_missing_relation_error, store_error_message
from app.models.periode_eviter import BLOCKING_PERIODE_TYPES, PREFERENCE_PERIODE_TYPE, PeriodeEviter
from app.models.reservation import Reservation, ReservationStatut
from app.schemas.reservation import ValidationOutcome
from app.utils.formatting import format_date_fr, normalize_label

log = logging.getLogger(__name__)

PERIODES_UNAVAILABLE_WARNING = (
    "Table consultants_periodes_eviter indisponible : contrôle congés/préférences non appliqué."
)


def _ellipsis(rows: list) -> str:
    return "…" if len(rows) > settings.OVERLAP_LABEL_LIMIT else ""


def build_overlap_label(rows: list) -> str:
    """'JJ/MM/AAAA → JJ/MM/AAAA • ...' limité à OVERLAP_LABEL_LIMIT périodes."""
    return " • ".join(
        f"{format_date_fr(r.date_debut)} → {format_date_fr(r.date_fin)}"
        for r in rows[: settings.OVERLAP_LABEL_LIMIT]
    )


def build_periode_label(rows: list, type_label: str | None = None) -> str:
    """'type : début → fin (motif) • ...' / Blocked-period label."""
    parts = []
    for r in rows[: settings.OVERLAP_LABEL_LIMIT]:
        label = f"{type_label or r.type} : {format_date_fr(r.date_debut)} → {format_date_fr(r.date_fin)}"
        if r.motif:
            label += f" ({r.motif})"
        parts.append(label)
    return " • ".join(parts)


def is_blocking_periode_type(value: str | None) -> bool:
    return normalize_label(value) in BLOCKING_PERIODE_TYPES


def is_preference_periode_type(value: str | None) -> bool:
    return normalize_label(value) == PREFERENCE_PERIODE_TYPE


class CalendarConflictService:
    """Contrôles calendrier d'un consultant / Consultant calendar checks."""

    @staticmethod
    async def find_overlaps(
        db: AsyncSession,
        consultant_id: int,
        date_debut: str,
        date_fin: str,
        exclude_reservation_id: int | None = None,
    ) -> list:
        """Réservations non annulées qui intersectent la période / Non-cancelled intersecting reservations."""
        query = (
            select(
                Reservation.id,
                Reservation.projet_id,
                Reservation.date_debut,
                Reservation.date_fin,
                Reservation.statut,
            )
            .where(
                Reservation.consultant_id == consultant_id,
                Reservation.statut != ReservationStatut.ANNULEE.value,
                Reservation.date_debut <= date_fin,
                Reservation.date_fin >= date_debut,
            )
            .order_by(Reservation.date_debut)
        )
        if exclude_reservation_id is not None:
            query = query.where(Reservation.id != exclude_reservation_id)
        result = await db.execute(query)
        return list(result.all())

    @staticmethod
    async def check_overlaps(
        db: AsyncSession,
        consultant_id: int,
        date_debut: str,
        date_fin: str,
        exclude_reservation_id: int | None = None,
    ) -> ValidationOutcome:
        try:
            overlaps = await CalendarConflictService.find_overlaps(
                db, consultant_id, date_debut, date_fin, exclude_reservation_id
            )
        except SQLAlchemyError as exc:
            log.error("Detection chevauchement impossible: %s", store_error_message(exc))
            return ValidationOutcome(
                blocking_error=store_error_message(exc, "Erreur détection chevauchement réservations")
            )

        if not overlaps:
            return ValidationOutcome()
        log.info("Consultant %s: %d reservation(s) en chevauchement", consultant_id, len(overlaps))
        return ValidationOutcome(
            blocking_error=(
                "Indisponibilité : chevauchement avec une autre réservation "
                f"({build_overlap_label(overlaps)}{_ellipsis(overlaps)})."
            )
        )

    @staticmethod
    async def check_blocked_periods(
        db: AsyncSession,
        consultant_id: int,
        date_debut: str,
        date_fin: str,
        capability: SchemaCapability = SchemaCapability.UNKNOWN,
    ) -> ValidationOutcome:
        """Congés/formation bloquants, préférence en avertissement /
        Leave/training block, preference warns.

        Table absente -> avertissement, le contrôle n'est pas appliqué.
        """
        if capability is SchemaCapability.UNSUPPORTED:
            return ValidationOutcome(warnings=[PERIODES_UNAVAILABLE_WARNING])

        try:
            # Savepoint : un echec n'annule que cette lecture / A failure rolls back this read only
            async with db.begin_nested():
                result = await db.execute(
                    select(PeriodeEviter)
                    .where(
                        PeriodeEviter.consultant_id == consultant_id,
                        PeriodeEviter.date_debut <= date_fin,
                        PeriodeEviter.date_fin >= date_debut,
                    )
                    .order_by(PeriodeEviter.date_debut)
                )
                rows = list(result.scalars().all())
        except SQLAlchemyError as exc:
            if is_missing_relation_error(exc):
                log.warning("consultants_periodes_eviter indisponible: %s", store_error_message(exc))
                return ValidationOutcome(warnings=[PERIODES_UNAVAILABLE_WARNING])
            return ValidationOutcome(
                blocking_error=store_error_message(exc, "Erreur lecture consultants_periodes_eviter")
            )

        blocking = [r for r in rows if is_blocking_periode_type(r.type)]
        if blocking:
            return ValidationOutcome(
                blocking_error=(
                    "Indisponibilité (congés/formation) sur la période : "
                    f"{build_periode_label(blocking)}{_ellipsis(blocking)}."
                )
            )

        outcome = ValidationOutcome()
        prefs = [r for r in rows if is_preference_periode_type(r.type)]
        if prefs:
            outcome.warnings.append(
                "Période à éviter (préférence) : "
                f"{build_periode_label(prefs, 'préférence')}{_ellipsis(prefs)}."
            )
        return outcome

    @staticmethod
    async def check(
        db: AsyncSession,
        consultant_id: int,
        date_debut: str,
        date_fin: str,
        exclude_reservation_id: int | None = None,
        periodes_capability: SchemaCapability = SchemaCapability.UNKNOWN,
    ) -> ValidationOutcome:
        """Chevauchement puis périodes à éviter / Overlap first, then blocked periods."""
        overlap = await CalendarConflictService.check_overlaps(
            db, consultant_id, date_debut, date_fin, exclude_reservation_id
        )
        if overlap.is_blocking:
            return overlap
        return await CalendarConflictService.check_blocked_periods(
            db, consultant_id, date_debut, date_fin, periodes_capability
        )
