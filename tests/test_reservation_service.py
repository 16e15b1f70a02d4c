"""Tests du cycle de vie des réservations / Reservation lifecycle tests."""

import json

import pytest
from sqlalchemy import event, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import SchemaCapability, StoreCapabilities, probe_store_capabilities
from app.models.audit import AuditLog
from app.models.reservation import ReservationStatut
from app.schemas.reservation import ReservationCreate
from app.services.calendar_conflicts import PERIODES_UNAVAILABLE_WARNING, CalendarConflictService
from app.services.exceptions import (
    ConfirmationRequiredError,
    InvalidTransitionError,
    ReservationBlockedError,
    ReservationNotFoundError,
)
from app.services.reservation_service import CONFIRMATION_PROMPTS, ReservationService
from tests.conftest import FRIDAY, MONDAY, NEXT_MONDAY, THURSDAY, WEDNESDAY, seed_catalog


def _stats(planning, prestation_id):
    return next(p.stats for p in planning.prestations if p.prestation.prestation_id == prestation_id)


@pytest.mark.asyncio
async def test_capabilities_on_current_schema(caps):
    assert caps.reservation_prestation is SchemaCapability.SUPPORTED
    assert caps.periodes_eviter is SchemaCapability.SUPPORTED
    assert caps.prestation_supported


@pytest.mark.asyncio
async def test_quantity_scenario(session, data, caps, make_form):
    service = ReservationService(session, caps)

    first = await service.create(make_form(date_debut=MONDAY, date_fin=WEDNESDAY))
    assert _stats(first.planning, data.audit.id).planned == 3

    second = await service.create(make_form(date_debut=THURSDAY, date_fin=FRIDAY))
    stats = _stats(second.planning, data.audit.id)
    assert stats.planned == 5
    assert stats.remaining == 0
    assert stats.statut_label == "Entièrement planifié"

    with pytest.raises(ReservationBlockedError) as exc:
        await service.create(make_form(date_debut=NEXT_MONDAY, date_fin=NEXT_MONDAY))
    assert "reste à planifier (0)" in exc.value.message
    assert len(await service.list_visible_reservations(data.projet.id)) == 2


@pytest.mark.asyncio
async def test_update_unchanged_reservation_is_accepted(session, data, caps, make_form):
    service = ReservationService(session, caps)
    await service.create(make_form(date_debut=MONDAY, date_fin=WEDNESDAY))
    second = await service.create(make_form(date_debut=THURSDAY, date_fin=FRIDAY))

    result = await service.update(second.reservation.id, make_form(date_debut=THURSDAY, date_fin=FRIDAY, notes=" RAS "))
    assert result.reservation.notes == "RAS"
    assert _stats(result.planning, data.audit.id).planned == 5


@pytest.mark.asyncio
async def test_blocked_create_writes_nothing(session, data, caps, make_form):
    service = ReservationService(session, caps)
    with pytest.raises(ReservationBlockedError) as exc:
        await service.create(make_form(consultant_id=data.bob.id))
    assert exc.value.message.startswith("Compétence requise manquante")
    assert await service.list_visible_reservations(data.projet.id, include_cancelled=True) == []


@pytest.mark.asyncio
async def test_create_returns_warnings_and_audit(session, data, caps, make_form):
    service = ReservationService(session, caps)
    result = await service.create(make_form(role_projet="  ", notes="Kick-off"))

    assert result.warnings == ["Compétence optionnelle non couverte : SQL (Expert)"]
    assert result.reservation.statut == ReservationStatut.PREVUE
    assert result.reservation.role_projet is None
    assert result.reservation.consultant_nom == "Durand"

    logs = (await session.execute(select(AuditLog))).scalars().all()
    assert [entry.action for entry in logs] == ["CREATE"]
    assert json.loads(logs[0].changes)["prestation_id"] == data.audit.id


@pytest.mark.asyncio
async def test_cancellation_requires_confirmation(session, data, caps, make_form):
    service = ReservationService(session, caps)
    created = await service.create(make_form())

    with pytest.raises(ConfirmationRequiredError) as exc:
        await service.transition_status(created.reservation.id, "annulee")
    assert exc.value.prompt == CONFIRMATION_PROMPTS[ReservationStatut.ANNULEE]
    assert (await service.get(created.reservation.id)).statut == ReservationStatut.PREVUE

    with pytest.raises(ConfirmationRequiredError) as exc:
        await service.transition_status(created.reservation.id, "terminee")
    assert exc.value.prompt == 'Confirmez-vous le passage de cette réservation au statut "terminee" ?'


@pytest.mark.asyncio
async def test_cancellation_exclusion(session, data, caps, make_form):
    service = ReservationService(session, caps)
    created = await service.create(make_form(date_debut=MONDAY, date_fin=FRIDAY))

    result = await service.transition_status(created.reservation.id, "annulee", confirmed=True)
    assert result.reservation.statut == ReservationStatut.ANNULEE
    assert _stats(result.planning, data.audit.id).planned == 0
    assert result.planning.reservations == []

    # Historique conservé / History kept
    assert (await service.get(created.reservation.id)).statut == ReservationStatut.ANNULEE
    history = await service.list_visible_reservations(data.projet.id, include_cancelled=True)
    assert [r.id for r in history] == [created.reservation.id]

    # Plus de chevauchement ni de quantité consommée / No overlap nor consumed units
    again = await service.create(make_form(date_debut=MONDAY, date_fin=FRIDAY))
    assert _stats(again.planning, data.audit.id).planned == 5


@pytest.mark.asyncio
async def test_termination_counts_as_done(session, data, caps, make_form):
    service = ReservationService(session, caps)
    created = await service.create(make_form(prestation_id=data.formation.id, date_debut=THURSDAY, date_fin=FRIDAY))
    result = await service.transition_status(created.reservation.id, "terminee", confirmed=True)

    stats = _stats(result.planning, data.formation.id)
    assert stats.done == 2
    assert stats.statut_label == "Réalisé"
    actions = (await session.execute(select(AuditLog.action).order_by(AuditLog.id))).scalars().all()
    assert actions == ["CREATE", "STATUS"]


@pytest.mark.asyncio
async def test_overlap_across_prestations(session, data, caps, make_form):
    service = ReservationService(session, caps)
    await service.create(make_form(prestation_id=data.formation.id, date_debut=MONDAY, date_fin=MONDAY))

    with pytest.raises(ReservationBlockedError) as exc:
        await service.create(make_form(date_debut=MONDAY, date_fin=WEDNESDAY))
    assert exc.value.message == (
        "Indisponibilité : chevauchement avec une autre réservation (05/01/2026 → 05/01/2026)."
    )
    assert exc.value.warnings == ["Compétence optionnelle non couverte : SQL (Expert)"]


@pytest.mark.asyncio
async def test_cancelled_proposal_skips_calendar(session, data, caps, make_form):
    service = ReservationService(session, caps)
    await service.create(make_form(date_debut=MONDAY, date_fin=WEDNESDAY))
    result = await service.create(
        make_form(prestation_id=data.formation.id, date_debut=MONDAY, date_fin=MONDAY, statut="annulee")
    )
    assert result.reservation.statut == ReservationStatut.ANNULEE


@pytest.mark.asyncio
async def test_filter_by_prestation(session, data, caps, make_form):
    service = ReservationService(session, caps)
    await service.create(make_form(date_debut=MONDAY, date_fin=MONDAY))
    await service.create(make_form(prestation_id=data.formation.id, date_debut=FRIDAY, date_fin=FRIDAY))

    rows = await service.list_visible_reservations(data.projet.id, prestation_id=data.formation.id)
    assert [r.date_debut for r in rows] == [FRIDAY]
    planning = await service.load_planning(data.projet.id, prestation_id=data.audit.id)
    assert [r.date_debut for r in planning.reservations] == [MONDAY]


@pytest.mark.asyncio
async def test_missing_reservation(session, data, caps, make_form):
    service = ReservationService(session, caps)
    with pytest.raises(ReservationNotFoundError):
        await service.get(9999)
    with pytest.raises(ReservationNotFoundError):
        await service.update(9999, make_form())
    with pytest.raises(ReservationNotFoundError):
        await service.transition_status(9999, "annulee", confirmed=True)


@pytest.mark.asyncio
async def test_legacy_store_without_prestation_column(legacy_engine):
    caps = await probe_store_capabilities(legacy_engine)
    assert caps.reservation_prestation is SchemaCapability.UNSUPPORTED
    assert caps.periodes_eviter is SchemaCapability.UNSUPPORTED

    factory = async_sessionmaker(legacy_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        data = await seed_catalog(session)
        service = ReservationService(session, caps)
        result = await service.create(ReservationCreate(
            projet_id=data.projet.id, consultant_id=data.bob.id, date_debut=MONDAY, date_fin=FRIDAY,
        ))
        assert result.warnings == [PERIODES_UNAVAILABLE_WARNING]
        assert result.reservation.prestation_id is None
        assert result.planning.prestation_tracking is False
        assert all(p.stats is None for p in result.planning.prestations)
        await session.commit()


@pytest.mark.asyncio
async def test_cancelled_reservation_is_final(session, data, caps, make_form):
    service = ReservationService(session, caps)
    cancelled = await service.create(make_form(date_debut=MONDAY, date_fin=WEDNESDAY))
    await service.transition_status(cancelled.reservation.id, "annulee", confirmed=True)
    rebooked = await service.create(make_form(date_debut=MONDAY, date_fin=WEDNESDAY))

    for target in ("terminee", "annulee"):
        with pytest.raises(InvalidTransitionError):
            await service.transition_status(cancelled.reservation.id, target, confirmed=True)

    assert (await service.get(cancelled.reservation.id)).statut == ReservationStatut.ANNULEE
    overlaps = await CalendarConflictService.find_overlaps(
        session, data.alice.id, MONDAY, WEDNESDAY, exclude_reservation_id=rebooked.reservation.id
    )
    assert overlaps == []
    planning = await service.load_planning(data.projet.id)
    assert _stats(planning, data.audit.id).planned == 3


@pytest.mark.asyncio
async def test_missing_periods_table_does_not_break_the_write(engine, session, data, make_form):
    statements = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    await session.execute(text("DROP TABLE consultants_periodes_eviter"))
    await session.commit()
    caps = StoreCapabilities(
        reservation_prestation=SchemaCapability.SUPPORTED,
        periodes_eviter=SchemaCapability.UNKNOWN,
    )
    event.listen(engine.sync_engine, "before_cursor_execute", _record)
    try:
        result = await ReservationService(session, caps).create(make_form())
        await session.commit()
    finally:
        event.remove(engine.sync_engine, "before_cursor_execute", _record)

    assert PERIODES_UNAVAILABLE_WARNING in result.warnings
    assert any(s.startswith("SAVEPOINT") for s in statements)
    assert any(s.startswith("ROLLBACK TO SAVEPOINT") for s in statements)
    rows = await ReservationService(session, caps).list_visible_reservations(data.projet.id)
    assert [r.id for r in rows] == [result.reservation.id]
