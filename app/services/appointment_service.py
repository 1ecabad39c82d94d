"""
Appointment (agenda) business logic service.

Dates and times are wall-clock values in CALENDAR_TIMEZONE. The external
calendar is kept in step on a best-effort basis: a calendar failure is logged
and the appointment write still succeeds.
"""

import logging
import uuid
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import Actor
from app.core.config import settings
from app.db.mirror import NullMirror, SecondaryMirror, mirror_best_effort
from app.db.session import commit_or_conflict
from app.errors import DependencyError, NotFoundError, PermissionDeniedError, ValidationError
from app.models.appointment import Appointment
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.user_repository import UserRepository
from app.schemas.appointment import AppointmentCreate, AppointmentUpdate
from app.services.calendar_sink import CalendarEvent, CalendarSink, NullCalendarSink
from app.utils.canonical_json import row_payload
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

MIRROR_TABLE = "appointment"


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Data inválida: {value!r}, use o formato YYYY-MM-DD")


def appointment_start(data: str, horario: str, tz: ZoneInfo) -> datetime:
    """Aware datetime for an appointment's date and time."""
    try:
        naive = datetime.strptime(f"{data} {horario}", "%Y-%m-%d %H:%M")
    except ValueError:
        raise ValidationError("Data ou horário inválidos")
    return naive.replace(tzinfo=tz)


def ensure_not_past(data: str, horario: str, tz: ZoneInfo, now: datetime) -> None:
    if appointment_start(data, horario, tz) < now.astimezone(tz):
        raise ValidationError("Não é possível agendar para uma data ou horário no passado")


def history_item(tipo: str, autor_id: UUID, now: datetime) -> dict:
    return {"tipo": tipo, "data": now.isoformat(), "autor": str(autor_id)}


class AppointmentService:
    """Service for appointment business logic."""

    def __init__(
        self,
        db: AsyncSession,
        repository: Optional[AppointmentRepository] = None,
        user_repository: Optional[UserRepository] = None,
        calendar: Optional[CalendarSink] = None,
        mirror: Optional[SecondaryMirror] = None,
        timezone_name: Optional[str] = None,
        clock=utc_now,
    ):
        self.db = db
        self.repository = repository or AppointmentRepository(db)
        self.user_repository = user_repository or UserRepository(db)
        self.calendar = calendar or NullCalendarSink()
        self.mirror = mirror or NullMirror()
        self.tz = ZoneInfo(timezone_name or settings.CALENDAR_TIMEZONE)
        self.clock = clock

    async def _get(self, appointment_id: UUID) -> Appointment:
        appointment = await self.repository.get_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError("Compromisso não encontrado")
        return appointment

    def _ensure_organizer(self, actor: Actor, appointment: Appointment) -> None:
        if appointment.organizador_id != actor.id:
            raise PermissionDeniedError("Apenas o organizador pode alterar este compromisso")

    def _member_filter(self, actor: Actor) -> Optional[UUID]:
        return None if actor.is_top_tier else actor.id

    async def _calendar_event(self, appointment: Appointment) -> CalendarEvent:
        participants = await self.user_repository.get_many(appointment.participantes or [])
        return CalendarEvent(
            summary=appointment.titulo,
            start=appointment_start(appointment.data, appointment.horario, self.tz),
            description=appointment.descricao,
            location=appointment.local,
            attendees=sorted(u.email for u in participants if u.email),
        )

    async def _sync_calendar(self, appointment: Appointment, cancel: bool = False) -> None:
        try:
            if cancel:
                if appointment.google_calendar_event_id:
                    await self.calendar.delete(appointment.google_calendar_event_id)
                return
            event = await self._calendar_event(appointment)
            if appointment.google_calendar_event_id:
                await self.calendar.update(appointment.google_calendar_event_id, event)
            else:
                appointment.google_calendar_event_id = await self.calendar.create(event)
        except DependencyError as e:
            logger.warning("Calendar sync failed for appointment %s: %s", appointment.id, e.message)

    async def _persist(self, appointment: Appointment) -> Appointment:
        await self.repository.save(appointment)
        await commit_or_conflict(self.db)
        await mirror_best_effort(self.mirror, MIRROR_TABLE, row_payload(appointment))
        return appointment

    async def create_appointment(self, actor: Actor, data: AppointmentCreate) -> Appointment:
        now = self.clock()
        ensure_not_past(data.data, data.horario, self.tz, now)
        appointment = Appointment(
            id=uuid.uuid4(),
            titulo=data.titulo.strip(),
            descricao=data.descricao,
            data=data.data,
            horario=data.horario,
            participantes=list(dict.fromkeys(data.participantes)),
            tipo=data.tipo,
            local=data.local,
            status="pendente",
            organizador_id=actor.id,
            historico=[history_item("criacao", actor.id, now)],
        )
        await self.repository.add(appointment)
        await self._sync_calendar(appointment)
        logger.info("Appointment %s created by %s", appointment.id, actor.id)
        return await self._persist(appointment)

    async def list_appointments(self, actor: Actor, status: Optional[str] = None) -> List[Appointment]:
        return await self.repository.list(status=status, member_id=self._member_filter(actor))

    async def list_today(self, actor: Actor) -> List[Appointment]:
        today = self.clock().astimezone(self.tz).date().isoformat()
        return await self.repository.list(
            start_date=today,
            end_date=today,
            member_id=self._member_filter(actor),
        )

    async def list_period(self, actor: Actor, start: str, end: str) -> List[Appointment]:
        """Appointments between start and end, both inclusive."""
        if parse_date(start) > parse_date(end):
            raise ValidationError("A data inicial deve ser anterior ou igual à data final")
        return await self.repository.list(
            start_date=start,
            end_date=end,
            member_id=self._member_filter(actor),
        )

    async def get_appointment(self, actor: Actor, appointment_id: UUID) -> Appointment:
        appointment = await self._get(appointment_id)
        if not actor.is_top_tier and actor.id != appointment.organizador_id and actor.id not in (
            appointment.participantes or []
        ):
            raise PermissionDeniedError("Sem permissão para aceder a este compromisso")
        return appointment

    async def update_appointment(self, actor: Actor, appointment_id: UUID, data: AppointmentUpdate) -> Appointment:
        appointment = await self._get(appointment_id)
        self._ensure_organizer(actor, appointment)
        if appointment.status == "cancelado":
            raise ValidationError("Compromisso cancelado não pode ser alterado")

        update_data = data.model_dump(exclude_unset=True)
        now = self.clock()
        if "data" in update_data or "horario" in update_data:
            ensure_not_past(
                update_data.get("data") or appointment.data,
                update_data.get("horario") or appointment.horario,
                self.tz,
                now,
            )
        if update_data.get("participantes") is not None:
            update_data["participantes"] = list(dict.fromkeys(update_data["participantes"]))
        for field, value in update_data.items():
            setattr(appointment, field, value)
        appointment.historico = list(appointment.historico or []) + [
            history_item("atualizacao", actor.id, now)
        ]

        await self._sync_calendar(appointment, cancel=appointment.status == "cancelado")
        logger.info("Appointment %s updated by %s: %s", appointment.id, actor.id, sorted(update_data))
        return await self._persist(appointment)

    async def cancel_appointment(self, actor: Actor, appointment_id: UUID) -> Appointment:
        appointment = await self._get(appointment_id)
        self._ensure_organizer(actor, appointment)
        if appointment.status == "cancelado":
            raise ValidationError("Compromisso já está cancelado")
        appointment.status = "cancelado"
        appointment.historico = list(appointment.historico or []) + [
            history_item("cancelamento", actor.id, self.clock())
        ]
        await self._sync_calendar(appointment, cancel=True)
        logger.info("Appointment %s cancelled by %s", appointment.id, actor.id)
        return await self._persist(appointment)
