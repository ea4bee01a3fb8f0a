"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    member = MemberFactory.create(estado_socio=MemberStatus.INACTIVO)
    db_session.add(member)
    await db_session.commit()
"""

import random
import uuid
from datetime import date, datetime, timedelta, timezone

from libs.common.datetime_utils import club_today

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


def unique_dni() -> str:
    return str(random.randint(20_000_000, 49_999_999))


def valid_apto(days: int = 365) -> dict:
    today = club_today()
    return {
        "valido": True,
        "fecha_emision": today.isoformat(),
        "fecha_vencimiento": (today + timedelta(days=days)).isoformat(),
        "razon_invalidez": None,
        "observaciones": None,
    }


def adult_birth_date(years: int = 35) -> date:
    today = club_today()
    return date(today.year - years, 3, 15)


# ---------------------------------------------------------------------------
# Members Service
# ---------------------------------------------------------------------------


class MemberFactory:
    @staticmethod
    def create(**overrides):
        from services.members_service.models import Member, MemberStatus

        defaults = {
            "id": _uuid(),
            "auth_id": f"auth-{uuid.uuid4().hex[:8]}",
            "numero_socio": str(random.randint(10_000, 99_999_999)),
            "email": _unique_email(),
            "nombre": "Lucía",
            "apellido": "Fernández",
            "dni": unique_dni(),
            "fecha_nacimiento": adult_birth_date(),
            "telefono": "1155551234",
            "direccion": "Av. Siempre Viva 742",
            "estado_socio": MemberStatus.ACTIVO,
            "miembro_desde": club_today(),
            "apto_medico": valid_apto(),
            "family_members": [],
            "adherentes": [],
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Member(**defaults)


class FamilyMemberFactory:
    """Embedded family member dict as stored on ``Member.family_members``."""

    @staticmethod
    def create(**overrides) -> dict:
        defaults = {
            "id": uuid.uuid4().hex,
            "nombre": "Mateo",
            "apellido": "Fernández",
            "dni": unique_dni(),
            "fecha_nacimiento": adult_birth_date(10).isoformat(),
            "relacion": "hijo",
            "estado_validacion": "aprobado",
            "apto_medico": valid_apto(),
        }
        defaults.update(overrides)
        return defaults


class AdherentFactory:
    """Embedded adherent dict as stored on ``Member.adherentes``."""

    @staticmethod
    def create(**overrides) -> dict:
        defaults = {
            "id": uuid.uuid4().hex,
            "nombre": "Sofía",
            "apellido": "Gómez",
            "dni": unique_dni(),
            "fecha_nacimiento": adult_birth_date(28).isoformat(),
            "estado_solicitud": "aprobado",
            "estado_adherente": "activo",
            "motivo_rechazo": None,
            "apto_medico": valid_apto(),
        }
        defaults.update(overrides)
        return defaults


class StaffFactory:
    @staticmethod
    def create(**overrides):
        from services.members_service.models import AdminUser

        defaults = {
            "id": _uuid(),
            "auth_id": f"auth-{uuid.uuid4().hex[:8]}",
            "role": "admin",
            "email": _unique_email(),
            "nombre": "Staff",
            "apellido": "Zenith",
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return AdminUser(**defaults)


class PhotoChangeRequestFactory:
    @staticmethod
    def create(member, **overrides):
        from services.members_service.models import (
            PersonType,
            PhotoChangeRequest,
            PhotoRequestStatus,
            PhotoSlot,
        )

        request_id = overrides.pop("id", _uuid())
        temp_path = f"solicitudes-temp/{member.id}/{request_id.hex}_foto.jpg"
        defaults = {
            "id": request_id,
            "member_id": member.id,
            "member_name": member.full_name,
            "numero_socio": member.numero_socio,
            "person_type": PersonType.TITULAR,
            "person_id": None,
            "person_name": member.full_name,
            "slot": PhotoSlot.FOTO_PERFIL,
            "current_url": member.foto_perfil,
            "new_url": f"http://test/media/images/{temp_path}",
            "temp_path": temp_path,
            "status": PhotoRequestStatus.PENDIENTE,
            "requested_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return PhotoChangeRequest(**defaults)


# ---------------------------------------------------------------------------
# Guests Service
# ---------------------------------------------------------------------------


def guest_entry(**overrides) -> dict:
    defaults = {
        "id": uuid.uuid4().hex,
        "nombre": "Invitado",
        "apellido": "Prueba",
        "dni": unique_dni(),
        "fecha_nacimiento": adult_birth_date(30).isoformat(),
        "ingresado": False,
        "ingresado_at": None,
        "registrado_por": None,
        "registrado_por_nombre": None,
        "apto_medico": valid_apto(),
    }
    defaults.update(overrides)
    return defaults


class DailyGuestListFactory:
    @staticmethod
    def create(member, **overrides):
        from services.guests_service.models import DailyGuestList

        defaults = {
            "id": _uuid(),
            "member_id": member.id,
            "member_name": member.full_name,
            "numero_socio": member.numero_socio,
            "visit_date": club_today(),
            "guests": [guest_entry()],
            "titular_ingresado": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return DailyGuestList(**defaults)


class BirthdayBookingFactory:
    @staticmethod
    def create(member, **overrides):
        from services.guests_service.models import BirthdayBooking, BookingStatus

        event_date = overrides.pop("event_date", club_today() + timedelta(days=30))
        defaults = {
            "id": _uuid(),
            "member_id": member.id,
            "member_name": member.full_name,
            "numero_socio": member.numero_socio,
            "event_date": event_date,
            "year": event_date.year,
            "guests": [guest_entry(apto_medico=None)],
            "status": BookingStatus.APROBADA,
            "titular_ingresado": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return BirthdayBooking(**defaults)
