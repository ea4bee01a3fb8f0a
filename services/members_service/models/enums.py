"""Enum definitions for members service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class MemberStatus(str, enum.Enum):
    ACTIVO = "activo"
    INACTIVO = "inactivo"
    PENDIENTE_VALIDACION = "pendiente_validacion"


class Relationship(str, enum.Enum):
    CONYUGE = "conyuge"
    HIJO = "hijo"
    PADRE = "padre"


class FamilyGroupType(str, enum.Enum):
    """A family group is either spouse and children, or parents."""

    CONYUGE_E_HIJOS = "conyuge_e_hijos"
    PADRES = "padres"


class ApprovalState(str, enum.Enum):
    """Approval state of a family batch or of one family member."""

    PENDIENTE = "pendiente"
    APROBADO = "aprobado"
    RECHAZADO = "rechazado"


class AdherentRequestStatus(str, enum.Enum):
    PENDIENTE = "pendiente"
    APROBADO = "aprobado"
    RECHAZADO = "rechazado"
    PENDIENTE_ELIMINACION = "pendiente_eliminacion"


class AdherentStatus(str, enum.Enum):
    ACTIVO = "activo"
    INACTIVO = "inactivo"


class PersonType(str, enum.Enum):
    TITULAR = "titular"
    FAMILIAR = "familiar"
    ADHERENTE = "adherente"
    INVITADO_DIARIO = "invitado_diario"
    INVITADO_CUMPLEANOS = "invitado_cumpleanos"


class PhotoSlot(str, enum.Enum):
    FOTO_PERFIL = "foto_perfil"
    FOTO_DNI_FRENTE = "foto_dni_frente"
    FOTO_DNI_DORSO = "foto_dni_dorso"
    FOTO_CARNET = "foto_carnet"


class PhotoRequestStatus(str, enum.Enum):
    PENDIENTE = "pendiente"
    APROBADA = "aprobada"
    RECHAZADA = "rechazada"


class MedicalResult(str, enum.Enum):
    APTO = "apto"
    NO_APTO = "no_apto"


class MedicalStatus(str, enum.Enum):
    """Derived at read time, never stored."""

    VALIDO = "valido"
    VENCIDO = "vencido"
    INVALIDO = "invalido"
    PENDIENTE = "pendiente"
    NO_APLICA = "no_aplica"
