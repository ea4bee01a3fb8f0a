"""Gate router: search, lookup, entry registration, logs and stats."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.dependencies import require_admin, require_staff
from libs.auth.models import Principal
from libs.common.container import get_search
from libs.common.datetime_utils import club_today, parse_date, utc_now
from libs.common.logging import get_logger
from libs.common.search import AlgoliaSearchClient
from libs.common.text_utils import normalize_text
from libs.db.session import get_async_db
from services.access_service.models import (
    AccessDirection,
    AccessLog,
    DailyEntryStats,
    empty_breakdown,
)
from services.access_service.schemas import (
    AccessLogResponse,
    BackfillResponse,
    DailyStatsResponse,
    EntryCreate,
    LookupRequest,
    LookupResponse,
    PersonView,
    SearchHit,
    SearchRequest,
    SearchResponse,
)
from services.access_service.services.backfill import rebuild_search_index
from services.access_service.services.entries import register_entry
from services.access_service.services.lookup import (
    ResolvedPerson,
    access_verdict,
    member_group,
    resolve_hit,
    resolve_person,
)
from services.members_service.models import PersonType
from services.members_service.schemas import MedicalStatusResponse
from services.members_service.services.search_sync import record_person_type
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/access", tags=["access"])

MEMBER_GROUP_TYPES = (PersonType.TITULAR, PersonType.FAMILIAR, PersonType.ADHERENTE)


def _to_hit(hit: dict) -> SearchHit:
    return SearchHit(
        object_id=str(hit.get("objectID")),
        tipo=hit.get("tipo"),
        person_type=record_person_type(hit),
        nombre=hit.get("nombre"),
        apellido=hit.get("apellido"),
        nombre_completo=hit.get("nombreCompleto"),
        dni=hit.get("dni"),
        numero_socio=hit.get("numeroSocio"),
        socio_titular_id=hit.get("socioTitularId") or hit.get("socioId"),
        socio_titular_nombre=hit.get("socioTitularNombre"),
        fecha_visita=parse_date(hit.get("fechaVisita")),
        foto_url=hit.get("fotoUrl"),
    )


def _person_view(person: ResolvedPerson, today: date) -> PersonView:
    verdict = access_verdict(person, today)
    birth = parse_date(person.record.get("fecha_nacimiento"))
    member = person.member
    return PersonView(
        person_type=person.person_type,
        person_id=person.person_id,
        member_id=member.id,
        numero_socio=member.numero_socio,
        titular_nombre=member.full_name,
        estado_socio=member.estado_socio.value,
        nombre=person.nombre,
        apellido=person.apellido,
        dni=person.dni,
        fecha_nacimiento=birth,
        foto_url=person.record.get("foto_url") or person.record.get("foto_perfil"),
        visit_date=person.visit_date,
        booking_id=person.booking.id if person.booking else None,
        already_entered=person.already_entered,
        is_birthday=birth is not None and (birth.month, birth.day) == (today.month, today.day),
        medical=MedicalStatusResponse(**verdict.medical.as_dict()) if verdict.medical else None,
        allowed=verdict.allowed,
        reasons=verdict.reasons,
    )


@router.post("/search", response_model=SearchResponse)
async def search_people(
    payload: SearchRequest,
    _: Principal = Depends(require_staff),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Search members, family, adherents and today's guests by name or DNI."""
    term = normalize_text(payload.query).strip()
    if not term:
        return SearchResponse(query=term, hits=[])
    hits = await search.search(term, hits_per_page=payload.limit)
    return SearchResponse(query=term, hits=[_to_hit(hit) for hit in hits])


@router.post("/lookup", response_model=LookupResponse)
async def lookup_person(
    payload: LookupRequest,
    _: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """
    Resolve the best match for a term and decide access.

    The first hit is re-read from the database. A missing hit or a record
    that no longer exists is reported as ``found: false``.
    """
    term = normalize_text(payload.query).strip()
    if not term:
        return LookupResponse(found=False)

    hits = await search.search(term, hits_per_page=1)
    if not hits:
        return LookupResponse(found=False)

    person = await resolve_hit(db, hits[0])
    if person is None:
        logger.info(f"Search hit {hits[0].get('objectID')} no longer matches a record")
        return LookupResponse(found=False)

    today = club_today()
    group = []
    if person.person_type in MEMBER_GROUP_TYPES:
        group = [_person_view(relative, today) for relative in member_group(person.member)]
    return LookupResponse(found=True, person=_person_view(person, today), group=group)


@router.post("/entries", response_model=AccessLogResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    payload: EntryCreate,
    principal: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Record an entry or exit. Entries are refused when access is not allowed."""
    today = club_today()
    visit_date = payload.visit_date
    if payload.person_type == PersonType.INVITADO_DIARIO and visit_date is None:
        visit_date = today

    person = await resolve_person(
        db,
        payload.person_type,
        payload.member_id,
        dni=payload.dni,
        visit_date=visit_date,
        booking_id=payload.booking_id,
    )
    if person is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Person not found",
        )

    if payload.direction == AccessDirection.ENTRADA:
        verdict = access_verdict(person, today)
        if not verdict.allowed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="; ".join(verdict.reasons),
            )

    log = await register_entry(db, person, principal, utc_now(), today, payload.direction)
    await db.commit()
    await db.refresh(log)
    return log


@router.get("/logs", response_model=List[AccessLogResponse])
async def list_access_logs(
    access_date: Optional[date] = None,
    person_type: Optional[PersonType] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    _: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Access log for a day (today by default), newest first."""
    query = (
        select(AccessLog)
        .where(AccessLog.access_date == (access_date or club_today()))
        .order_by(AccessLog.recorded_at.desc())
        .offset(skip)
        .limit(limit)
    )
    if person_type is not None:
        query = query.where(AccessLog.person_type == person_type)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/stats", response_model=DailyStatsResponse)
async def get_daily_stats(
    stats_date: Optional[date] = None,
    _: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    stats_date = stats_date or club_today()
    stats = await db.get(DailyEntryStats, stats_date)
    if stats is None:
        return DailyStatsResponse(stats_date=stats_date, total=0, breakdown=empty_breakdown())
    return DailyStatsResponse(
        stats_date=stats.stats_date,
        total=stats.total,
        breakdown={**empty_breakdown(), **(stats.breakdown or {})},
    )


@router.post("/search/backfill", response_model=BackfillResponse)
async def backfill_search_index(
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Rebuild the search index from the database (admin only)."""
    counts = await rebuild_search_index(db, search, club_today())
    return BackfillResponse(**counts)
