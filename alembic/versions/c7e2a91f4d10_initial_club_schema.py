"""initial_club_schema

Revision ID: c7e2a91f4d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'c7e2a91f4d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PERSON_TYPES = ('titular', 'familiar', 'adherente', 'invitado_diario', 'invitado_cumpleanos')


def upgrade() -> None:
    """Upgrade schema - Create member, guest and access tables."""

    # Members
    op.create_table(
        'members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('auth_id', sa.String(), nullable=False),
        sa.Column('numero_socio', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('nombre', sa.String(), nullable=False),
        sa.Column('apellido', sa.String(), nullable=False),
        sa.Column('dni', sa.String(), nullable=False),
        sa.Column('fecha_nacimiento', sa.Date(), nullable=False),
        sa.Column('telefono', sa.String(), nullable=True),
        sa.Column('direccion', sa.String(), nullable=True),
        sa.Column('empresa', sa.String(), nullable=True),
        sa.Column('foto_perfil', sa.String(), nullable=True),
        sa.Column('foto_url', sa.String(), nullable=True),
        sa.Column('foto_dni_frente', sa.String(), nullable=True),
        sa.Column('foto_dni_dorso', sa.String(), nullable=True),
        sa.Column('foto_carnet', sa.String(), nullable=True),
        sa.Column(
            'estado_socio',
            sa.Enum('activo', 'inactivo', 'pendiente_validacion', name='member_status_enum'),
            nullable=False,
        ),
        sa.Column('miembro_desde', sa.Date(), nullable=True),
        sa.Column('apto_medico', postgresql.JSONB(), nullable=True),
        sa.Column('ultima_revision_medica', sa.Date(), nullable=True),
        sa.Column('family_members', postgresql.JSONB(), nullable=False),
        sa.Column('adherentes', postgresql.JSONB(), nullable=False),
        sa.Column('pending_family_changes', postgresql.JSONB(), nullable=True),
        sa.Column(
            'family_change_status',
            sa.Enum('pendiente', 'aprobado', 'rechazado', name='family_change_status_enum'),
            nullable=True,
        ),
        sa.Column('family_change_rejection_reason', sa.Text(), nullable=True),
        sa.Column('family_change_submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_members_auth_id'), 'members', ['auth_id'], unique=True)
    op.create_index(op.f('ix_members_numero_socio'), 'members', ['numero_socio'], unique=True)
    op.create_index(op.f('ix_members_email'), 'members', ['email'], unique=False)
    op.create_index(op.f('ix_members_dni'), 'members', ['dni'], unique=False)

    op.create_table(
        'admin_users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('auth_id', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('nombre', sa.String(), nullable=True),
        sa.Column('apellido', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_admin_users_auth_id'), 'admin_users', ['auth_id'], unique=True)

    op.create_table(
        'counters',
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('name')
    )

    op.create_table(
        'photo_change_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('member_name', sa.String(), nullable=False),
        sa.Column('numero_socio', sa.String(), nullable=False),
        sa.Column(
            'person_type',
            sa.Enum(*PERSON_TYPES, name='photo_person_type_enum'),
            nullable=False,
        ),
        sa.Column('person_id', sa.String(), nullable=True),
        sa.Column('person_name', sa.String(), nullable=False),
        sa.Column(
            'slot',
            sa.Enum(
                'foto_perfil', 'foto_dni_frente', 'foto_dni_dorso', 'foto_carnet',
                name='photo_slot_enum',
            ),
            nullable=False,
        ),
        sa.Column('current_url', sa.String(), nullable=True),
        sa.Column('new_url', sa.String(), nullable=False),
        sa.Column('temp_path', sa.String(), nullable=False),
        sa.Column('staged_path', sa.String(), nullable=True),
        sa.Column('staged_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_url', sa.String(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pendiente', 'aprobada', 'rechazada', name='photo_request_status_enum'),
            nullable=False,
        ),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('decided_by', sa.String(), nullable=True),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_photo_change_requests_member_id'), 'photo_change_requests', ['member_id'], unique=False)
    op.create_index(op.f('ix_photo_change_requests_status'), 'photo_change_requests', ['status'], unique=False)

    op.create_table(
        'medical_reviews',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column(
            'person_type',
            sa.Enum(*PERSON_TYPES, name='medical_person_type_enum'),
            nullable=False,
        ),
        sa.Column('person_dni', sa.String(), nullable=False),
        sa.Column('person_name', sa.String(), nullable=False),
        sa.Column('result', sa.Enum('apto', 'no_apto', name='medical_result_enum'), nullable=False),
        sa.Column('review_date', sa.Date(), nullable=False),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.String(), nullable=False),
        sa.Column('reviewed_by_name', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_medical_reviews_member_id'), 'medical_reviews', ['member_id'], unique=False)

    # Guests
    op.create_table(
        'daily_guest_lists',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('member_name', sa.String(), nullable=False),
        sa.Column('numero_socio', sa.String(), nullable=False),
        sa.Column('visit_date', sa.Date(), nullable=False),
        sa.Column('guests', postgresql.JSONB(), nullable=False),
        sa.Column('titular_ingresado', sa.Boolean(), nullable=True),
        sa.Column('titular_ingresado_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('member_id', 'visit_date', name='uq_daily_guest_list_member_date')
    )
    op.create_index(op.f('ix_daily_guest_lists_member_id'), 'daily_guest_lists', ['member_id'], unique=False)
    op.create_index(op.f('ix_daily_guest_lists_visit_date'), 'daily_guest_lists', ['visit_date'], unique=False)

    op.create_table(
        'birthday_bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('member_name', sa.String(), nullable=False),
        sa.Column('numero_socio', sa.String(), nullable=False),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('guests', postgresql.JSONB(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('aprobada', 'cancelada', name='birthday_booking_status_enum'),
            nullable=False,
        ),
        sa.Column('titular_ingresado', sa.Boolean(), nullable=True),
        sa.Column('titular_ingresado_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_birthday_bookings_member_id'), 'birthday_bookings', ['member_id'], unique=False)
    op.create_index(op.f('ix_birthday_bookings_event_date'), 'birthday_bookings', ['event_date'], unique=False)
    op.create_index(op.f('ix_birthday_bookings_year'), 'birthday_bookings', ['year'], unique=False)

    op.create_table(
        'guest_pricing',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('precio_invitado_diario', sa.Numeric(12, 2), nullable=True),
        sa.Column('precio_invitado_cumpleanos', sa.Numeric(12, 2), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    # Access
    op.create_table(
        'access_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('person_id', sa.String(), nullable=False),
        sa.Column(
            'person_type',
            sa.Enum(*PERSON_TYPES, name='access_person_type_enum'),
            nullable=False,
        ),
        sa.Column('member_id', sa.Uuid(), nullable=True),
        sa.Column('nombre', sa.String(), nullable=False),
        sa.Column('dni', sa.String(), nullable=False),
        sa.Column(
            'direction',
            sa.Enum('entrada', 'salida', name='access_direction_enum'),
            nullable=False,
        ),
        sa.Column('access_date', sa.Date(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('recorded_by', sa.String(), nullable=False),
        sa.Column('recorded_by_name', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_access_logs_person_id'), 'access_logs', ['person_id'], unique=False)
    op.create_index(op.f('ix_access_logs_member_id'), 'access_logs', ['member_id'], unique=False)
    op.create_index(op.f('ix_access_logs_dni'), 'access_logs', ['dni'], unique=False)
    op.create_index(op.f('ix_access_logs_access_date'), 'access_logs', ['access_date'], unique=False)

    op.create_table(
        'daily_entry_stats',
        sa.Column('stats_date', sa.Date(), nullable=False),
        sa.Column('total', sa.Integer(), nullable=False),
        sa.Column('breakdown', postgresql.JSONB(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('stats_date')
    )


def downgrade() -> None:
    """Downgrade schema - Drop every table and enum."""
    op.drop_table('daily_entry_stats')
    op.drop_index(op.f('ix_access_logs_access_date'), table_name='access_logs')
    op.drop_index(op.f('ix_access_logs_dni'), table_name='access_logs')
    op.drop_index(op.f('ix_access_logs_member_id'), table_name='access_logs')
    op.drop_index(op.f('ix_access_logs_person_id'), table_name='access_logs')
    op.drop_table('access_logs')
    op.drop_table('guest_pricing')
    op.drop_index(op.f('ix_birthday_bookings_year'), table_name='birthday_bookings')
    op.drop_index(op.f('ix_birthday_bookings_event_date'), table_name='birthday_bookings')
    op.drop_index(op.f('ix_birthday_bookings_member_id'), table_name='birthday_bookings')
    op.drop_table('birthday_bookings')
    op.drop_index(op.f('ix_daily_guest_lists_visit_date'), table_name='daily_guest_lists')
    op.drop_index(op.f('ix_daily_guest_lists_member_id'), table_name='daily_guest_lists')
    op.drop_table('daily_guest_lists')
    op.drop_index(op.f('ix_medical_reviews_member_id'), table_name='medical_reviews')
    op.drop_table('medical_reviews')
    op.drop_index(op.f('ix_photo_change_requests_status'), table_name='photo_change_requests')
    op.drop_index(op.f('ix_photo_change_requests_member_id'), table_name='photo_change_requests')
    op.drop_table('photo_change_requests')
    op.drop_table('counters')
    op.drop_index(op.f('ix_admin_users_auth_id'), table_name='admin_users')
    op.drop_table('admin_users')
    op.drop_index(op.f('ix_members_dni'), table_name='members')
    op.drop_index(op.f('ix_members_email'), table_name='members')
    op.drop_index(op.f('ix_members_numero_socio'), table_name='members')
    op.drop_index(op.f('ix_members_auth_id'), table_name='members')
    op.drop_table('members')

    for enum_name in (
        'access_direction_enum',
        'access_person_type_enum',
        'birthday_booking_status_enum',
        'medical_result_enum',
        'medical_person_type_enum',
        'photo_request_status_enum',
        'photo_slot_enum',
        'photo_person_type_enum',
        'family_change_status_enum',
        'member_status_enum',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
