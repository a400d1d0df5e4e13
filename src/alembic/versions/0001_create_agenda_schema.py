"""create business, service, agenda and reservation tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

reservation_state = postgresql.ENUM(
    'pending',
    'confirmed',
    'cancelled',
    'completed',
    name='reservation_state',
    create_type=False,
)


def base_columns() -> list[sa.Column]:
    """Общие колонки всех таблиц: id, флаг активности и отметки времени."""
    return [
        sa.Column(
            'id',
            sa.UUID(as_uuid=True),
            server_default=sa.text('gen_random_uuid()'),
            nullable=False,
        ),
        sa.Column(
            'is_active',
            sa.Boolean(),
            server_default=sa.text('true'),
            nullable=False,
        ),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
    reservation_state.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'business',
        *base_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=320), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_business'),
    )
    op.create_table(
        'user',
        *base_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_user'),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'service',
        *base_columns(),
        sa.Column('business_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(8, 2), nullable=False),
        sa.CheckConstraint(
            'duration >= 1',
            name='ck_service_duration_positive',
        ),
        sa.CheckConstraint(
            'price >= 0',
            name='ck_service_price_not_negative',
        ),
        sa.ForeignKeyConstraint(
            ['business_id'],
            ['business.id'],
            name='fk_service_business_id_business',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_service'),
        sa.UniqueConstraint(
            'business_id',
            'name',
            name='service_name_per_business',
        ),
    )
    op.create_index('ix_service_business_id', 'service', ['business_id'])

    op.create_table(
        'agenda',
        *base_columns(),
        sa.Column('service_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('date_start', sa.Date(), nullable=False),
        sa.Column('date_end', sa.Date(), nullable=False),
        sa.Column('work_start', sa.Time(), nullable=False),
        sa.Column('work_end', sa.Time(), nullable=False),
        sa.Column(
            'interval_minutes',
            sa.Integer(),
            server_default=sa.text('30'),
            nullable=False,
        ),
        sa.Column(
            'active_weekdays',
            postgresql.ARRAY(sa.SmallInteger()),
            nullable=False,
        ),
        sa.Column('break_start', sa.Time(), nullable=True),
        sa.Column('break_end', sa.Time(), nullable=True),
        sa.Column(
            'auto_generate_slots',
            sa.Boolean(),
            server_default=sa.text('true'),
            nullable=False,
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.CheckConstraint(
            'date_start <= date_end',
            name='ck_agenda_date_range',
        ),
        sa.CheckConstraint(
            'work_start < work_end',
            name='ck_agenda_work_window',
        ),
        sa.CheckConstraint(
            'interval_minutes >= 1',
            name='ck_agenda_interval_positive',
        ),
        sa.CheckConstraint(
            '(break_start IS NULL) = (break_end IS NULL)',
            name='ck_agenda_break_pair',
        ),
        sa.CheckConstraint(
            'break_start IS NULL OR (work_start <= break_start '
            'AND break_start < break_end AND break_end <= work_end)',
            name='ck_agenda_break_inside_work',
        ),
        sa.ForeignKeyConstraint(
            ['service_id'],
            ['service.id'],
            name='fk_agenda_service_id_service',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_agenda'),
    )
    op.create_index('ix_agenda_service_id', 'agenda', ['service_id'])
    op.create_index(
        'ix_agenda_service_dates',
        'agenda',
        ['service_id', 'date_start', 'date_end'],
    )

    op.create_table(
        'reservation',
        *base_columns(),
        sa.Column('user_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('service_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('agenda_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('date_reserved', sa.Date(), nullable=False),
        sa.Column('time_start', sa.Time(), nullable=False),
        sa.Column('time_end', sa.Time(), nullable=False),
        sa.Column(
            'state',
            reservation_state,
            server_default='pending',
            nullable=False,
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint(
            'time_start < time_end',
            name='ck_reservation_time_window',
        ),
        sa.CheckConstraint(
            'total_price >= 0',
            name='ck_reservation_price_not_negative',
        ),
        sa.ForeignKeyConstraint(
            ['user_id'],
            ['user.id'],
            name='fk_reservation_user_id_user',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['service_id'],
            ['service.id'],
            name='fk_reservation_service_id_service',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['agenda_id'],
            ['agenda.id'],
            name='fk_reservation_agenda_id_agenda',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_reservation'),
    )
    op.create_index('ix_reservation_user_id', 'reservation', ['user_id'])
    op.create_index(
        'ix_reservation_agenda_day',
        'reservation',
        ['agenda_id', 'date_reserved'],
    )
    op.create_index(
        'ix_reservation_day_start',
        'reservation',
        ['date_reserved', 'time_start'],
    )
    op.create_index(
        'ix_reservation_service_day',
        'reservation',
        ['service_id', 'date_reserved'],
    )

    # Неотменённые резервы одной агенды не пересекаются по [start, end).
    op.execute(
        'ALTER TABLE reservation ADD CONSTRAINT reservation_no_overlap '
        'EXCLUDE USING gist ('
        'agenda_id WITH =, '
        'date_reserved WITH =, '
        "tsrange(date_reserved + time_start, date_reserved + time_end, '[)') "
        'WITH &&'
        ") WHERE (state <> 'cancelled')",
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.execute(
        'ALTER TABLE reservation DROP CONSTRAINT IF EXISTS '
        'reservation_no_overlap',
    )
    op.drop_index('ix_reservation_service_day', table_name='reservation')
    op.drop_index('ix_reservation_day_start', table_name='reservation')
    op.drop_index('ix_reservation_agenda_day', table_name='reservation')
    op.drop_index('ix_reservation_user_id', table_name='reservation')
    op.drop_table('reservation')
    op.drop_index('ix_agenda_service_dates', table_name='agenda')
    op.drop_index('ix_agenda_service_id', table_name='agenda')
    op.drop_table('agenda')
    op.drop_index('ix_service_business_id', table_name='service')
    op.drop_table('service')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_table('user')
    op.drop_table('business')
    reservation_state.drop(op.get_bind(), checkfirst=True)
