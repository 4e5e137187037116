"""events, registrations and admin users

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'events',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_type', sa.String(length=100), nullable=True),
        sa.Column('date', sa.String(length=20), nullable=False),
        sa.Column('time', sa.String(length=20), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=False),
        sa.Column('price', sa.String(length=50), nullable=True, server_default='Free'),
        sa.Column('capacity', sa.Integer(), nullable=True, server_default='100'),
        sa.Column('registered', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('long_description', sa.Text(), nullable=True),
        sa.Column('organizer', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_events_title', 'events', ['title'])
    op.create_index('ix_events_event_type', 'events', ['event_type'])
    op.create_index('ix_events_created_at', 'events', ['created_at'])
    op.create_index('idx_event_type_created', 'events', ['event_type', 'created_at'])

    ticket_type = sa.Enum('free', 'paid', name='ticket_type')
    registration_status = sa.Enum('pending', 'confirmed', 'cancelled', name='registration_status')

    # event_type is a copied label, deliberately without a foreign key
    op.create_table(
        'registrations',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('event_type', sa.String(length=100), nullable=False),
        sa.Column('ticket_type', ticket_type, nullable=False),
        sa.Column('status', registration_status, nullable=False, server_default='confirmed'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_registrations_full_name', 'registrations', ['full_name'])
    op.create_index('ix_registrations_email', 'registrations', ['email'])
    op.create_index('ix_registrations_event_type', 'registrations', ['event_type'])
    op.create_index('ix_registrations_status', 'registrations', ['status'])
    op.create_index('ix_registrations_created_at', 'registrations', ['created_at'])
    op.create_index('idx_registration_status_created', 'registrations', ['status', 'created_at'])
    op.create_index('idx_registration_ticket_type', 'registrations', ['ticket_type'])

    op.create_table(
        'admin_users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_admin_users_email', 'admin_users', ['email'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_admin_users_email', table_name='admin_users')
    op.drop_table('admin_users')
    op.drop_table('registrations')
    op.drop_table('events')
    sa.Enum(name='registration_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='ticket_type').drop(op.get_bind(), checkfirst=True)
