"""Create scheduling tables

Revision ID: a1c4e7f20b31
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20b31'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Listings directory (read-only to the scheduling core)
    op.create_table(
        'properties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('is_available_for_viewing', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])

    op.create_table(
        'property_occupants',
        sa.Column('property_id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.PrimaryKeyConstraint('property_id', 'tenant_id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_property_occupants_tenant_id', 'property_occupants', ['tenant_id'])

    # Viewings
    op.create_table(
        'viewings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('property_id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('manager_id', sa.Uuid(), nullable=False),
        sa.Column('preferred_date', sa.Date(), nullable=False),
        sa.Column('preferred_time', sa.String(5), nullable=False),
        sa.Column('slot_date', sa.Date(), nullable=False),
        sa.Column('slot_time', sa.String(5), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('confirmed_date', sa.Date(), nullable=True),
        sa.Column('confirmed_time', sa.String(5), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('manager_notes', sa.Text(), nullable=True),
        sa.Column('contact_preference', sa.String(20), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.CheckConstraint("status IN ('pending', 'confirmed', 'cancelled')", name='ck_viewings_status'),
    )
    op.create_index('ix_viewings_property_id', 'viewings', ['property_id'])
    op.create_index('ix_viewings_tenant_id', 'viewings', ['tenant_id'])
    op.create_index('ix_viewings_manager_id', 'viewings', ['manager_id'])
    op.create_index('ix_viewings_status', 'viewings', ['status'])
    # One active viewing per (property, date, time)
    op.create_index(
        'uq_viewings_active_slot',
        'viewings',
        ['property_id', 'slot_date', 'slot_time'],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'confirmed')"),
        sqlite_where=sa.text("status IN ('pending', 'confirmed')"),
    )

    op.create_table(
        'follow_ups',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('viewing_id', sa.Uuid(), nullable=False),
        sa.Column('follow_up_date', sa.Date(), nullable=False),
        sa.Column('follow_up_time', sa.String(5), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='scheduled'),
        sa.Column('scheduled_by', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['viewing_id'], ['viewings.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_follow_ups_viewing_id', 'follow_ups', ['viewing_id'])

    # Scheduled maintenance
    op.create_table(
        'scheduled_maintenance',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('property_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('frequency', sa.String(20), nullable=False),
        sa.Column('interval', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('next_due', sa.Date(), nullable=False),
        sa.Column('last_performed', sa.Date(), nullable=True),
        sa.Column('estimated_cost', sa.Float(), nullable=True),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('category', sa.String(20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('assigned_to', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.CheckConstraint('"interval" > 0', name='ck_scheduled_maintenance_interval'),
        sa.CheckConstraint(
            "frequency IN ('monthly', 'quarterly', 'yearly', 'custom')",
            name='ck_scheduled_maintenance_frequency',
        ),
    )
    op.create_index('ix_scheduled_maintenance_property_id', 'scheduled_maintenance', ['property_id'])
    op.create_index('ix_scheduled_maintenance_next_due', 'scheduled_maintenance', ['next_due'])
    op.create_index('ix_scheduled_maintenance_category', 'scheduled_maintenance', ['category'])

    op.create_table(
        'scheduled_maintenance_tasks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('scheduled_maintenance_id', sa.Uuid(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('completed_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='completed'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('cost', sa.Float(), nullable=True),
        sa.Column('performed_by', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['scheduled_maintenance_id'], ['scheduled_maintenance.id'], ondelete='CASCADE'
        ),
    )
    op.create_index(
        'ix_scheduled_maintenance_tasks_scheduled_maintenance_id',
        'scheduled_maintenance_tasks',
        ['scheduled_maintenance_id'],
    )


def downgrade() -> None:
    op.drop_table('scheduled_maintenance_tasks')
    op.drop_table('scheduled_maintenance')
    op.drop_table('follow_ups')
    op.drop_index('uq_viewings_active_slot', table_name='viewings')
    op.drop_table('viewings')
    op.drop_table('property_occupants')
    op.drop_table('properties')
