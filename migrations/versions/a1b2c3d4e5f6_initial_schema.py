"""Initial schema: users, properties, occupants, notifications

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_type = sa.Enum('STUDENT', 'LANDLORD', 'ADMIN', name='usertype')
property_status = sa.Enum('AVAILABLE', 'RENTED', 'MAINTENANCE', name='propertystatus')
occupant_status = sa.Enum('ACTIVE', 'INACTIVE', name='occupantstatus')
notification_type = sa.Enum('TENANT_LEFT', name='notificationtype')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('user_type', user_type, nullable=False),
        sa.Column('gender', sa.String(20), nullable=True),
        sa.Column('religion', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_user_type', 'users', ['user_type'])

    op.create_table(
        'properties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('bedrooms', sa.Integer(), nullable=False),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('room_sharing', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('tenants_per_room', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('current_occupants', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', property_status, nullable=False),
        sa.Column('gender', sa.String(20), nullable=False, server_default='ANY'),
        sa.Column('religion', sa.String(50), nullable=False, server_default='ANY'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])
    op.create_index('ix_properties_status', 'properties', ['status'])

    op.create_table(
        'occupants',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id'), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('room_number', sa.Integer(), nullable=False),
        sa.Column('number_of_rooms', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', occupant_status, nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_price', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_occupants_property_id', 'occupants', ['property_id'])
    op.create_index('ix_occupants_user_id', 'occupants', ['user_id'])
    op.create_index('ix_occupants_status', 'occupants', ['status'])
    op.create_index(
        'ix_occupants_property_status_room', 'occupants', ['property_id', 'status', 'room_number']
    )
    op.create_index(
        'uq_occupants_active_property_user',
        'occupants',
        ['property_id', 'user_id'],
        unique=True,
        sqlite_where=sa.text("status = 'ACTIVE'"),
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('type', notification_type, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('recipient_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('metadata', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_type', 'notifications', ['type'])
    op.create_index('ix_notifications_read', 'notifications', ['read'])
    op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('occupants')
    op.drop_table('properties')
    op.drop_table('users')
    for enum in (notification_type, occupant_status, property_status, user_type):
        enum.drop(op.get_bind(), checkfirst=True)
