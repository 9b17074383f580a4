"""initial schema

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    is_sqlite = bind.dialect.name == 'sqlite'

    json_type = sa.JSON() if is_sqlite else postgresql.JSONB(astext_type=sa.Text())
    timestamp_default = sa.text("(datetime('now'))") if is_sqlite else sa.text('now()')
    false_default = '0' if is_sqlite else 'false'

    # Admin accounts
    op.create_table(
        'admin_users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='VIEWER'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_admin_users_email', 'admin_users', ['email'])

    # Opaque refresh tokens
    op.create_table(
        'refresh_tokens',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('token', sa.String(length=128), nullable=False),
        sa.Column('admin_id', sa.String(length=36), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.ForeignKeyConstraint(['admin_id'], ['admin_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token')
    )
    op.create_index('ix_refresh_tokens_token', 'refresh_tokens', ['token'])
    op.create_index('ix_refresh_tokens_admin_id', 'refresh_tokens', ['admin_id'])

    # Append-only audit trail; admin_id is deliberately not a foreign key
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('admin_id', sa.String(length=36), nullable=True),
        sa.Column('admin_email', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('resource_id', sa.String(length=36), nullable=True),
        sa.Column('resource_type', sa.String(length=50), nullable=True),
        sa.Column('details', json_type, nullable=False),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_logs_admin_id', 'audit_logs', ['admin_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_resource_id', 'audit_logs', ['resource_id'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])

    # Driver applications
    op.create_table(
        'driver_applications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('date_of_birth', sa.DateTime(), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('current_address_line1', sa.String(length=255), nullable=False),
        sa.Column('current_city', sa.String(length=100), nullable=False),
        sa.Column('current_state', sa.String(length=2), nullable=False),
        sa.Column('current_zip', sa.String(length=10), nullable=False),
        sa.Column('lived_at_current_more_than_3_years', sa.Boolean(), nullable=False, server_default=false_default),
        sa.Column('ssn_encrypted', sa.Text(), nullable=False, server_default=''),
        sa.Column('ssn_last4', sa.String(length=4), nullable=False, server_default=''),
        sa.Column('applicant_type', sa.String(length=20), nullable=True),
        sa.Column('truck_year', sa.String(length=10), nullable=True),
        sa.Column('truck_make', sa.String(length=100), nullable=True),
        sa.Column('alcohol_drug_return_to_duty', sa.Boolean(), nullable=True),
        sa.Column('medical_card_expires_at', sa.DateTime(), nullable=True),
        sa.Column('license', json_type, nullable=False),
        sa.Column('previous_addresses', json_type, nullable=False),
        sa.Column('employment_records', json_type, nullable=False),
        sa.Column('legal_consents', json_type, nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='NEW'),
        sa.Column('internal_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by_id', sa.String(length=36), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('applicant_ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.ForeignKeyConstraint(['reviewed_by_id'], ['admin_users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_driver_applications_first_name', 'driver_applications', ['first_name'])
    op.create_index('ix_driver_applications_last_name', 'driver_applications', ['last_name'])
    op.create_index('ix_driver_applications_status', 'driver_applications', ['status'])
    op.create_index('ix_driver_applications_created_at', 'driver_applications', ['created_at'])

    # Fleet
    op.create_table(
        'trucks',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('samsara_vehicle_id', sa.String(length=64), nullable=True),
        sa.Column('current_miles', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current_miles_updated_at', sa.DateTime(), nullable=True),
        sa.Column('last_oil_change_miles', sa.Integer(), nullable=True),
        sa.Column('last_oil_change_at', sa.DateTime(), nullable=True),
        sa.Column('oil_change_interval_miles', sa.Integer(), nullable=False, server_default='30000'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index('ix_trucks_name', 'trucks', ['name'])
    op.create_index('ix_trucks_samsara_vehicle_id', 'trucks', ['samsara_vehicle_id'])

    # Public form inboxes
    op.create_table(
        'freight_requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=True),
        sa.Column('contact_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=False),
        sa.Column('is_broker', sa.Boolean(), nullable=False, server_default=false_default),
        sa.Column('equipment', sa.String(length=100), nullable=True),
        sa.Column('cargo', sa.String(length=255), nullable=True),
        sa.Column('weight', sa.String(length=50), nullable=True),
        sa.Column('pallets', sa.String(length=50), nullable=True),
        sa.Column('pickup_address', sa.Text(), nullable=False),
        sa.Column('pickup_date', sa.String(length=50), nullable=True),
        sa.Column('pickup_time', sa.String(length=50), nullable=True),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('delivery_date', sa.String(length=50), nullable=True),
        sa.Column('delivery_time', sa.String(length=50), nullable=True),
        sa.Column('reference_id', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('applicant_ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_freight_requests_created_at', 'freight_requests', ['created_at'])

    op.create_table(
        'contact_requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('applicant_ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_contact_requests_created_at', 'contact_requests', ['created_at'])


def downgrade() -> None:
    op.drop_table('contact_requests')
    op.drop_table('freight_requests')
    op.drop_table('trucks')
    op.drop_table('driver_applications')
    op.drop_table('audit_logs')
    op.drop_table('refresh_tokens')
    op.drop_table('admin_users')
