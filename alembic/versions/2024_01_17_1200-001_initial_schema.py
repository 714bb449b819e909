"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2024-01-17 12:00:00.000000

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
    # Create admins table
    op.create_table(
        'admins',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_admins_username'), 'admins', ['username'], unique=True)
    op.create_index(op.f('ix_admins_email'), 'admins', ['email'], unique=True)

    # Create registrations table
    op.create_table(
        'registrations',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('uid', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('cluster', sa.String(length=255), nullable=False),
        sa.Column('institute', sa.String(length=255), nullable=False),
        sa.Column('phone_number', sa.String(length=20), nullable=False),
        sa.Column('leadership_roles', sa.Text(), nullable=False),
        sa.Column('your_position', sa.String(length=255), nullable=False),
        sa.Column('other_position_name', sa.String(length=255), nullable=True),
        sa.Column('name_of_entity', sa.String(length=255), nullable=False),
        sa.Column('linkedin_account', sa.String(length=500), nullable=False),
        sa.Column('resume', sa.String(length=500), nullable=False),
        sa.Column('sop', sa.String(length=500), nullable=False),
        sa.Column('recommendation_letter', sa.String(length=500), nullable=False),
        sa.Column('terms', sa.JSON(), nullable=False),
        sa.Column('status', sa.Enum('pending', 'approved', 'rejected', name='registrationstatus'), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_registrations_uid'), 'registrations', ['uid'], unique=True)
    op.create_index(op.f('ix_registrations_email'), 'registrations', ['email'], unique=True)
    op.create_index(op.f('ix_registrations_full_name'), 'registrations', ['full_name'], unique=False)
    op.create_index(op.f('ix_registrations_status'), 'registrations', ['status'], unique=False)
    op.create_index(op.f('ix_registrations_submitted_at'), 'registrations', ['submitted_at'], unique=False)

    # Create evaluations table; no ON DELETE CASCADE
    op.create_table(
        'evaluations',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('registration_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('leadership', sa.Integer(), nullable=False),
        sa.Column('prior_experience', sa.Integer(), nullable=False),
        sa.Column('discipline', sa.Integer(), nullable=False),
        sa.Column('academics', sa.Integer(), nullable=False),
        sa.Column('attitude', sa.Integer(), nullable=False),
        sa.Column('time_management', sa.Integer(), nullable=False),
        sa.Column('result', sa.String(length=20), nullable=False),
        sa.Column('evaluated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['registration_id'], ['registrations.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_evaluations_registration_id'), 'evaluations', ['registration_id'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_evaluations_registration_id'), table_name='evaluations')
    op.drop_table('evaluations')

    op.drop_index(op.f('ix_registrations_submitted_at'), table_name='registrations')
    op.drop_index(op.f('ix_registrations_status'), table_name='registrations')
    op.drop_index(op.f('ix_registrations_full_name'), table_name='registrations')
    op.drop_index(op.f('ix_registrations_email'), table_name='registrations')
    op.drop_index(op.f('ix_registrations_uid'), table_name='registrations')
    op.drop_table('registrations')

    op.drop_index(op.f('ix_admins_email'), table_name='admins')
    op.drop_index(op.f('ix_admins_username'), table_name='admins')
    op.drop_table('admins')

    # Drop enum types
    sa.Enum(name='registrationstatus').drop(op.get_bind(), checkfirst=True)
