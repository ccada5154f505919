"""create contracts and contract_signatures tables

Revision ID: 1f0c2a9b7d41
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1f0c2a9b7d41'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'contracts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_document', sa.String(length=32), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('vehicle_description', sa.String(length=512), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='draft'),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            'updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_table(
        'contract_signatures',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            'contract_id',
            sa.Integer(),
            sa.ForeignKey('contracts.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=11), nullable=False, server_default='pending'),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('validation_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('signed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('signed_ip', sa.String(length=64), nullable=True),
    )
    op.create_index(
        'ix_contract_signatures_token_hash', 'contract_signatures', ['token_hash'], unique=True
    )
    op.create_index(
        'ix_contract_signatures_contract_id', 'contract_signatures', ['contract_id'], unique=False
    )


def downgrade() -> None:
    op.drop_index('ix_contract_signatures_contract_id', table_name='contract_signatures')
    op.drop_index('ix_contract_signatures_token_hash', table_name='contract_signatures')
    op.drop_table('contract_signatures')
    op.drop_table('contracts')
