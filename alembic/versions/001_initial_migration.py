"""Initial migration - all models

Revision ID: 001
Revises: 
Create Date: 2026-03-02 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


invoice_status = sa.Enum('draft', 'deployed', 'paid', 'cancelled', name='invoicestatus')


def upgrade() -> None:
    # Create organizations table
    op.create_table('organizations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False, comment='Display name'),
        sa.Column('primary_wallet', sa.String(length=42), nullable=False, comment='Default creator wallet for new invoices'),
        sa.Column('default_platform_fee', sa.Integer(), nullable=False, comment='Platform fee in basis points'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # Create api_keys table
    op.create_table('api_keys',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('test_key', sa.String(length=128), nullable=True, comment='Key accepted in test mode'),
        sa.Column('live_key', sa.String(length=128), nullable=True, comment='Key accepted in live mode'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('test_key'),
        sa.UniqueConstraint('live_key')
    )
    op.create_index('idx_api_key_organization', 'api_keys', ['organization_id'])

    # Create invoices table
    op.create_table('invoices',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('onchain_invoice_id', sa.BigInteger(), nullable=False, comment='Invoice id in the InvoicePayments contract, -1 if not deployed'),
        sa.Column('creator_wallet', sa.String(length=42), nullable=False, comment='Wallet that receives the payment'),
        sa.Column('client_name', sa.String(length=200), nullable=True),
        sa.Column('client_email', sa.String(length=320), nullable=True),
        sa.Column('token', sa.String(length=42), nullable=False, comment='ERC20 token address'),
        sa.Column('amount', sa.String(length=78), nullable=False, comment='Amount as a decimal string'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', invoice_status, nullable=False),
        sa.Column('tx_hash', sa.String(length=66), nullable=True, comment='Deployment hash, replaced by the payment hash once paid'),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_invoice_onchain_id', 'invoices', ['onchain_invoice_id'])
    op.create_index('idx_invoice_org_created', 'invoices', ['organization_id', 'created_at'])

    # Create webhooks table
    op.create_table('webhooks',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('url', sa.Text(), nullable=False, comment='Delivery URL'),
        sa.Column('subscribed_events', sa.JSON(), nullable=False, comment='Event labels, e.g. invoice.paid'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_webhook_organization', 'webhooks', ['organization_id'])

    # Create withdrawals table
    op.create_table('withdrawals',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('wallet', sa.String(length=42), nullable=False, comment='Lower-cased receiving wallet'),
        sa.Column('token', sa.String(length=42), nullable=False),
        sa.Column('amount_raw', sa.String(length=78), nullable=False, comment='Amount in token base units as a decimal string'),
        sa.Column('tx_hash', sa.String(length=66), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_withdrawal_wallet_created', 'withdrawals', ['wallet', 'created_at'])
    op.create_index('idx_withdrawal_unique', 'withdrawals', ['wallet', 'token', 'amount_raw', 'tx_hash'], unique=True)

    # Create indexer_state table
    op.create_table('indexer_state',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('last_block', sa.BigInteger(), nullable=False, comment='Inclusive, already processed'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade() -> None:
    op.drop_table('indexer_state')
    op.drop_index('idx_withdrawal_unique', table_name='withdrawals')
    op.drop_index('idx_withdrawal_wallet_created', table_name='withdrawals')
    op.drop_table('withdrawals')
    op.drop_index('idx_webhook_organization', table_name='webhooks')
    op.drop_table('webhooks')
    op.drop_index('idx_invoice_org_created', table_name='invoices')
    op.drop_index('idx_invoice_onchain_id', table_name='invoices')
    op.drop_table('invoices')
    op.drop_index('idx_api_key_organization', table_name='api_keys')
    op.drop_table('api_keys')
    op.drop_table('organizations')
    invoice_status.drop(op.get_bind(), checkfirst=True)
