"""create_airwallex_entities

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:12:41.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_TABLES = ('contractors', 'suppliers', 'contacts')


def _entity_columns() -> list:
    """Columnas compartidas por las tablas sincronizables con Airwallex."""
    return [
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('preferred_currency', sa.String(length=3), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('postal_code', sa.String(length=50), nullable=True),
        sa.Column('country', sa.String(length=255), nullable=True),
        sa.Column('address_state', sa.String(length=255), nullable=True),
        sa.Column('address_country_code', sa.String(length=2), nullable=True),
        sa.Column('bank_account_name', sa.String(length=255), nullable=True),
        sa.Column('bank_account_number', sa.String(length=100), nullable=True),
        sa.Column('bank_account_currency', sa.String(length=3), nullable=True),
        sa.Column('bank_name', sa.String(length=255), nullable=True),
        sa.Column('bank_country_code', sa.String(length=2), nullable=True),
        sa.Column('swift_code', sa.String(length=20), nullable=True),
        sa.Column('iban', sa.String(length=50), nullable=True),
        sa.Column('local_clearing_system', sa.String(length=50), nullable=True),
        sa.Column('personal_email', sa.String(length=255), nullable=True),
        sa.Column('personal_nationality', sa.String(length=100), nullable=True),
        sa.Column('personal_occupation', sa.String(length=255), nullable=True),
        sa.Column('personal_id_number', sa.String(length=100), nullable=True),
        sa.Column('personal_first_name_chinese', sa.String(length=255), nullable=True),
        sa.Column('personal_last_name_chinese', sa.String(length=255), nullable=True),
        sa.Column('legal_rep_first_name', sa.String(length=255), nullable=True),
        sa.Column('legal_rep_last_name', sa.String(length=255), nullable=True),
        sa.Column('legal_rep_email', sa.String(length=255), nullable=True),
        sa.Column('legal_rep_mobile_number', sa.String(length=100), nullable=True),
        sa.Column('legal_rep_nationality', sa.String(length=100), nullable=True),
        sa.Column('legal_rep_occupation', sa.String(length=255), nullable=True),
        sa.Column('legal_rep_id_type', sa.String(length=100), nullable=True),
        sa.Column('legal_rep_address', sa.Text(), nullable=True),
        sa.Column('legal_rep_city', sa.String(length=255), nullable=True),
        sa.Column('legal_rep_state', sa.String(length=255), nullable=True),
        sa.Column('legal_rep_postal_code', sa.String(length=50), nullable=True),
        sa.Column('legal_rep_country_code', sa.String(length=2), nullable=True),
        sa.Column('business_registration_number', sa.String(length=100), nullable=True),
        sa.Column('business_registration_type', sa.String(length=100), nullable=True),
        sa.Column('airwallex_beneficiary_id', sa.String(length=255), nullable=True),
        sa.Column('airwallex_entity_type', sa.String(length=20), nullable=True),
        sa.Column('airwallex_payment_methods', sa.Text(), nullable=True),
        sa.Column('airwallex_payer_entity_type', sa.String(length=20), nullable=True),
        sa.Column('airwallex_sync_status', sa.String(length=20), nullable=True),
        sa.Column('airwallex_last_sync_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('airwallex_sync_error', sa.Text(), nullable=True),
        sa.Column('airwallex_raw_data', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table in _TABLES:
        if inspector.has_table(table):
            continue
        extra = []
        if table == 'contacts':
            extra = [
                sa.Column('contact_type', sa.String(length=50), nullable=True),
                sa.Column('airwallex_payer_account_id', sa.String(length=255), nullable=True),
            ]
        op.create_table(table, *_entity_columns(), *extra, sa.PrimaryKeyConstraint('id'))
        op.create_index(op.f(f'ix_{table}_email'), table, ['email'], unique=False)
        op.create_index(op.f(f'ix_{table}_airwallex_sync_status'), table, ['airwallex_sync_status'], unique=False)
        op.create_index(op.f(f'ix_{table}_airwallex_beneficiary_id'), table, ['airwallex_beneficiary_id'], unique=True)
        if table == 'contacts':
            op.create_index(op.f('ix_contacts_contact_type'), table, ['contact_type'], unique=False)
            op.create_index(
                op.f('ix_contacts_airwallex_payer_account_id'), table, ['airwallex_payer_account_id'], unique=True
            )


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table in reversed(_TABLES):
        if inspector.has_table(table):
            op.drop_table(table)
