"""Create oidc_providers and saml_providers tables.

Revision ID: 0001
Revises:
Create Date: 2025-11-24 00:00:00.000000
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _provider_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("scheme", sa.String(200), nullable=False),
        sa.Column("display_name", sa.String(200), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("provider_type", sa.String(50), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "oidc_providers",
        *_provider_columns(),
        sa.Column("authority", sa.String(500), nullable=False),
        sa.Column("client_id", sa.String(200), nullable=False),
        # Fernet ciphertext
        sa.Column("client_secret", sa.Text(), nullable=True),
        sa.Column("response_type", sa.String(100), nullable=False, server_default="code"),
        sa.Column("scopes", sa.String(500), nullable=False, server_default="openid profile"),
        sa.Column("callback_path", sa.String(200), nullable=False, server_default="/signin-oidc"),
        sa.Column(
            "get_claims_from_userinfo_endpoint",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column("save_tokens", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("metadata_address", sa.String(500), nullable=True),
        sa.Column(
            "require_https_metadata",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
    )
    op.create_index("ix_oidc_providers_scheme", "oidc_providers", ["scheme"], unique=True)
    op.create_index("ix_oidc_providers_enabled", "oidc_providers", ["enabled"])

    op.create_table(
        "saml_providers",
        *_provider_columns(),
        sa.Column("sp_entity_id", sa.String(500), nullable=False),
        sa.Column("idp_entity_id", sa.String(500), nullable=False),
        sa.Column("idp_single_sign_on_url", sa.String(500), nullable=False),
        sa.Column("idp_metadata_url", sa.String(500), nullable=True),
        sa.Column("acs_path", sa.String(200), nullable=False, server_default="/saml/acs"),
        sa.Column("idp_certificate", sa.Text(), nullable=True),
        # Fernet ciphertext
        sa.Column("sp_certificate", sa.Text(), nullable=True),
        sa.Column("sp_certificate_password", sa.Text(), nullable=True),
        sa.Column(
            "sign_authentication_requests",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column(
            "want_assertions_signed",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "name_id_format",
            sa.String(200),
            nullable=False,
            server_default="urn:oasis:names:tc:SAML:1.1:nameid-format:unspecified",
        ),
        sa.Column("binding_type", sa.String(50), nullable=False, server_default="POST"),
    )
    op.create_index("ix_saml_providers_scheme", "saml_providers", ["scheme"], unique=True)
    op.create_index("ix_saml_providers_enabled", "saml_providers", ["enabled"])


def downgrade() -> None:
    op.drop_index("ix_saml_providers_enabled", table_name="saml_providers")
    op.drop_index("ix_saml_providers_scheme", table_name="saml_providers")
    op.drop_table("saml_providers")
    op.drop_index("ix_oidc_providers_enabled", table_name="oidc_providers")
    op.drop_index("ix_oidc_providers_scheme", table_name="oidc_providers")
    op.drop_table("oidc_providers")
