# This project was developed with assistance from AI tools.
"""add guarantor tables

Revision ID: 3c1e9a7d2b40
Revises:
Create Date: 2026-03-02 10:12:41.518204

"""

import sqlalchemy as sa
from alembic import op

revision = "3c1e9a7d2b40"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "addresses",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("street", sa.String(255), nullable=False),
        sa.Column("exterior_number", sa.String(20), nullable=False),
        sa.Column("interior_number", sa.String(20), nullable=True),
        sa.Column("neighborhood", sa.String(120), nullable=True),
        sa.Column("postal_code", sa.String(10), nullable=False),
        sa.Column("municipality", sa.String(120), nullable=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("state", sa.String(120), nullable=False),
        sa.Column("country", sa.String(2), nullable=False, server_default="MX"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "guarantors",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("policy_id", sa.String(36), nullable=False),
        sa.Column("guarantor_type", sa.String(20), nullable=False),
        sa.Column("is_company", sa.Boolean(), nullable=False, server_default=sa.false()),
        # Contact
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("work_phone", sa.String(30), nullable=True),
        sa.Column("personal_email", sa.String(255), nullable=True),
        sa.Column("work_email", sa.String(255), nullable=True),
        sa.Column("relationship_to_tenant", sa.String(100), nullable=True),
        sa.Column("address_id", sa.String(36), nullable=True),
        # Person
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("nationality", sa.String(20), nullable=True),
        sa.Column("curp", sa.String(18), nullable=True),
        sa.Column("rfc", sa.String(13), nullable=True),
        sa.Column("passport", sa.String(30), nullable=True),
        sa.Column("employment_status", sa.String(20), nullable=True),
        sa.Column("occupation", sa.String(120), nullable=True),
        sa.Column("employer_name", sa.String(255), nullable=True),
        sa.Column("position", sa.String(120), nullable=True),
        sa.Column("employer_address_id", sa.String(36), nullable=True),
        sa.Column("marital_status", sa.String(20), nullable=True),
        sa.Column("spouse_name", sa.String(255), nullable=True),
        sa.Column("spouse_rfc", sa.String(13), nullable=True),
        sa.Column("spouse_curp", sa.String(18), nullable=True),
        # Company
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("company_rfc", sa.String(12), nullable=True),
        sa.Column("legal_rep_name", sa.String(255), nullable=True),
        sa.Column("legal_rep_position", sa.String(120), nullable=True),
        sa.Column("legal_rep_rfc", sa.String(13), nullable=True),
        sa.Column("legal_rep_phone", sa.String(30), nullable=True),
        sa.Column("legal_rep_email", sa.String(255), nullable=True),
        # Guarantee
        sa.Column("guarantee_method", sa.String(20), nullable=True),
        sa.Column("has_property_guarantee", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("property_value", sa.Numeric(14, 2), nullable=True),
        sa.Column("property_deed_number", sa.String(60), nullable=True),
        sa.Column("property_registry", sa.String(60), nullable=True),
        sa.Column("property_tax_account", sa.String(60), nullable=True),
        sa.Column(
            "property_under_legal_proceeding", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("guarantee_property_address_id", sa.String(36), nullable=True),
        sa.Column("monthly_income", sa.Numeric(12, 2), nullable=True),
        sa.Column("income_source", sa.String(120), nullable=True),
        sa.Column("bank_name", sa.String(120), nullable=True),
        sa.Column("account_holder", sa.String(255), nullable=True),
        sa.Column("has_properties", sa.Boolean(), nullable=False, server_default=sa.false()),
        # Self-service access
        sa.Column("access_token", sa.String(64), nullable=True),
        sa.Column("token_expiry", sa.DateTime(timezone=True), nullable=True),
        # Verification lifecycle
        sa.Column("verification_status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(255), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("requires_changes", sa.JSON(), nullable=True),
        sa.Column("information_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["address_id"], ["addresses.id"]),
        sa.ForeignKeyConstraint(["employer_address_id"], ["addresses.id"]),
        sa.ForeignKeyConstraint(["guarantee_property_address_id"], ["addresses.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_guarantors_policy_id", "guarantors", ["policy_id"])
    op.create_index("ix_guarantors_access_token", "guarantors", ["access_token"], unique=True)

    op.create_table(
        "guarantor_references",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("guarantor_id", sa.String(36), nullable=False),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("relationship_type", sa.String(20), nullable=True),
        sa.Column("occupation", sa.String(120), nullable=True),
        sa.Column("contact_name", sa.String(255), nullable=True),
        sa.Column("years_of_relationship", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["guarantor_id"], ["guarantors.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_guarantor_references_guarantor_id", "guarantor_references", ["guarantor_id"]
    )

    op.create_table(
        "guarantor_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("guarantor_id", sa.String(36), nullable=False),
        sa.Column("category", sa.String(40), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("object_key", sa.String(500), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["guarantor_id"], ["guarantors.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_guarantor_documents_guarantor_id", "guarantor_documents", ["guarantor_id"]
    )

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(120), nullable=False),
        sa.Column("actor_id", sa.String(255), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_activity_log_policy_id", "activity_log", ["policy_id"])


def downgrade() -> None:
    op.drop_table("activity_log")
    op.drop_table("guarantor_documents")
    op.drop_table("guarantor_references")
    op.drop_table("guarantors")
    op.drop_table("addresses")
