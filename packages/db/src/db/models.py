# This project was developed with assistance from AI tools.
"""
Guarantor onboarding -- persistence models

Guarantors (both legal-person shapes in one row, discriminated by
is_company), their references, uploaded documents, addresses and the
per-policy activity trail.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    DocumentCategory,
    EmploymentStatus,
    GuaranteeMethod,
    GuarantorType,
    MaritalStatus,
    NationalityType,
    ReferenceKind,
    ReferenceRelationship,
    VerificationStatus,
)


class Address(Base):
    """Structured address owned by the address service."""

    __tablename__ = "addresses"

    id = Column(String(36), primary_key=True)
    street = Column(String(255), nullable=False)
    exterior_number = Column(String(20), nullable=False)
    interior_number = Column(String(20), nullable=True)
    neighborhood = Column(String(120), nullable=True)
    postal_code = Column(String(10), nullable=False)
    municipality = Column(String(120), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(120), nullable=False)
    country = Column(String(2), nullable=False, default="MX")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Address(id={self.id}, postal_code='{self.postal_code}')>"


class Guarantor(Base):
    """Aval or joint obligor attached to one rental policy."""

    __tablename__ = "guarantors"

    id = Column(String(36), primary_key=True)
    policy_id = Column(String(36), nullable=False, index=True)
    guarantor_type = Column(
        Enum(GuarantorType, name="guarantor_type", native_enum=False),
        nullable=False,
    )
    is_company = Column(Boolean, nullable=False, default=False)

    # Contact
    email = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=False)
    work_phone = Column(String(30), nullable=True)
    personal_email = Column(String(255), nullable=True)
    work_email = Column(String(255), nullable=True)
    relationship_to_tenant = Column(String(100), nullable=True)
    address_id = Column(String(36), ForeignKey("addresses.id"), nullable=True)

    # Person
    full_name = Column(String(255), nullable=True)
    nationality = Column(
        Enum(NationalityType, name="nationality_type", native_enum=False),
        nullable=True,
    )
    curp = Column(String(18), nullable=True)
    rfc = Column(String(13), nullable=True)
    passport = Column(String(30), nullable=True)
    employment_status = Column(
        Enum(EmploymentStatus, name="employment_status", native_enum=False),
        nullable=True,
    )
    occupation = Column(String(120), nullable=True)
    employer_name = Column(String(255), nullable=True)
    position = Column(String(120), nullable=True)
    employer_address_id = Column(String(36), ForeignKey("addresses.id"), nullable=True)
    marital_status = Column(
        Enum(MaritalStatus, name="marital_status", native_enum=False),
        nullable=True,
    )
    spouse_name = Column(String(255), nullable=True)
    spouse_rfc = Column(String(13), nullable=True)
    spouse_curp = Column(String(18), nullable=True)

    # Company
    company_name = Column(String(255), nullable=True)
    company_rfc = Column(String(12), nullable=True)
    legal_rep_name = Column(String(255), nullable=True)
    legal_rep_position = Column(String(120), nullable=True)
    legal_rep_rfc = Column(String(13), nullable=True)
    legal_rep_phone = Column(String(30), nullable=True)
    legal_rep_email = Column(String(255), nullable=True)

    # Guarantee
    guarantee_method = Column(
        Enum(GuaranteeMethod, name="guarantee_method", native_enum=False),
        nullable=True,
    )
    has_property_guarantee = Column(Boolean, nullable=False, default=False)
    property_value = Column(Numeric(14, 2), nullable=True)
    property_deed_number = Column(String(60), nullable=True)
    property_registry = Column(String(60), nullable=True)
    property_tax_account = Column(String(60), nullable=True)
    property_under_legal_proceeding = Column(Boolean, nullable=False, default=False)
    guarantee_property_address_id = Column(String(36), ForeignKey("addresses.id"), nullable=True)
    monthly_income = Column(Numeric(12, 2), nullable=True)
    income_source = Column(String(120), nullable=True)
    bank_name = Column(String(120), nullable=True)
    account_holder = Column(String(255), nullable=True)
    has_properties = Column(Boolean, nullable=False, default=False)

    # Self-service access
    access_token = Column(String(64), nullable=True, unique=True, index=True)
    token_expiry = Column(DateTime(timezone=True), nullable=True)

    # Verification lifecycle
    verification_status = Column(
        Enum(VerificationStatus, name="verification_status", native_enum=False),
        nullable=False,
        default=VerificationStatus.PENDING,
    )
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verified_by = Column(String(255), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    requires_changes = Column(JSON, nullable=True)
    information_complete = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    references = relationship(
        "GuarantorReference", back_populates="guarantor", cascade="all, delete-orphan",
        order_by="GuarantorReference.id",
    )
    documents = relationship(
        "GuarantorDocument", back_populates="guarantor", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return (
            f"<Guarantor(id={self.id}, type='{self.guarantor_type}', "
            f"company={self.is_company})>"
        )


class GuarantorReference(Base):
    """Personal (individuals) or commercial (companies) reference."""

    __tablename__ = "guarantor_references"

    id = Column(Integer, primary_key=True, autoincrement=True)
    guarantor_id = Column(
        String(36), ForeignKey("guarantors.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    kind = Column(
        Enum(ReferenceKind, name="reference_kind", native_enum=False),
        nullable=False,
    )
    name = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(255), nullable=True)
    relationship_type = Column(
        Enum(ReferenceRelationship, name="reference_relationship", native_enum=False),
        nullable=True,
    )
    occupation = Column(String(120), nullable=True)
    contact_name = Column(String(255), nullable=True)
    years_of_relationship = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    guarantor = relationship("Guarantor", back_populates="references")

    def __repr__(self):
        return f"<GuarantorReference(id={self.id}, kind='{self.kind}')>"


class GuarantorDocument(Base):
    """Uploaded document metadata; the file itself lives in blob storage."""

    __tablename__ = "guarantor_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    guarantor_id = Column(
        String(36), ForeignKey("guarantors.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    category = Column(
        Enum(DocumentCategory, name="document_category", native_enum=False),
        nullable=False,
    )
    file_name = Column(String(255), nullable=False)
    object_key = Column(String(500), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    guarantor = relationship("Guarantor", back_populates="documents")

    def __repr__(self):
        return f"<GuarantorDocument(id={self.id}, category='{self.category}')>"


class ActivityLog(Base):
    """Append-only policy activity trail."""

    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(String(36), nullable=False, index=True)
    action = Column(String(120), nullable=False)
    actor_id = Column(String(255), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<ActivityLog(id={self.id}, action='{self.action}')>"
