# This project was developed with assistance from AI tools.
"""
Domain enums for guarantor onboarding.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class GuarantorType(str, enum.Enum):
    """Kind of guarantor attached to a rental policy.

    AVAL guarantees with real-estate collateral only (fixed method).
    JOINT_OBLIGOR may back the lease with either income or real estate.
    """

    AVAL = "AVAL"
    JOINT_OBLIGOR = "JOINT_OBLIGOR"


class GuaranteeMethod(str, enum.Enum):
    INCOME = "INCOME"
    PROPERTY = "PROPERTY"


class NationalityType(str, enum.Enum):
    MEXICAN = "MEXICAN"
    FOREIGN = "FOREIGN"


class MaritalStatus(str, enum.Enum):
    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    MARRIED_SEPARATE = "married_separate"
    DIVORCED = "divorced"
    WIDOWED = "widowed"


class EmploymentStatus(str, enum.Enum):
    EMPLOYED = "EMPLOYED"
    SELF_EMPLOYED = "SELF_EMPLOYED"
    UNEMPLOYED = "UNEMPLOYED"
    RETIRED = "RETIRED"
    STUDENT = "STUDENT"
    OTHER = "OTHER"


class VerificationStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    REQUIRES_CHANGES = "REQUIRES_CHANGES"

    @classmethod
    def staff_decisions(cls) -> frozenset["VerificationStatus"]:
        """Statuses only a staff member may record."""
        return frozenset({cls.IN_REVIEW, cls.APPROVED, cls.REJECTED, cls.REQUIRES_CHANGES})


class GuarantorStage(str, enum.Enum):
    """Derived lifecycle stage; never persisted directly."""

    DRAFT = "draft"
    INFO_SAVED = "info_saved"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    REQUIRES_CHANGES = "requires_changes"


class ReferenceKind(str, enum.Enum):
    PERSONAL = "personal"
    COMMERCIAL = "commercial"


class ReferenceRelationship(str, enum.Enum):
    FAMILY = "FAMILY"
    FRIEND = "FRIEND"
    COLLEAGUE = "COLLEAGUE"
    EMPLOYER = "EMPLOYER"
    LANDLORD = "LANDLORD"
    OTHER = "OTHER"


class DocumentCategory(str, enum.Enum):
    IDENTIFICATION = "identification"
    PASSPORT = "passport"
    PROOF_OF_ADDRESS = "proof_of_address"
    PROPERTY_DEED = "property_deed"
    PROPERTY_TAX_STATEMENT = "property_tax_statement"
    INCOME_PROOF = "income_proof"
    BANK_STATEMENT = "bank_statement"
    COMPANY_CONSTITUTION = "company_constitution"
    LEGAL_POWERS = "legal_powers"
    TAX_STATUS_CERTIFICATE = "tax_status_certificate"
    MARRIAGE_CERTIFICATE = "marriage_certificate"
    SPOUSE_IDENTIFICATION = "spouse_identification"
    SPOUSE_CONSENT_LETTER = "spouse_consent_letter"
    OTHER = "other"

    @classmethod
    def spouse_consent_documents(cls) -> tuple["DocumentCategory", ...]:
        """Documents a spouse must provide when consent is required."""
        return (cls.MARRIAGE_CERTIFICATE, cls.SPOUSE_IDENTIFICATION, cls.SPOUSE_CONSENT_LETTER)
