# This project was developed with assistance from AI tools.
"""Qualification, submission and token response schemas."""

import enum
from datetime import datetime
from decimal import Decimal

from db.enums import DocumentCategory, GuaranteeMethod, GuarantorStage, MaritalStatus
from pydantic import BaseModel, Field

from .guarantor import CommercialReference, CompanyGuarantor, PersonalReference, PersonGuarantor


class IssueCode(str, enum.Enum):
    REQUIRED = "REQUIRED"
    INVALID_FORMAT = "INVALID_FORMAT"
    BUSINESS_RULE = "BUSINESS_RULE"
    INSUFFICIENT = "INSUFFICIENT"


class ValidationIssue(BaseModel):
    """One submission-blocking problem, keyed by the offending field."""

    field: str
    message: str
    code: IssueCode


class ReferenceSummary(BaseModel):
    total: int
    minimum: int
    meets_requirement: bool
    missing_count: int


class ReferencesResponse(BaseModel):
    guarantor_id: str
    is_company: bool
    summary: ReferenceSummary
    personal_references: list[PersonalReference] = []
    commercial_references: list[CommercialReference] = []


class GuaranteeSetupStatus(BaseModel):
    """Which guarantee basis is in place and whether it holds up."""

    guarantor_id: str
    guarantee_method: GuaranteeMethod | None = None
    has_property_guarantee: bool
    has_income_verification: bool
    property_complete: bool
    income_complete: bool
    meets_requirements: bool


class SpouseConsentRequirement(BaseModel):
    guarantor_id: str
    marital_status: MaritalStatus | None = None
    requires_spouse_consent: bool
    reason: str | None = None
    consent_documents_required: list[DocumentCategory] = []


class EmploymentSummary(BaseModel):
    guarantor_id: str
    is_employed: bool
    monthly_income: Decimal | None = None
    annual_income: Decimal | None = None
    employer_name: str | None = None
    position: str | None = None


class IncomeRequirementCheck(BaseModel):
    """Income-to-rent comparison for an income-backed guarantee."""

    meets_requirement: bool
    monthly_rent: Decimal
    current_income: Decimal | None = None
    required_income: Decimal
    current_ratio: Decimal | None = None
    required_ratio: int
    deficit: Decimal = Decimal("0")
    message: str


class PropertyValueCheck(BaseModel):
    meets_requirement: bool
    monthly_rent: Decimal
    property_value: Decimal | None = None
    required_value: Decimal
    message: str


class SubmissionCheck(BaseModel):
    """Result of the submission gate.

    ``guarantee_method_valid`` is only populated for actors that choose their
    own guarantee method, so callers can tell a broken guarantee apart from
    other missing data.
    """

    guarantor_id: str
    can_submit: bool
    missing_requirements: list[str] = []
    issues: list[ValidationIssue] = []
    guarantee_method_valid: bool | None = None
    document_count: int = 0


class QualificationSummary(BaseModel):
    guarantor_id: str
    stage: GuarantorStage
    is_archived: bool
    is_complete: bool
    completion_percentage: int = Field(ge=0, le=100)
    method_in_effect: GuaranteeMethod | None = None
    requires_spouse_consent: bool
    issues: list[ValidationIssue] = []


class TokenGrant(BaseModel):
    token: str
    expiry: datetime
    link: str


class TokenValidation(BaseModel):
    guarantor: PersonGuarantor | CompanyGuarantor
    remaining_hours: int


class GuarantorCreated(BaseModel):
    """A new guarantor together with its self-service invitation."""

    guarantor: PersonGuarantor | CompanyGuarantor
    invitation: TokenGrant
