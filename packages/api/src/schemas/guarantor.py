# This project was developed with assistance from AI tools.
"""Guarantor snapshot and request schemas.

A guarantor is a closed two-variant union discriminated by ``is_company``:
``PersonGuarantor`` or ``CompanyGuarantor``. Both carry the shared contact,
guarantee, token and verification fields; only the person variant has
identity/employment/marriage data and personal references, only the company
variant has legal-representative data and commercial references.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, TypeGuard

from db.enums import (
    EmploymentStatus,
    GuaranteeMethod,
    GuarantorType,
    MaritalStatus,
    NationalityType,
    ReferenceRelationship,
    VerificationStatus,
)
from pydantic import BaseModel, ConfigDict, Field

ARCHIVED_REASON = "ARCHIVED"


class AddressDetails(BaseModel):
    """Structured address handed to the address service."""

    street: str
    exterior_number: str
    interior_number: str | None = None
    neighborhood: str | None = None
    postal_code: str
    municipality: str | None = None
    city: str | None = None
    state: str
    country: str = "MX"


class PersonalReference(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    name: str
    phone: str
    email: str | None = None
    relationship_type: ReferenceRelationship | None = None
    occupation: str | None = None


class CommercialReference(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    name: str = Field(description="Company name of the reference.")
    contact_name: str | None = None
    phone: str
    email: str | None = None
    years_of_relationship: int | None = Field(default=None, ge=0)


class GuarantorBase(BaseModel):
    """Fields shared by both legal-person variants."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    policy_id: str
    guarantor_type: GuarantorType

    email: str | None = None
    phone: str | None = None
    work_phone: str | None = None
    personal_email: str | None = None
    work_email: str | None = None
    relationship_to_tenant: str | None = None
    address_id: str | None = None

    # Guarantee
    guarantee_method: GuaranteeMethod | None = None
    has_property_guarantee: bool = False
    property_value: Decimal | None = None
    property_deed_number: str | None = None
    property_registry: str | None = None
    property_tax_account: str | None = None
    property_under_legal_proceeding: bool = False
    guarantee_property_address_id: str | None = None
    monthly_income: Decimal | None = None
    income_source: str | None = None
    bank_name: str | None = None
    account_holder: str | None = None
    has_properties: bool = False

    document_ids: list[int] = []

    access_token: str | None = None
    token_expiry: datetime | None = None

    verification_status: VerificationStatus = VerificationStatus.PENDING
    verified_at: datetime | None = None
    verified_by: str | None = None
    rejection_reason: str | None = None
    rejected_at: datetime | None = None
    requires_changes: list[str] | None = None
    information_complete: bool = False
    completed_at: datetime | None = None
    submitted_at: datetime | None = None
    archived_at: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None


class PersonGuarantor(GuarantorBase):
    """Individual acting as guarantor."""

    is_company: Literal[False] = False

    full_name: str | None = None
    nationality: NationalityType | None = None
    curp: str | None = None
    rfc: str | None = None
    passport: str | None = None

    employment_status: EmploymentStatus | None = None
    occupation: str | None = None
    employer_name: str | None = None
    position: str | None = None
    employer_address_id: str | None = None

    marital_status: MaritalStatus | None = None
    spouse_name: str | None = None
    spouse_rfc: str | None = None
    spouse_curp: str | None = None

    references: list[PersonalReference] = []


class CompanyGuarantor(GuarantorBase):
    """Company acting as guarantor through its legal representative."""

    is_company: Literal[True] = True

    company_name: str | None = None
    company_rfc: str | None = None
    legal_rep_name: str | None = None
    legal_rep_position: str | None = None
    legal_rep_rfc: str | None = None
    legal_rep_phone: str | None = None
    legal_rep_email: str | None = None

    commercial_references: list[CommercialReference] = []


Guarantor = PersonGuarantor | CompanyGuarantor

# ``is_company`` is redeclared on each variant as its discriminator; it is shared.
_SHARED_FIELDS = frozenset(GuarantorBase.model_fields) | {"is_company"}
PERSON_ONLY_FIELDS = frozenset(PersonGuarantor.model_fields) - _SHARED_FIELDS
COMPANY_ONLY_FIELDS = frozenset(CompanyGuarantor.model_fields) - _SHARED_FIELDS


def is_person(g: Guarantor) -> TypeGuard[PersonGuarantor]:
    return not g.is_company


def is_company(g: Guarantor) -> TypeGuard[CompanyGuarantor]:
    return g.is_company is True


def parse_guarantor(data: dict[str, Any]) -> Guarantor:
    """Build the right variant from a flat mapping, keyed on ``is_company``."""
    if data.get("is_company"):
        return CompanyGuarantor.model_validate(
            {k: v for k, v in data.items() if k not in PERSON_ONLY_FIELDS}
        )
    return PersonGuarantor.model_validate(
        {k: v for k, v in data.items() if k not in COMPANY_ONLY_FIELDS}
    )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class GuarantorUpdate(BaseModel):
    """Partial update. Only fields explicitly sent are applied."""

    email: str | None = None
    phone: str | None = None
    work_phone: str | None = None
    personal_email: str | None = None
    work_email: str | None = None
    relationship_to_tenant: str | None = None

    # Guarantee data (must match the method in effect)
    property_value: Decimal | None = Field(default=None, ge=0)
    property_deed_number: str | None = None
    property_registry: str | None = None
    property_tax_account: str | None = None
    property_under_legal_proceeding: bool | None = None
    monthly_income: Decimal | None = Field(default=None, ge=0)
    income_source: str | None = None
    bank_name: str | None = None
    account_holder: str | None = None
    has_properties: bool | None = None

    # Person
    full_name: str | None = None
    nationality: NationalityType | None = None
    curp: str | None = None
    rfc: str | None = None
    passport: str | None = None
    employment_status: EmploymentStatus | None = None
    occupation: str | None = None
    employer_name: str | None = None
    position: str | None = None

    # Company
    company_name: str | None = None
    company_rfc: str | None = None
    legal_rep_name: str | None = None
    legal_rep_position: str | None = None
    legal_rep_rfc: str | None = None
    legal_rep_phone: str | None = None
    legal_rep_email: str | None = None

    # Addresses (upserted through the address service, stored by id)
    address_details: AddressDetails | None = None
    employer_address_details: AddressDetails | None = None
    guarantee_property_details: AddressDetails | None = None


class GuarantorCreate(GuarantorUpdate):
    """Create a guarantor with the minimal required identifiers."""

    policy_id: str
    guarantor_type: GuarantorType
    is_company: bool = False
    email: str
    phone: str
    guarantee_method: GuaranteeMethod | None = None


class SetGuaranteeMethodRequest(BaseModel):
    guarantee_method: GuaranteeMethod
    clear_previous_data: bool = False


class SwitchGuaranteeMethodRequest(BaseModel):
    new_method: GuaranteeMethod
    confirm_data_loss: bool = False


class PropertyGuaranteeRequest(BaseModel):
    property_value: Decimal | None = Field(default=None, ge=0)
    property_deed_number: str | None = None
    property_registry: str | None = None
    property_tax_account: str | None = None
    property_under_legal_proceeding: bool = False
    guarantee_property_details: AddressDetails | None = None
    confirm_data_loss: bool = False


class IncomeGuaranteeRequest(BaseModel):
    monthly_income: Decimal | None = Field(default=None, ge=0)
    income_source: str | None = None
    bank_name: str | None = None
    account_holder: str | None = None
    has_properties: bool = False
    confirm_data_loss: bool = False


class MarriageInfoRequest(BaseModel):
    marital_status: MaritalStatus
    spouse_name: str | None = None
    spouse_rfc: str | None = None
    spouse_curp: str | None = None


class EmploymentInfoRequest(BaseModel):
    employment_status: EmploymentStatus | None = None
    occupation: str | None = None
    employer_name: str | None = None
    position: str | None = None
    employer_address_details: AddressDetails | None = None


class PersonalReferencesRequest(BaseModel):
    references: list[PersonalReference]


class CommercialReferencesRequest(BaseModel):
    references: list[CommercialReference]


class VerificationRequest(BaseModel):
    status: VerificationStatus
    performed_by: str
    reason: str | None = None
    required_changes: list[str] | None = None


class ArchiveRequest(BaseModel):
    reason: str | None = None


class TokenRequest(BaseModel):
    expiry_days: int = Field(default=7, ge=1)
