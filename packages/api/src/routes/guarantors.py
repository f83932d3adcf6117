# This project was developed with assistance from AI tools.
"""Guarantor REST endpoints.

Staff endpoints live under ``/api/guarantors``; the token-authorised
self-service endpoints under ``/api/self-service/{token}``. Engine errors are
turned into Problem Details responses by the handlers in ``main``.
"""

from decimal import Decimal

from db import get_db
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.guarantor import (
    ArchiveRequest,
    CommercialReferencesRequest,
    EmploymentInfoRequest,
    Guarantor,
    GuarantorCreate,
    GuarantorUpdate,
    IncomeGuaranteeRequest,
    MarriageInfoRequest,
    PersonalReferencesRequest,
    PropertyGuaranteeRequest,
    SetGuaranteeMethodRequest,
    SwitchGuaranteeMethodRequest,
    TokenRequest,
    VerificationRequest,
)
from ..schemas.qualification import (
    EmploymentSummary,
    GuaranteeSetupStatus,
    GuarantorCreated,
    IncomeRequirementCheck,
    PropertyValueCheck,
    QualificationSummary,
    ReferencesResponse,
    SpouseConsentRequirement,
    SubmissionCheck,
    TokenGrant,
    TokenValidation,
)
from ..services.activity import SqlActivityLog
from ..services.address import SqlAddressService
from ..services.documents import SqlDocumentService
from ..services.guarantor import GuarantorService
from ..services.policy_completion import SqlPolicyCompletionChecker
from ..services.repository import SqlGuarantorRepository

router = APIRouter()
self_service_router = APIRouter()


def get_guarantor_service(session: AsyncSession = Depends(get_db)) -> GuarantorService:
    """Wire the service to SQL collaborators sharing the request session."""
    return GuarantorService(
        repository=SqlGuarantorRepository(session),
        addresses=SqlAddressService(session),
        documents=SqlDocumentService(session),
        activity=SqlActivityLog(session),
        policy_checker=SqlPolicyCompletionChecker(session),
    )


# -- Create / read / update --


@router.post("/", response_model=GuarantorCreated, status_code=status.HTTP_201_CREATED)
async def create_guarantor(
    body: GuarantorCreate,
    service: GuarantorService = Depends(get_guarantor_service),
) -> GuarantorCreated:
    """Create a guarantor and its self-service invitation link."""
    return await service.create(body)


@router.get("/policy/{policy_id}", response_model=list[Guarantor])
async def list_policy_guarantors(
    policy_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> list[Guarantor]:
    return await service.list_by_policy(policy_id)


@router.get("/{guarantor_id}", response_model=Guarantor)
async def get_guarantor(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    return await service.get(guarantor_id)


@router.patch("/{guarantor_id}", response_model=Guarantor)
async def update_guarantor(
    guarantor_id: str,
    body: GuarantorUpdate,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    """Partially update a guarantor; only the fields sent are changed."""
    return await service.update(guarantor_id, body)


@router.delete("/{guarantor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_guarantor(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> None:
    await service.delete(guarantor_id)


# -- Guarantee --


@router.put("/{guarantor_id}/guarantee-method", response_model=Guarantor)
async def set_guarantee_method(
    guarantor_id: str,
    body: SetGuaranteeMethodRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    return await service.set_guarantee_method(
        guarantor_id, body.guarantee_method, body.clear_previous_data
    )


@router.post("/{guarantor_id}/guarantee-method/switch", response_model=Guarantor)
async def switch_guarantee_method(
    guarantor_id: str,
    body: SwitchGuaranteeMethodRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    """Switch guarantee method; requires ``confirm_data_loss``."""
    return await service.switch_guarantee_method(
        guarantor_id, body.new_method, body.confirm_data_loss
    )


@router.put("/{guarantor_id}/property-guarantee", response_model=Guarantor)
async def save_property_guarantee(
    guarantor_id: str,
    body: PropertyGuaranteeRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    return await service.save_property_guarantee(guarantor_id, body)


@router.put("/{guarantor_id}/income-guarantee", response_model=Guarantor)
async def save_income_guarantee(
    guarantor_id: str,
    body: IncomeGuaranteeRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    return await service.save_income_guarantee(guarantor_id, body)


@router.get("/{guarantor_id}/guarantee-setup", response_model=GuaranteeSetupStatus)
async def get_guarantee_setup(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> GuaranteeSetupStatus:
    return await service.get_guarantee_setup(guarantor_id)


@router.get("/{guarantor_id}/income-requirements", response_model=IncomeRequirementCheck)
async def check_income_requirements(
    guarantor_id: str,
    monthly_rent: Decimal = Query(gt=0),
    service: GuarantorService = Depends(get_guarantor_service),
) -> IncomeRequirementCheck:
    return await service.check_income_requirements(guarantor_id, monthly_rent)


@router.get("/{guarantor_id}/property-value", response_model=PropertyValueCheck)
async def check_property_value(
    guarantor_id: str,
    monthly_rent: Decimal = Query(gt=0),
    service: GuarantorService = Depends(get_guarantor_service),
) -> PropertyValueCheck:
    return await service.check_property_value(guarantor_id, monthly_rent)


# -- Person sections --


@router.put("/{guarantor_id}/marriage", response_model=SpouseConsentRequirement)
async def save_marriage_information(
    guarantor_id: str,
    body: MarriageInfoRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> SpouseConsentRequirement:
    return await service.save_marriage_information(guarantor_id, body)


@router.get("/{guarantor_id}/spouse-consent", response_model=SpouseConsentRequirement)
async def get_spouse_consent(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> SpouseConsentRequirement:
    return await service.get_spouse_consent(guarantor_id)


@router.put("/{guarantor_id}/employment", response_model=EmploymentSummary)
async def save_employment_info(
    guarantor_id: str,
    body: EmploymentInfoRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> EmploymentSummary:
    return await service.save_employment_info(guarantor_id, body)


# -- References --


@router.put("/{guarantor_id}/references", response_model=ReferencesResponse)
async def save_personal_references(
    guarantor_id: str,
    body: PersonalReferencesRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> ReferencesResponse:
    """Replace the personal reference list."""
    return await service.save_personal_references(guarantor_id, body.references)


@router.put("/{guarantor_id}/commercial-references", response_model=ReferencesResponse)
async def save_commercial_references(
    guarantor_id: str,
    body: CommercialReferencesRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> ReferencesResponse:
    """Replace the commercial reference list."""
    return await service.save_commercial_references(guarantor_id, body.references)


@router.get("/{guarantor_id}/references", response_model=ReferencesResponse)
async def get_references_summary(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> ReferencesResponse:
    return await service.get_references_summary(guarantor_id)


# -- Qualification / submission --


@router.get("/{guarantor_id}/qualification", response_model=QualificationSummary)
async def get_qualification_summary(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> QualificationSummary:
    return await service.get_qualification_summary(guarantor_id)


@router.get("/{guarantor_id}/can-submit", response_model=SubmissionCheck)
async def can_submit(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> SubmissionCheck:
    return await service.can_submit(guarantor_id)


@router.post("/{guarantor_id}/submit", response_model=Guarantor)
async def submit_guarantor(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    """Submit for verification; 422 lists every unmet requirement."""
    return await service.submit(guarantor_id)


# -- Staff actions --


@router.post("/{guarantor_id}/verification", response_model=Guarantor)
async def record_verification(
    guarantor_id: str,
    body: VerificationRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    return await service.record_verification(guarantor_id, body)


@router.post("/{guarantor_id}/archive", response_model=Guarantor)
async def archive_guarantor(
    guarantor_id: str,
    body: ArchiveRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    return await service.archive(guarantor_id, body.reason)


@router.post("/{guarantor_id}/restore", response_model=Guarantor)
async def restore_guarantor(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    return await service.restore(guarantor_id)


# -- Tokens --


@router.post("/{guarantor_id}/token", response_model=TokenGrant)
async def generate_token(
    guarantor_id: str,
    body: TokenRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> TokenGrant:
    """Issue a new invitation token, replacing any previous one."""
    return await service.generate_token(guarantor_id, body.expiry_days)


@router.post("/{guarantor_id}/token/refresh", response_model=TokenGrant)
async def refresh_token(
    guarantor_id: str,
    body: TokenRequest,
    service: GuarantorService = Depends(get_guarantor_service),
) -> TokenGrant:
    return await service.refresh_token(guarantor_id, body.expiry_days)


@router.delete("/{guarantor_id}/token", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_token(
    guarantor_id: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> None:
    await service.revoke_token(guarantor_id)


# -- Self-service (token authorised) --


@self_service_router.get("/{token}", response_model=TokenValidation)
async def self_service_get(
    token: str,
    service: GuarantorService = Depends(get_guarantor_service),
) -> TokenValidation:
    """Load the guarantor behind an invitation token."""
    return await service.validate_token(token)


@self_service_router.patch("/{token}", response_model=Guarantor)
async def self_service_update(
    token: str,
    body: GuarantorUpdate,
    service: GuarantorService = Depends(get_guarantor_service),
) -> Guarantor:
    return await service.validate_and_save(token, body)
