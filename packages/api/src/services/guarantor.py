# This project was developed with assistance from AI tools.
"""Guarantor lifecycle service.

Orchestrates create -> update -> guarantee method selection -> automatic
completion -> submission for verification, plus staff verification,
archiving and self-service access. All rules are delegated to the pure
policy modules; all persistence goes through the injected collaborators.

Activity logging and the policy-wide completion check are fire-and-forget:
a failure there is logged and never undoes the operation that triggered it.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from db.enums import (
    DocumentCategory,
    EmploymentStatus,
    GuaranteeMethod,
    MaritalStatus,
    NationalityType,
    VerificationStatus,
)

from ..core.config import settings
from ..schemas.guarantor import (
    COMPANY_ONLY_FIELDS,
    PERSON_ONLY_FIELDS,
    AddressDetails,
    CommercialReference,
    EmploymentInfoRequest,
    Guarantor,
    GuarantorCreate,
    GuarantorUpdate,
    IncomeGuaranteeRequest,
    MarriageInfoRequest,
    PersonalReference,
    PropertyGuaranteeRequest,
    VerificationRequest,
    is_company,
    is_person,
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
from . import guarantee_method, qualification, references
from .access_token import AccessTokenManager
from .collaborators import (
    ActivityLog,
    AddressService,
    DocumentService,
    GuarantorRepository,
    PolicyCompletionChecker,
)
from .errors import (
    BusinessRuleError,
    GuarantorNotFoundError,
    InvalidFormatError,
    KindMismatchError,
    RequiredFieldError,
    SubmissionBlockedError,
)
from .field_validation import FIELD_VALIDATORS, validate_phone
from .profiles import GuarantorProfile, profile_for
from .spouse_consent import requires_spouse_consent, spouse_consent_requirement

logger = logging.getLogger(__name__)

# Address sub-objects on requests and the id column each one resolves to.
_ADDRESS_FIELDS: dict[str, str] = {
    "address_details": "address_id",
    "employer_address_details": "employer_address_id",
    "guarantee_property_details": "guarantee_property_address_id",
}

_MARRIED = {MaritalStatus.MARRIED_JOINT, MaritalStatus.MARRIED_SEPARATE}
_EMPLOYED = {EmploymentStatus.EMPLOYED, EmploymentStatus.SELF_EMPLOYED}

_IDENTITY_DOCUMENTS: dict[NationalityType, tuple[DocumentCategory, str]] = {
    NationalityType.MEXICAN: (
        DocumentCategory.IDENTIFICATION,
        "Official identification document is required",
    ),
    NationalityType.FOREIGN: (DocumentCategory.PASSPORT, "Passport document is required"),
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _validate_formats(patch: dict[str, Any]) -> None:
    """Normalize formatted fields in place; raise on the first malformed one."""
    for field, validator in FIELD_VALIDATORS.items():
        value = patch.get(field)
        if value is None:
            continue
        ok, msg, normalized = validator(str(value))
        if not ok:
            raise InvalidFormatError(msg, field=field)
        patch[field] = normalized


def _check_variant(company: bool, fields: set[str]) -> None:
    foreign = fields & (PERSON_ONLY_FIELDS if company else COMPANY_ONLY_FIELDS)
    if foreign:
        kind = "company" if company else "individual"
        raise KindMismatchError(
            f"Fields not applicable to {kind} guarantors: {', '.join(sorted(foreign))}"
        )


def _check_guarantee_fields(
    profile: GuarantorProfile,
    method: GuaranteeMethod | None,
    fields: set[str],
) -> None:
    """Only the method in effect may receive guarantee data on a flexible actor."""
    if not profile.allows_method_switch:
        return
    sent_property = fields & (set(guarantee_method.PROPERTY_FIELDS) | {"guarantee_property_details"})
    sent_income = fields & set(guarantee_method.INCOME_FIELDS)
    if not (sent_property or sent_income):
        return
    if method is None:
        raise BusinessRuleError(
            "Select a guarantee method before providing guarantee data",
            field="guarantee_method",
        )
    if method == GuaranteeMethod.PROPERTY and sent_income:
        raise BusinessRuleError(
            "Income guarantee data cannot be saved while the property guarantee is in effect",
            field="guarantee_method",
        )
    if method == GuaranteeMethod.INCOME and sent_property:
        raise BusinessRuleError(
            "Property guarantee data cannot be saved while the income guarantee is in effect",
            field="guarantee_method",
        )


class GuarantorService:
    """Guarantor lifecycle for both the aval and the joint obligor."""

    def __init__(
        self,
        repository: GuarantorRepository,
        addresses: AddressService,
        documents: DocumentService,
        activity: ActivityLog,
        policy_checker: PolicyCompletionChecker,
        tokens: AccessTokenManager | None = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        self._repository = repository
        self._addresses = addresses
        self._documents = documents
        self._activity = activity
        self._policy_checker = policy_checker
        self._now = now
        self._tokens = tokens or AccessTokenManager(repository, now=now)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _require(self, guarantor_id: str) -> Guarantor:
        g = await self._repository.find_by_id(guarantor_id)
        if g is None:
            raise GuarantorNotFoundError(guarantor_id)
        return g

    async def _log(
        self,
        g: Guarantor,
        action: str,
        actor_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        prefix = profile_for(g.guarantor_type).activity_prefix
        try:
            await self._activity.log_activity(
                g.policy_id,
                f"{prefix}_{action}",
                actor_id,
                {"guarantor_id": g.id, **(details or {})},
            )
        except Exception:
            logger.warning(
                "Failed to log activity %s_%s for guarantor %s", prefix, action, g.id,
                exc_info=True,
            )

    async def _upsert_address(self, current_id: str | None, details: AddressDetails) -> str:
        if current_id:
            await self._addresses.update_address(current_id, details)
            return current_id
        return await self._addresses.create_address(details)

    async def _resolve_addresses(
        self, g: Guarantor | None, patch: dict[str, Any], details: dict[str, AddressDetails]
    ) -> None:
        """Store address sub-objects through the address service, keep only their ids."""
        for details_field, address in details.items():
            id_field = _ADDRESS_FIELDS[details_field]
            current = getattr(g, id_field, None) if g is not None else None
            patch[id_field] = await self._upsert_address(current, address)

    async def _auto_complete(self, g: Guarantor) -> Guarantor:
        """Flag the guarantor complete the first time it passes ``is_complete``."""
        if g.information_complete or not qualification.is_complete(g):
            return g
        g = await self._repository.mark_as_complete(g.id, self._now())
        logger.info("Guarantor %s information complete", g.id)
        await self._log(g, "information_complete")
        return g

    @staticmethod
    def _split_addresses(data: dict[str, Any]) -> dict[str, AddressDetails]:
        details: dict[str, AddressDetails] = {}
        for details_field in _ADDRESS_FIELDS:
            raw = data.pop(details_field, None)
            if raw is not None:
                details[details_field] = AddressDetails.model_validate(raw)
        return details

    # ------------------------------------------------------------------
    # Create / read / update
    # ------------------------------------------------------------------

    async def create(self, data: GuarantorCreate, actor_id: str | None = None) -> GuarantorCreated:
        """Create a guarantor and issue its self-service access token."""
        profile = profile_for(data.guarantor_type)
        patch = data.model_dump(exclude_unset=True)
        patch["is_company"] = data.is_company
        addresses = self._split_addresses(patch)

        _check_variant(data.is_company, set(patch))
        _validate_formats(patch)

        method = profile.fixed_method or data.guarantee_method
        if method is not None:
            patch["guarantee_method"] = method
            patch["has_property_guarantee"] = method == GuaranteeMethod.PROPERTY
        _check_guarantee_fields(profile, method, set(patch) | set(addresses))

        await self._resolve_addresses(None, patch, addresses)
        patch["verification_status"] = VerificationStatus.PENDING
        patch["information_complete"] = False

        g = await self._repository.create(patch)
        grant = await self._tokens.generate(g.id)
        logger.info("Created %s guarantor %s on policy %s", profile.activity_prefix, g.id, g.policy_id)
        await self._log(g, "created", actor_id)
        return GuarantorCreated(guarantor=await self._require(g.id), invitation=grant)

    async def get(self, guarantor_id: str) -> Guarantor:
        return await self._require(guarantor_id)

    async def list_by_policy(self, policy_id: str) -> list[Guarantor]:
        return await self._repository.find_by_policy_id(policy_id)

    async def update(
        self, guarantor_id: str, data: GuarantorUpdate, actor_id: str | None = None
    ) -> Guarantor:
        """Apply a partial update.

        Address sub-objects are upserted first and only their ids stored.
        Afterwards the guarantor is flagged complete if it just became so.
        """
        g = await self._require(guarantor_id)
        patch = data.model_dump(exclude_unset=True)
        addresses = self._split_addresses(patch)

        _check_variant(g.is_company, set(patch))
        _check_guarantee_fields(
            profile_for(g.guarantor_type),
            guarantee_method.method_in_effect(g),
            set(patch) | set(addresses),
        )
        _validate_formats(patch)

        await self._resolve_addresses(g, patch, addresses)
        updated = await self._repository.update(guarantor_id, patch)
        await self._log(updated, "updated", actor_id, {"fields": sorted(patch)})
        return await self._auto_complete(updated)

    async def delete(self, guarantor_id: str) -> None:
        g = await self._require(guarantor_id)
        await self._repository.delete(guarantor_id)
        await self._log(g, "deleted")

    # ------------------------------------------------------------------
    # Guarantee method
    # ------------------------------------------------------------------

    def _ensure_switchable(self, g: Guarantor, method: GuaranteeMethod) -> GuarantorProfile:
        profile = profile_for(g.guarantor_type)
        if not profile.allows_method_switch and method != profile.fixed_method:
            raise BusinessRuleError(
                f"{g.guarantor_type.value} guarantors can only guarantee with "
                f"{profile.fixed_method.value.lower()}",
                field="guarantee_method",
            )
        return profile

    async def _clear_and_select(self, g: Guarantor, method: GuaranteeMethod) -> Guarantor:
        """Clear the other method's data and select ``method`` in one repository write."""
        patch = guarantee_method.switch_patch(g, method)
        if method == GuaranteeMethod.PROPERTY:
            return await self._repository.clear_income_guarantee(g.id, patch)
        return await self._repository.clear_property_guarantee(g.id, patch)

    async def set_guarantee_method(
        self,
        guarantor_id: str,
        method: GuaranteeMethod,
        clear_previous_data: bool = False,
    ) -> Guarantor:
        """Select a guarantee method.

        Confirmation is only needed when data of the other method would be
        cleared. The clear and the selection are applied as one patch.
        """
        g = await self._require(guarantor_id)
        profile = self._ensure_switchable(g, method)

        if not profile.allows_method_switch:
            if g.guarantee_method == method and g.has_property_guarantee:
                return g
            updated = await self._repository.set_guarantee_method(
                guarantor_id, {"guarantee_method": method, "has_property_guarantee": True}
            )
            return await self._auto_complete(updated)

        previous = guarantee_method.method_in_effect(g)
        if previous == method and g.guarantee_method == method:
            return g
        if guarantee_method.would_lose_data(g, method):
            if not clear_previous_data:
                raise BusinessRuleError(
                    f"Selecting {method.value} clears the existing "
                    f"{guarantee_method.opposite(method).value} guarantee data; "
                    "confirmation required",
                    field="guarantee_method",
                )
            updated = await self._clear_and_select(g, method)
        else:
            updated = await self._repository.set_guarantee_method(
                guarantor_id, guarantee_method.switch_patch(g, method)
            )
        await self._log(
            updated, "guarantee_method_set",
            details={"from": previous.value if previous else None, "to": method.value},
        )
        return await self._auto_complete(updated)

    async def switch_guarantee_method(
        self,
        guarantor_id: str,
        new_method: GuaranteeMethod,
        confirm_data_loss: bool = False,
    ) -> Guarantor:
        """Switch to the other method; always requires explicit confirmation."""
        g = await self._require(guarantor_id)
        profile = self._ensure_switchable(g, new_method)
        if not profile.allows_method_switch:
            raise BusinessRuleError(
                f"{g.guarantor_type.value} guarantors cannot switch guarantee method",
                field="guarantee_method",
            )

        previous = guarantee_method.method_in_effect(g)
        if previous == new_method:
            raise BusinessRuleError(
                f"Guarantee method is already {new_method.value}", field="guarantee_method"
            )
        if not confirm_data_loss:
            raise BusinessRuleError(
                "Switching guarantee method clears the current guarantee data; "
                "confirm_data_loss must be set",
                field="confirm_data_loss",
            )

        updated = await self._clear_and_select(g, new_method)
        logger.info(
            "Guarantor %s switched guarantee method %s -> %s",
            guarantor_id, previous.value if previous else None, new_method.value,
        )
        await self._log(
            updated, "guarantee_method_switched",
            details={"from": previous.value if previous else None, "to": new_method.value},
        )
        return await self._auto_complete(updated)

    def _selection_patch(
        self, g: Guarantor, method: GuaranteeMethod, confirm_data_loss: bool
    ) -> dict[str, Any]:
        """Patch selecting ``method`` for a save, clearing the other method if needed."""
        profile = profile_for(g.guarantor_type)
        if profile.allows_method_switch and guarantee_method.method_in_effect(g) != method:
            if guarantee_method.would_lose_data(g, method) and not confirm_data_loss:
                raise BusinessRuleError(
                    f"Saving {method.value.lower()} guarantee data clears the existing "
                    f"{guarantee_method.opposite(method).value.lower()} guarantee data; "
                    "confirmation required",
                    field="confirm_data_loss",
                )
            return guarantee_method.switch_patch(g, method)
        return {
            "guarantee_method": method,
            "has_property_guarantee": method == GuaranteeMethod.PROPERTY,
        }

    async def save_property_guarantee(
        self, guarantor_id: str, data: PropertyGuaranteeRequest
    ) -> Guarantor:
        g = await self._require(guarantor_id)
        patch = self._selection_patch(g, GuaranteeMethod.PROPERTY, data.confirm_data_loss)
        values = data.model_dump(
            exclude_unset=True, exclude={"guarantee_property_details", "confirm_data_loss"}
        )
        if data.guarantee_property_details is not None:
            values["guarantee_property_address_id"] = await self._upsert_address(
                g.guarantee_property_address_id, data.guarantee_property_details
            )
        patch.update(values)

        updated = await self._repository.save_property_guarantee(guarantor_id, patch)
        await self._log(updated, "property_guarantee_saved")
        return await self._auto_complete(updated)

    async def save_income_guarantee(
        self, guarantor_id: str, data: IncomeGuaranteeRequest
    ) -> Guarantor:
        g = await self._require(guarantor_id)
        self._ensure_switchable(g, GuaranteeMethod.INCOME)
        patch = self._selection_patch(g, GuaranteeMethod.INCOME, data.confirm_data_loss)
        patch.update(data.model_dump(exclude_unset=True, exclude={"confirm_data_loss"}))

        updated = await self._repository.save_income_guarantee(guarantor_id, patch)
        await self._log(updated, "income_guarantee_saved")
        return await self._auto_complete(updated)

    async def get_guarantee_setup(self, guarantor_id: str) -> GuaranteeSetupStatus:
        g = await self._require(guarantor_id)
        return GuaranteeSetupStatus(
            guarantor_id=g.id,
            guarantee_method=guarantee_method.method_in_effect(g),
            has_property_guarantee=g.has_property_guarantee,
            has_income_verification=g.monthly_income is not None and g.monthly_income > 0,
            property_complete=guarantee_method.property_is_valid(g),
            income_complete=guarantee_method.income_is_valid(g),
            meets_requirements=guarantee_method.is_valid(g),
        )

    async def check_income_requirements(
        self, guarantor_id: str, monthly_rent: Decimal
    ) -> IncomeRequirementCheck:
        """Compare monthly income with rent at the configured minimum ratio."""
        if monthly_rent <= 0:
            raise InvalidFormatError("Monthly rent must be positive", field="monthly_rent")
        g = await self._require(guarantor_id)
        required_ratio = settings.INCOME_TO_RENT_MIN_RATIO
        required_income = monthly_rent * required_ratio
        ratio = guarantee_method.income_to_rent_ratio(g, monthly_rent)
        current = g.monthly_income

        if ratio is None:
            meets = False
            message = "Income guarantee with a monthly income is required"
        else:
            meets = ratio >= required_ratio
            message = (
                "Income meets the rent requirement"
                if meets
                else f"Income must be at least {required_ratio}x the monthly rent"
            )
        return IncomeRequirementCheck(
            meets_requirement=meets,
            monthly_rent=monthly_rent,
            current_income=current,
            required_income=required_income,
            current_ratio=ratio,
            required_ratio=required_ratio,
            deficit=max(Decimal("0"), required_income - (current or Decimal("0"))),
            message=message,
        )

    async def check_property_value(
        self, guarantor_id: str, monthly_rent: Decimal
    ) -> PropertyValueCheck:
        if monthly_rent <= 0:
            raise InvalidFormatError("Monthly rent must be positive", field="monthly_rent")
        g = await self._require(guarantor_id)
        multiplier = settings.PROPERTY_VALUE_RENT_MULTIPLIER
        meets = guarantee_method.meets_property_value_minimum(g, monthly_rent, multiplier)
        return PropertyValueCheck(
            meets_requirement=meets,
            monthly_rent=monthly_rent,
            property_value=g.property_value,
            required_value=monthly_rent * multiplier,
            message=(
                "Property value meets the requirement"
                if meets
                else f"Property value must be at least {multiplier} months of rent"
            ),
        )

    # ------------------------------------------------------------------
    # Person-only sections
    # ------------------------------------------------------------------

    async def save_marriage_information(
        self, guarantor_id: str, data: MarriageInfoRequest
    ) -> SpouseConsentRequirement:
        g = await self._require(guarantor_id)
        if not is_person(g):
            raise KindMismatchError("Marriage information is only applicable to individual guarantors")

        patch = data.model_dump()
        if data.marital_status not in _MARRIED:
            patch.update(spouse_name=None, spouse_rfc=None, spouse_curp=None)
        _validate_formats(patch)

        updated = await self._repository.update(guarantor_id, patch)
        await self._log(updated, "marriage_info_saved")
        updated = await self._auto_complete(updated)
        requirement = spouse_consent_requirement(updated)
        if requirement.requires_spouse_consent:
            logger.info("Guarantor %s requires spouse consent", guarantor_id)
        return requirement

    async def get_spouse_consent(self, guarantor_id: str) -> SpouseConsentRequirement:
        return spouse_consent_requirement(await self._require(guarantor_id))

    async def save_employment_info(
        self, guarantor_id: str, data: EmploymentInfoRequest
    ) -> EmploymentSummary:
        g = await self._require(guarantor_id)
        if not is_person(g):
            raise KindMismatchError("Employment information is only applicable to individual guarantors")

        patch = data.model_dump(exclude_unset=True, exclude={"employer_address_details"})
        if data.employer_address_details is not None:
            patch["employer_address_id"] = await self._upsert_address(
                g.employer_address_id, data.employer_address_details
            )

        updated = await self._repository.update(guarantor_id, patch)
        await self._log(updated, "employment_info_saved")
        updated = await self._auto_complete(updated)
        monthly = updated.monthly_income
        return EmploymentSummary(
            guarantor_id=updated.id,
            is_employed=updated.employment_status in _EMPLOYED,
            monthly_income=monthly,
            annual_income=monthly * 12 if monthly is not None else None,
            employer_name=updated.employer_name,
            position=updated.position,
        )

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    @staticmethod
    def _check_reference_phones(refs: list[PersonalReference] | list[CommercialReference]) -> None:
        for index, ref in enumerate(refs):
            ok, msg, normalized = validate_phone(ref.phone)
            if not ok:
                raise InvalidFormatError(msg, field=f"references[{index}].phone")
            ref.phone = normalized

    async def save_personal_references(
        self, guarantor_id: str, refs: list[PersonalReference]
    ) -> ReferencesResponse:
        """Replace the personal reference list. The minimum is not enforced here."""
        g = await self._require(guarantor_id)
        if not is_person(g):
            raise KindMismatchError("Personal references are only applicable to individual guarantors")
        self._check_reference_phones(refs)
        await self._repository.save_personal_references(guarantor_id, refs)
        updated = await self._require(guarantor_id)
        await self._log(updated, "references_saved", details={"count": len(refs)})
        await self._auto_complete(updated)
        return await self.get_references_summary(guarantor_id)

    async def save_commercial_references(
        self, guarantor_id: str, refs: list[CommercialReference]
    ) -> ReferencesResponse:
        g = await self._require(guarantor_id)
        if not is_company(g):
            raise KindMismatchError("Commercial references are only applicable to company guarantors")
        self._check_reference_phones(refs)
        await self._repository.save_commercial_references(guarantor_id, refs)
        updated = await self._require(guarantor_id)
        await self._log(updated, "commercial_references_saved", details={"count": len(refs)})
        await self._auto_complete(updated)
        return await self.get_references_summary(guarantor_id)

    async def get_references_summary(self, guarantor_id: str) -> ReferencesResponse:
        g = await self._require(guarantor_id)
        personal, commercial = await self._repository.get_references(guarantor_id)
        count = len(commercial) if g.is_company else len(personal)
        return ReferencesResponse(
            guarantor_id=g.id,
            is_company=g.is_company,
            summary=references.summarize(g.is_company, count),
            personal_references=[] if g.is_company else personal,
            commercial_references=commercial if g.is_company else [],
        )

    # ------------------------------------------------------------------
    # Qualification and submission
    # ------------------------------------------------------------------

    async def get_qualification_summary(self, guarantor_id: str) -> QualificationSummary:
        return qualification.summarize(await self._require(guarantor_id))

    async def _document_requirements(self, g: Guarantor) -> tuple[int, list[str]]:
        missing: list[str] = []
        count = await self._documents.count_documents(g.id)
        if count < settings.MIN_REQUIRED_DOCUMENTS:
            missing.append(
                f"At least {settings.MIN_REQUIRED_DOCUMENTS} documents are required "
                f"({count} uploaded)"
            )
        if is_person(g) and g.nationality in _IDENTITY_DOCUMENTS:
            category, message = _IDENTITY_DOCUMENTS[g.nationality]
            if await self._documents.count_documents(g.id, category) == 0:
                missing.append(message)
        if requires_spouse_consent(g):
            for category in DocumentCategory.spouse_consent_documents():
                if await self._documents.count_documents(g.id, category) == 0:
                    missing.append(f"Spouse consent document required: {category.value}")
        return count, missing

    async def can_submit(self, guarantor_id: str) -> SubmissionCheck:
        """Run the submission gate without changing anything."""
        g = await self._require(guarantor_id)
        profile = profile_for(g.guarantor_type)

        issues = qualification.validate_for_submission(g)
        missing = [issue.message for issue in issues]
        document_count, missing_documents = await self._document_requirements(g)
        missing.extend(missing_documents)
        if g.is_archived:
            missing.append("Archived guarantors cannot be submitted")

        return SubmissionCheck(
            guarantor_id=g.id,
            can_submit=not missing,
            missing_requirements=missing,
            issues=issues,
            guarantee_method_valid=(
                guarantee_method.is_valid(g) if profile.allows_method_switch else None
            ),
            document_count=document_count,
        )

    async def submit(self, guarantor_id: str, actor_id: str | None = None) -> Guarantor:
        """Submit for staff verification.

        Raises:
            SubmissionBlockedError: Listing every unmet requirement.
            BusinessRuleError: Already submitted and not sent back for changes.
        """
        g = await self._require(guarantor_id)
        if g.verification_status in (VerificationStatus.APPROVED, VerificationStatus.REJECTED) or (
            g.submitted_at is not None
            and g.verification_status != VerificationStatus.REQUIRES_CHANGES
        ):
            raise BusinessRuleError("Guarantor has already been submitted for verification")

        check = await self.can_submit(guarantor_id)
        if not check.can_submit:
            raise SubmissionBlockedError(check.missing_requirements)

        updated = await self._repository.mark_as_submitted(guarantor_id, self._now())
        logger.info("Guarantor %s submitted for verification", guarantor_id)
        await self._log(updated, "submitted", actor_id)
        try:
            await self._policy_checker.check_policy_completion(updated.policy_id)
        except Exception:
            logger.warning(
                "Policy completion check failed for policy %s", updated.policy_id, exc_info=True,
            )
        return updated

    # ------------------------------------------------------------------
    # Staff verification and archiving
    # ------------------------------------------------------------------

    async def record_verification(self, guarantor_id: str, data: VerificationRequest) -> Guarantor:
        """Record a staff decision with who made it and when."""
        if data.status not in VerificationStatus.staff_decisions():
            raise BusinessRuleError(
                f"{data.status.value} is not a verification decision", field="status"
            )
        g = await self._require(guarantor_id)
        if g.submitted_at is None:
            raise BusinessRuleError("Only submitted guarantors can be verified")

        now = self._now()
        patch: dict[str, Any] = {
            "verification_status": data.status,
            "verified_by": data.performed_by,
            "verified_at": now,
        }
        if data.status == VerificationStatus.REJECTED:
            if not data.reason:
                raise RequiredFieldError("A rejection reason is required", field="reason")
            patch.update(rejection_reason=data.reason, rejected_at=now)
        elif data.status == VerificationStatus.REQUIRES_CHANGES:
            changes = data.required_changes or ([data.reason] if data.reason else [])
            if not changes:
                raise RequiredFieldError("Requested changes must be listed", field="required_changes")
            patch["requires_changes"] = changes
        elif data.status == VerificationStatus.APPROVED:
            patch.update(rejection_reason=None, rejected_at=None, requires_changes=None)

        updated = await self._repository.record_verification(guarantor_id, patch)
        logger.info(
            "Guarantor %s verification %s by %s", guarantor_id, data.status.value, data.performed_by,
        )
        await self._log(
            updated, f"verification_{data.status.value.lower()}", data.performed_by,
            {"reason": data.reason} if data.reason else None,
        )
        return updated

    async def archive(
        self, guarantor_id: str, reason: str | None = None, actor_id: str | None = None
    ) -> Guarantor:
        """Soft-delete. The verification status is left as it was."""
        g = await self._require(guarantor_id)
        if g.is_archived:
            return g
        updated = await self._repository.archive(guarantor_id, self._now())
        await self._log(updated, "archived", actor_id, {"reason": reason} if reason else None)
        return updated

    async def restore(self, guarantor_id: str, actor_id: str | None = None) -> Guarantor:
        g = await self._require(guarantor_id)
        if not g.is_archived:
            raise BusinessRuleError("Guarantor is not archived")
        updated = await self._repository.restore(guarantor_id)
        await self._log(updated, "restored", actor_id)
        return updated

    # ------------------------------------------------------------------
    # Self-service access
    # ------------------------------------------------------------------

    async def generate_token(self, guarantor_id: str, expiry_days: int | None = None) -> TokenGrant:
        grant = await self._tokens.generate(guarantor_id, expiry_days)
        await self._log(await self._require(guarantor_id), "token_generated")
        return grant

    async def refresh_token(self, guarantor_id: str, expiry_days: int | None = None) -> TokenGrant:
        return await self._tokens.refresh(guarantor_id, expiry_days)

    async def revoke_token(self, guarantor_id: str) -> None:
        await self._tokens.revoke(guarantor_id)

    async def validate_token(self, token: str) -> TokenValidation:
        return await self._tokens.validate(token)

    async def validate_and_save(self, token: str, data: GuarantorUpdate) -> Guarantor:
        """Apply a self-service patch after re-validating the token."""
        validation = await self._tokens.validate(token)
        return await self.update(validation.guarantor.id, data, actor_id="self_service")
