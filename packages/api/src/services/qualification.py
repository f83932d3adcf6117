# This project was developed with assistance from AI tools.
"""Guarantor completeness evaluator.

Three views over one snapshot:

- ``is_complete``: the loose gate that auto-flags a guarantor as having saved
  all of its information (one reference is enough).
- ``completion_percentage``: weighted progress score shown to the guarantor.
- ``validate_for_submission``: the strict, collected list of problems that
  block submission for verification.

``is_complete`` and the other two disagree on references on purpose: a person
with one or two references is complete but cannot submit yet.
"""

from db.enums import GuaranteeMethod, GuarantorStage, NationalityType, VerificationStatus

from ..schemas.guarantor import CompanyGuarantor, Guarantor, PersonGuarantor, is_company
from ..schemas.qualification import IssueCode, QualificationSummary, ValidationIssue
from . import guarantee_method, references
from .field_validation import validate_company_rfc, validate_curp, validate_email
from .profiles import profile_for
from .spouse_consent import requires_spouse_consent

_CONTACT_FIELDS: tuple[tuple[str, str], ...] = (
    ("email", "Email is required"),
    ("phone", "Phone is required"),
    ("relationship_to_tenant", "Relationship to tenant is required"),
)

_COMPANY_REQUIRED: tuple[tuple[str, str], ...] = (
    ("company_name", "Company name is required"),
    ("company_rfc", "Company RFC is required"),
    ("legal_rep_name", "Legal representative name is required"),
    ("legal_rep_email", "Legal representative email is required"),
    ("legal_rep_phone", "Legal representative phone is required"),
)


def _identity_document(g: PersonGuarantor) -> str | None:
    if g.nationality == NationalityType.MEXICAN:
        return g.curp
    if g.nationality == NationalityType.FOREIGN:
        return g.passport
    return None


def is_complete(g: Guarantor) -> bool:
    if not all(getattr(g, name) for name, _ in _CONTACT_FIELDS):
        return False
    if guarantee_method.method_in_effect(g) is None or not guarantee_method.is_valid(g):
        return False

    if is_company(g):
        if not (g.company_name and g.company_rfc and g.legal_rep_name
                and g.legal_rep_email and g.legal_rep_phone):
            return False
    elif not (g.full_name and _identity_document(g)):
        return False

    return references.reference_count(g) >= 1


def completion_percentage(g: Guarantor) -> int:
    """Weighted 0-100 score, rounded half up."""
    checks: list[bool] = [
        bool(g.email),
        bool(g.phone),
        bool(g.relationship_to_tenant),
        guarantee_method.method_in_effect(g) is not None,
    ]
    checks.extend(guarantee_method.coverage(g).values())

    if is_company(g):
        checks.extend([
            bool(g.company_name),
            bool(g.company_rfc),
            bool(g.legal_rep_name),
            bool(g.address_id),
        ])
    else:
        checks.extend([
            bool(g.full_name),
            bool(g.curp or g.passport),
            bool(g.address_id),
            g.employment_status is not None,
            bool(g.occupation),
        ])
    checks.append(references.summarize_guarantor(g).meets_requirement)

    satisfied = sum(checks)
    applicable = len(checks)
    return (200 * satisfied + applicable) // (2 * applicable)


def _guarantee_issues(g: Guarantor) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    profile = profile_for(g.guarantor_type)
    method = guarantee_method.method_in_effect(g)

    if profile.requires_property_guarantee:
        if not g.has_property_guarantee:
            issues.append(ValidationIssue(
                field="has_property_guarantee",
                message="A property guarantee is required",
                code=IssueCode.BUSINESS_RULE,
            ))
    elif method is None:
        issues.append(ValidationIssue(
            field="guarantee_method",
            message="Guarantee method must be selected",
            code=IssueCode.REQUIRED,
        ))

    if method == GuaranteeMethod.PROPERTY:
        if g.property_value is None or g.property_value <= 0:
            issues.append(ValidationIssue(
                field="property_value",
                message="Property value is required",
                code=IssueCode.REQUIRED,
            ))
        if not g.property_deed_number:
            issues.append(ValidationIssue(
                field="property_deed_number",
                message="Property deed number is required",
                code=IssueCode.REQUIRED,
            ))
        if not g.guarantee_property_address_id:
            issues.append(ValidationIssue(
                field="guarantee_property_address_id",
                message="Guarantee property address is required",
                code=IssueCode.REQUIRED,
            ))
        if g.property_under_legal_proceeding:
            issues.append(ValidationIssue(
                field="property_under_legal_proceeding",
                message="Property cannot be under legal proceedings",
                code=IssueCode.BUSINESS_RULE,
            ))
    elif method == GuaranteeMethod.INCOME:
        if g.monthly_income is None or g.monthly_income <= 0:
            issues.append(ValidationIssue(
                field="monthly_income",
                message="Monthly income is required",
                code=IssueCode.REQUIRED,
            ))
        if not g.income_source:
            issues.append(ValidationIssue(
                field="income_source",
                message="Income source is required",
                code=IssueCode.REQUIRED,
            ))
    return issues


def _person_issues(g: PersonGuarantor) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not g.full_name:
        issues.append(ValidationIssue(
            field="full_name", message="Full name is required", code=IssueCode.REQUIRED,
        ))
    if g.nationality is None:
        issues.append(ValidationIssue(
            field="nationality", message="Nationality is required", code=IssueCode.REQUIRED,
        ))
    elif g.nationality == NationalityType.MEXICAN:
        if not g.curp:
            issues.append(ValidationIssue(
                field="curp",
                message="CURP is required for Mexican nationals",
                code=IssueCode.REQUIRED,
            ))
        else:
            ok, msg, _ = validate_curp(g.curp)
            if not ok:
                issues.append(ValidationIssue(
                    field="curp", message=msg, code=IssueCode.INVALID_FORMAT,
                ))
    elif not g.passport:
        issues.append(ValidationIssue(
            field="passport",
            message="Passport is required for foreign nationals",
            code=IssueCode.REQUIRED,
        ))

    summary = references.summarize(False, len(g.references))
    if not summary.meets_requirement:
        issues.append(ValidationIssue(
            field="references",
            message=(
                f"At least {summary.minimum} personal references are required "
                f"({summary.missing_count} missing)"
            ),
            code=IssueCode.INSUFFICIENT,
        ))
    return issues


def _company_issues(g: CompanyGuarantor) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for name, message in _COMPANY_REQUIRED:
        if not getattr(g, name):
            issues.append(ValidationIssue(field=name, message=message, code=IssueCode.REQUIRED))
    if g.company_rfc:
        ok, msg, _ = validate_company_rfc(g.company_rfc)
        if not ok:
            issues.append(ValidationIssue(
                field="company_rfc", message=msg, code=IssueCode.INVALID_FORMAT,
            ))

    summary = references.summarize(True, len(g.commercial_references))
    if not summary.meets_requirement:
        issues.append(ValidationIssue(
            field="commercial_references",
            message=f"At least {summary.minimum} commercial reference is required",
            code=IssueCode.INSUFFICIENT,
        ))
    return issues


def validate_for_submission(g: Guarantor) -> list[ValidationIssue]:
    """Collect every problem that blocks submission. Empty means submittable."""
    issues: list[ValidationIssue] = []
    for name, message in _CONTACT_FIELDS:
        if not getattr(g, name):
            issues.append(ValidationIssue(field=name, message=message, code=IssueCode.REQUIRED))
    if g.email:
        ok, msg, _ = validate_email(g.email)
        if not ok:
            issues.append(ValidationIssue(field="email", message=msg, code=IssueCode.INVALID_FORMAT))

    issues.extend(_guarantee_issues(g))

    if is_company(g):
        issues.extend(_company_issues(g))
    else:
        issues.extend(_person_issues(g))
    return issues


def lifecycle_stage(g: Guarantor) -> GuarantorStage:
    """Derive the lifecycle stage from the persisted status and timestamps."""
    status = g.verification_status
    if status == VerificationStatus.APPROVED:
        return GuarantorStage.APPROVED
    if status == VerificationStatus.REJECTED:
        return GuarantorStage.REJECTED
    if status == VerificationStatus.REQUIRES_CHANGES:
        return GuarantorStage.REQUIRES_CHANGES
    if g.submitted_at is not None or status == VerificationStatus.IN_REVIEW:
        return GuarantorStage.SUBMITTED
    if g.information_complete:
        return GuarantorStage.INFO_SAVED
    return GuarantorStage.DRAFT


def summarize(g: Guarantor) -> QualificationSummary:
    return QualificationSummary(
        guarantor_id=g.id,
        stage=lifecycle_stage(g),
        is_archived=g.is_archived,
        is_complete=is_complete(g),
        completion_percentage=completion_percentage(g),
        method_in_effect=guarantee_method.method_in_effect(g),
        requires_spouse_consent=requires_spouse_consent(g),
        issues=validate_for_submission(g),
    )
