# This project was developed with assistance from AI tools.
"""Spouse consent rule for property-backed guarantees."""

from db.enums import DocumentCategory, GuaranteeMethod, MaritalStatus

from ..schemas.guarantor import Guarantor, is_person
from ..schemas.qualification import SpouseConsentRequirement
from .guarantee_method import method_in_effect


def requires_spouse_consent(g: Guarantor) -> bool:
    """A married person pledging property under a joint regime needs spouse consent.

    Separate-property marriages, companies and income guarantees never do.
    """
    if not is_person(g):
        return False
    if method_in_effect(g) != GuaranteeMethod.PROPERTY or not g.has_property_guarantee:
        return False
    return g.marital_status == MaritalStatus.MARRIED_JOINT


def spouse_consent_requirement(g: Guarantor) -> SpouseConsentRequirement:
    required = requires_spouse_consent(g)
    return SpouseConsentRequirement(
        guarantor_id=g.id,
        marital_status=getattr(g, "marital_status", None),
        requires_spouse_consent=required,
        reason=(
            "Property under joint marital regime requires spouse consent"
            if required
            else None
        ),
        consent_documents_required=(
            list(DocumentCategory.spouse_consent_documents()) if required else []
        ),
    )
