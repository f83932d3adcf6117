# This project was developed with assistance from AI tools.
"""Guarantee method policy.

Pure rules over a guarantor snapshot: which method is in effect, whether
that method's data holds up, the per-field coverage used for scoring, and
the patch that clears the other method's data on a switch.

``has_property_guarantee`` is a legacy flag that predates
``guarantee_method``. When set it forces property mode even if the enum
disagrees; records imported from older data may only carry the flag.
"""

from decimal import Decimal
from typing import Any

from db.enums import GuaranteeMethod

from ..schemas.guarantor import Guarantor, is_person
from .profiles import profile_for

PROPERTY_FIELDS: tuple[str, ...] = (
    "property_value",
    "property_deed_number",
    "property_registry",
    "property_tax_account",
    "property_under_legal_proceeding",
    "guarantee_property_address_id",
)

INCOME_FIELDS: tuple[str, ...] = (
    "monthly_income",
    "income_source",
    "bank_name",
    "account_holder",
    "has_properties",
)

# Marriage data only matters for a property guarantee (spouse consent), so it
# goes with the property fields when a person switches away from property.
MARRIAGE_FIELDS: tuple[str, ...] = (
    "marital_status",
    "spouse_name",
    "spouse_rfc",
    "spouse_curp",
)

_FLAG_FIELDS = frozenset({"property_under_legal_proceeding", "has_properties"})


def opposite(method: GuaranteeMethod) -> GuaranteeMethod:
    if method == GuaranteeMethod.PROPERTY:
        return GuaranteeMethod.INCOME
    return GuaranteeMethod.PROPERTY


def method_in_effect(g: Guarantor) -> GuaranteeMethod | None:
    """Resolve the guarantee method, or None when nothing is chosen yet."""
    if g.guarantee_method == GuaranteeMethod.PROPERTY or g.has_property_guarantee:
        return GuaranteeMethod.PROPERTY
    if g.guarantee_method == GuaranteeMethod.INCOME:
        return GuaranteeMethod.INCOME
    return None


def _positive(value: Decimal | None) -> bool:
    return value is not None and value > 0


def property_is_valid(g: Guarantor) -> bool:
    return (
        _positive(g.property_value)
        and bool(g.property_deed_number)
        and bool(g.guarantee_property_address_id)
        and not g.property_under_legal_proceeding
    )


def income_is_valid(g: Guarantor) -> bool:
    return _positive(g.monthly_income) and bool(g.income_source)


def is_valid(g: Guarantor) -> bool:
    """Whether the data of the method in effect is internally consistent."""
    method = method_in_effect(g)
    if method == GuaranteeMethod.PROPERTY:
        return property_is_valid(g)
    if method == GuaranteeMethod.INCOME:
        return income_is_valid(g)
    return False


def coverage(g: Guarantor) -> dict[str, bool]:
    """Four scoring checks for the method in effect; empty when unset."""
    method = method_in_effect(g)
    if method == GuaranteeMethod.PROPERTY:
        return {
            "property_value": bool(g.property_value),
            "property_deed_number": bool(g.property_deed_number),
            "guarantee_property_address_id": bool(g.guarantee_property_address_id),
            "property_registry_or_tax_account": bool(
                g.property_registry or g.property_tax_account
            ),
        }
    if method == GuaranteeMethod.INCOME:
        return {
            "monthly_income": bool(g.monthly_income),
            "income_source": bool(g.income_source),
            "bank_name": bool(g.bank_name),
            # Companies have no employer address, so this check never passes for them.
            "employer_address_id": bool(getattr(g, "employer_address_id", None)),
        }
    return {}


def fields_cleared_by(g: Guarantor, method: GuaranteeMethod) -> tuple[str, ...]:
    """Fields nulled when ``method``'s data is cleared from ``g``."""
    if method == GuaranteeMethod.INCOME:
        return INCOME_FIELDS
    if is_person(g) and profile_for(g.guarantor_type).allows_method_switch:
        return PROPERTY_FIELDS + MARRIAGE_FIELDS
    return PROPERTY_FIELDS


def clear_method(g: Guarantor, method: GuaranteeMethod) -> dict[str, Any]:
    """Patch that wipes ``method``'s data. Flags go back to False."""
    return {
        name: (False if name in _FLAG_FIELDS else None)
        for name in fields_cleared_by(g, method)
    }


def has_data(g: Guarantor, method: GuaranteeMethod) -> bool:
    """True when any field that clearing ``method`` would wipe holds a value."""
    for name in fields_cleared_by(g, method):
        value = getattr(g, name, None)
        if value is not None and value is not False:
            return True
    return False


def would_lose_data(g: Guarantor, new_method: GuaranteeMethod) -> bool:
    return has_data(g, opposite(new_method))


def switch_patch(g: Guarantor, new_method: GuaranteeMethod) -> dict[str, Any]:
    """Clear the other method and select ``new_method``, as one patch.

    The caller must apply the whole patch in a single transaction.
    """
    patch = clear_method(g, opposite(new_method))
    patch["guarantee_method"] = new_method
    patch["has_property_guarantee"] = new_method == GuaranteeMethod.PROPERTY
    return patch


def income_to_rent_ratio(g: Guarantor, monthly_rent: Decimal) -> Decimal | None:
    """Monthly income divided by monthly rent, for income-backed guarantors only."""
    if method_in_effect(g) != GuaranteeMethod.INCOME:
        return None
    if g.monthly_income is None or monthly_rent <= 0:
        return None
    return Decimal(g.monthly_income) / Decimal(monthly_rent)


def meets_property_value_minimum(g: Guarantor, monthly_rent: Decimal, multiplier: int) -> bool:
    if g.property_value is None:
        return False
    return Decimal(g.property_value) >= Decimal(monthly_rent) * multiplier
