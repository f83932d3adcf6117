# This project was developed with assistance from AI tools.
"""Per-actor capability records.

The fixed-guarantee actor (aval) and the flexible-guarantee actor (joint
obligor) share every rule; the few places where they differ read from the
profile instead of branching on the actor type.
"""

from dataclasses import dataclass

from db.enums import GuaranteeMethod, GuarantorType


@dataclass(frozen=True)
class GuarantorProfile:
    guarantor_type: GuarantorType
    fixed_method: GuaranteeMethod | None
    allows_method_switch: bool
    activity_prefix: str
    link_path: str

    @property
    def requires_property_guarantee(self) -> bool:
        return self.fixed_method == GuaranteeMethod.PROPERTY


AVAL_PROFILE = GuarantorProfile(
    guarantor_type=GuarantorType.AVAL,
    fixed_method=GuaranteeMethod.PROPERTY,
    allows_method_switch=False,
    activity_prefix="aval",
    link_path="aval",
)

JOINT_OBLIGOR_PROFILE = GuarantorProfile(
    guarantor_type=GuarantorType.JOINT_OBLIGOR,
    fixed_method=None,
    allows_method_switch=True,
    activity_prefix="joint_obligor",
    link_path="joint-obligor",
)

_PROFILES: dict[GuarantorType, GuarantorProfile] = {
    GuarantorType.AVAL: AVAL_PROFILE,
    GuarantorType.JOINT_OBLIGOR: JOINT_OBLIGOR_PROFILE,
}


def profile_for(guarantor_type: GuarantorType) -> GuarantorProfile:
    return _PROFILES[guarantor_type]
