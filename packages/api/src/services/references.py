# This project was developed with assistance from AI tools.
"""Reference requirement policy.

Individuals need personal references, companies need commercial ones. The
minimum is only enforced when the guarantor submits; saving a shorter list
is allowed so the form can be filled in gradually.
"""

from ..schemas.guarantor import Guarantor, is_company
from ..schemas.qualification import ReferenceSummary

MIN_PERSONAL_REFERENCES = 3
MIN_COMMERCIAL_REFERENCES = 1


def minimum_references(company: bool) -> int:
    return MIN_COMMERCIAL_REFERENCES if company else MIN_PERSONAL_REFERENCES


def reference_count(g: Guarantor) -> int:
    if is_company(g):
        return len(g.commercial_references)
    return len(g.references)


def summarize(company: bool, count: int) -> ReferenceSummary:
    minimum = minimum_references(company)
    return ReferenceSummary(
        total=count,
        minimum=minimum,
        meets_requirement=count >= minimum,
        missing_count=max(0, minimum - count),
    )


def summarize_guarantor(g: Guarantor) -> ReferenceSummary:
    return summarize(g.is_company, reference_count(g))
