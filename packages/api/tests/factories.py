# This project was developed with assistance from AI tools.
"""Shared test factory functions.

Guarantor snapshots are real pydantic models; collaborators are AsyncMocks.
``make_repository`` keeps an in-memory store behind its AsyncMock methods so
that multi-step service flows see their own writes.
"""

from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock

from db.enums import (
    EmploymentStatus,
    GuaranteeMethod,
    GuarantorType,
    NationalityType,
    ReferenceRelationship,
    VerificationStatus,
)

from src.schemas.guarantor import (
    ARCHIVED_REASON,
    CommercialReference,
    CompanyGuarantor,
    PersonalReference,
    PersonGuarantor,
    parse_guarantor,
)
from src.services.guarantor import GuarantorService

FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)

VALID_CURP = "GOMA800101MDFRRN09"
VALID_RFC = "GOMA800101AB1"
VALID_COMPANY_RFC = "ABC010101XY9"


def make_personal_references(count: int) -> list[PersonalReference]:
    return [
        PersonalReference(
            id=i + 1,
            name=f"Reference {i + 1}",
            phone=f"55000000{i:02d}",
            relationship_type=ReferenceRelationship.FRIEND,
        )
        for i in range(count)
    ]


def make_commercial_references(count: int) -> list[CommercialReference]:
    return [
        CommercialReference(
            id=i + 1,
            name=f"Supplier {i + 1} SA de CV",
            contact_name="Luis Pérez",
            phone=f"55111111{i:02d}",
            years_of_relationship=3,
        )
        for i in range(count)
    ]


def make_person(**overrides) -> PersonGuarantor:
    """Bare person guarantor: identifiers and contact only."""
    data = {
        "id": "g-1",
        "policy_id": "pol-1",
        "guarantor_type": GuarantorType.JOINT_OBLIGOR,
        "email": "ana@example.com",
        "phone": "5512345678",
    }
    data.update(overrides)
    return PersonGuarantor(**data)


def make_complete_person(**overrides) -> PersonGuarantor:
    """Person with a valid property guarantee and three references."""
    data = {
        "relationship_to_tenant": "Sister",
        "address_id": "addr-home",
        "guarantee_method": GuaranteeMethod.PROPERTY,
        "has_property_guarantee": True,
        "property_value": Decimal("2000000"),
        "property_deed_number": "E-12345",
        "property_registry": "RPP-778",
        "guarantee_property_address_id": "addr-prop",
        "property_under_legal_proceeding": False,
        "full_name": "Ana Gómez Martínez",
        "nationality": NationalityType.MEXICAN,
        "curp": VALID_CURP,
        "employment_status": EmploymentStatus.EMPLOYED,
        "occupation": "Architect",
        "references": make_personal_references(3),
    }
    data.update(overrides)
    return make_person(**data)


def make_income_person(**overrides) -> PersonGuarantor:
    """Joint obligor person backing the lease with income."""
    data = {
        "guarantee_method": GuaranteeMethod.INCOME,
        "has_property_guarantee": False,
        "property_value": None,
        "property_deed_number": None,
        "property_registry": None,
        "guarantee_property_address_id": None,
        "monthly_income": Decimal("60000"),
        "income_source": "Salary",
        "bank_name": "BBVA",
        "account_holder": "Ana Gómez Martínez",
        "employer_address_id": "addr-work",
    }
    data.update(overrides)
    return make_complete_person(**data)


def make_company(**overrides) -> CompanyGuarantor:
    data = {
        "id": "g-2",
        "policy_id": "pol-1",
        "guarantor_type": GuarantorType.JOINT_OBLIGOR,
        "email": "contacto@acme.mx",
        "phone": "5598765432",
    }
    data.update(overrides)
    return CompanyGuarantor(**data)


def make_complete_company(**overrides) -> CompanyGuarantor:
    data = {
        "relationship_to_tenant": "Employer",
        "address_id": "addr-office",
        "guarantee_method": GuaranteeMethod.PROPERTY,
        "has_property_guarantee": True,
        "property_value": Decimal("5000000"),
        "property_deed_number": "E-99881",
        "property_tax_account": "CT-0001",
        "guarantee_property_address_id": "addr-warehouse",
        "company_name": "Acme Inmuebles SA de CV",
        "company_rfc": VALID_COMPANY_RFC,
        "legal_rep_name": "Jorge Ruiz",
        "legal_rep_email": "jorge@acme.mx",
        "legal_rep_phone": "5522223333",
        "commercial_references": make_commercial_references(1),
    }
    data.update(overrides)
    return make_company(**data)


def make_repository(*guarantors) -> AsyncMock:
    """AsyncMock repository backed by a dict of snapshots (``repo.store``)."""
    store = {g.id: g for g in guarantors}
    repo = AsyncMock()
    repo.store = store

    async def find_by_id(guarantor_id):
        return store.get(guarantor_id)

    async def find_by_policy_id(policy_id):
        return [g for g in store.values() if g.policy_id == policy_id]

    async def find_by_token(token):
        return next((g for g in store.values() if g.access_token == token), None)

    async def apply(guarantor_id, patch):
        store[guarantor_id] = store[guarantor_id].model_copy(update=patch)
        return store[guarantor_id]

    async def create(data):
        guarantor_id = data.get("id", f"g-new-{len(store) + 1}")
        store[guarantor_id] = parse_guarantor({"id": guarantor_id, **data})
        return store[guarantor_id]

    async def delete(guarantor_id):
        store.pop(guarantor_id, None)

    async def mark_as_complete(guarantor_id, completed_at):
        return await apply(guarantor_id, {"information_complete": True, "completed_at": completed_at})

    async def mark_as_submitted(guarantor_id, submitted_at):
        return await apply(
            guarantor_id,
            {"submitted_at": submitted_at, "information_complete": True},
        )

    async def save_personal_references(guarantor_id, refs):
        await apply(guarantor_id, {"references": list(refs)})
        return list(refs)

    async def save_commercial_references(guarantor_id, refs):
        await apply(guarantor_id, {"commercial_references": list(refs)})
        return list(refs)

    async def get_references(guarantor_id):
        g = store[guarantor_id]
        return list(getattr(g, "references", [])), list(getattr(g, "commercial_references", []))

    async def archive(guarantor_id, archived_at):
        return await apply(
            guarantor_id,
            {"archived_at": archived_at, "rejection_reason": ARCHIVED_REASON, "rejected_at": archived_at},
        )

    async def restore(guarantor_id):
        return await apply(
            guarantor_id,
            {
                "archived_at": None,
                "rejection_reason": None,
                "rejected_at": None,
                "verification_status": VerificationStatus.PENDING,
            },
        )

    async def set_token(guarantor_id, token, expiry):
        await apply(guarantor_id, {"access_token": token, "token_expiry": expiry})

    async def clear_token(guarantor_id):
        await apply(guarantor_id, {"access_token": None, "token_expiry": None})

    repo.find_by_id.side_effect = find_by_id
    repo.find_by_policy_id.side_effect = find_by_policy_id
    repo.find_by_token.side_effect = find_by_token
    repo.create.side_effect = create
    repo.update.side_effect = apply
    repo.delete.side_effect = delete
    for name in (
        "set_guarantee_method",
        "save_property_guarantee",
        "save_income_guarantee",
        "clear_property_guarantee",
        "clear_income_guarantee",
        "record_verification",
    ):
        getattr(repo, name).side_effect = apply
    repo.mark_as_complete.side_effect = mark_as_complete
    repo.mark_as_submitted.side_effect = mark_as_submitted
    repo.save_personal_references.side_effect = save_personal_references
    repo.save_commercial_references.side_effect = save_commercial_references
    repo.get_references.side_effect = get_references
    repo.archive.side_effect = archive
    repo.restore.side_effect = restore
    repo.set_token.side_effect = set_token
    repo.clear_token.side_effect = clear_token
    return repo


def make_documents(total: int = 3, by_category: dict | None = None) -> AsyncMock:
    """Document service whose counts come from ``by_category`` (total when unfiltered)."""
    by_category = by_category or {}
    documents = AsyncMock()

    async def count_documents(guarantor_id, category=None):
        if category is None:
            return total
        return by_category.get(category, 0)

    documents.count_documents.side_effect = count_documents
    return documents


def make_service(repo, documents=None, now=lambda: FIXED_NOW):
    """Build a GuarantorService plus the mocks it was wired with."""
    mocks = SimpleNamespace(
        repository=repo,
        addresses=AsyncMock(),
        documents=documents if documents is not None else make_documents(),
        activity=AsyncMock(),
        policy_checker=AsyncMock(),
    )
    mocks.addresses.create_address.return_value = "addr-new"
    service = GuarantorService(
        repository=mocks.repository,
        addresses=mocks.addresses,
        documents=mocks.documents,
        activity=mocks.activity,
        policy_checker=mocks.policy_checker,
        now=now,
    )
    return service, mocks
