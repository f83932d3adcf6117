# This project was developed with assistance from AI tools.
"""Tests for the SQL guarantor repository and its sibling collaborators.

Sessions are mocked; rows are real (transient) ORM objects so the
row-to-snapshot mapping runs against the actual table definition.
"""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from db import ActivityLog, GuarantorDocument, GuarantorReference
from db import Guarantor as GuarantorRow
from db.enums import (
    DocumentCategory,
    GuaranteeMethod,
    GuarantorType,
    ReferenceKind,
    ReferenceRelationship,
    VerificationStatus,
)
from sqlalchemy.exc import SQLAlchemyError

from src.schemas.guarantor import (
    AddressDetails,
    CompanyGuarantor,
    PersonalReference,
    PersonGuarantor,
)
from src.services.activity import SqlActivityLog
from src.services.address import SqlAddressService
from src.services.errors import AddressNotFoundError, ErrorCode, GuarantorNotFoundError
from src.services.policy_completion import POLICY_GUARANTORS_COMPLETE, SqlPolicyCompletionChecker
from src.services.repository import SqlGuarantorRepository, to_domain

_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _row(**overrides) -> GuarantorRow:
    values = {
        "id": "g-1",
        "policy_id": "pol-1",
        "guarantor_type": GuarantorType.JOINT_OBLIGOR,
        "is_company": False,
        "email": "ana@example.com",
        "phone": "5512345678",
        "has_property_guarantee": False,
        "property_under_legal_proceeding": False,
        "has_properties": False,
        "information_complete": False,
        "verification_status": VerificationStatus.PENDING,
    }
    values.update(overrides)
    return GuarantorRow(**values)


def _reference(kind: ReferenceKind, name: str) -> GuarantorReference:
    return GuarantorReference(
        guarantor_id="g-1",
        kind=kind,
        name=name,
        phone="5500000000",
        relationship_type=ReferenceRelationship.FRIEND if kind == ReferenceKind.PERSONAL else None,
    )


def _result(row=None, rows=None, scalar=None) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    result.scalars.return_value.all.return_value = rows or []
    result.scalar_one.return_value = scalar
    return result


def _session(*results) -> AsyncMock:
    """AsyncSession mock; ``execute`` yields ``results`` in order (last one repeats)."""
    session = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    queue = list(results)

    async def execute(*args, **kwargs):
        return queue.pop(0) if len(queue) > 1 else queue[0]

    session.execute = AsyncMock(side_effect=execute)
    return session


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


class TestToDomain:
    def test_person_row_keeps_only_personal_references(self):
        row = _row(full_name="Ana Gómez", property_value=Decimal("1500000.00"))
        row.references.extend(
            [
                _reference(ReferenceKind.PERSONAL, "Laura"),
                _reference(ReferenceKind.COMMERCIAL, "Proveedora SA"),
            ]
        )
        row.documents.append(
            GuarantorDocument(
                id=7,
                guarantor_id="g-1",
                category=DocumentCategory.IDENTIFICATION,
                file_name="ine.pdf",
                object_key="guarantors/g-1/ine.pdf",
            )
        )

        g = to_domain(row)

        assert isinstance(g, PersonGuarantor)
        assert g.full_name == "Ana Gómez"
        assert g.property_value == Decimal("1500000.00")
        assert [r.name for r in g.references] == ["Laura"]
        assert g.document_ids == [7]

    def test_company_row(self):
        row = _row(id="g-2", is_company=True, company_name="Acme SA de CV")
        row.references.append(_reference(ReferenceKind.COMMERCIAL, "Proveedora SA"))

        g = to_domain(row)

        assert isinstance(g, CompanyGuarantor)
        assert g.company_name == "Acme SA de CV"
        assert [r.name for r in g.commercial_references] == ["Proveedora SA"]


# ---------------------------------------------------------------------------
# SqlGuarantorRepository
# ---------------------------------------------------------------------------


class TestLookups:
    @pytest.mark.asyncio
    async def test_find_by_id_missing_returns_none(self):
        repo = SqlGuarantorRepository(_session(_result(row=None)))
        assert await repo.find_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_find_by_token(self):
        row = _row(access_token="tok")
        repo = SqlGuarantorRepository(_session(_result(row=row)))
        g = await repo.find_by_token("tok")
        assert g.id == "g-1"
        assert g.access_token == "tok"

    @pytest.mark.asyncio
    async def test_find_by_policy_id(self):
        rows = [_row(), _row(id="g-2", is_company=True)]
        repo = SqlGuarantorRepository(_session(_result(rows=rows)))
        found = await repo.find_by_policy_id("pol-1")
        assert [type(g) for g in found] == [PersonGuarantor, CompanyGuarantor]


class TestWrites:
    @pytest.mark.asyncio
    async def test_update_commits_and_reloads(self):
        row = _row()
        session = _session(_result(row=row))
        repo = SqlGuarantorRepository(session)

        g = await repo.update("g-1", {"full_name": "Ana", "policy_id": "pol-other"})

        session.commit.assert_awaited_once()
        assert g.full_name == "Ana"
        assert row.policy_id == "pol-1"

    @pytest.mark.asyncio
    async def test_update_rolls_back_on_commit_failure(self):
        session = _session(_result(row=_row()))
        session.commit.side_effect = SQLAlchemyError("connection lost")
        repo = SqlGuarantorRepository(session)

        with pytest.raises(SQLAlchemyError):
            await repo.set_guarantee_method("g-1", {"guarantee_method": None})

        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_missing_guarantor(self):
        session = _session(_result(row=None))
        repo = SqlGuarantorRepository(session)

        with pytest.raises(GuarantorNotFoundError):
            await repo.update("missing", {"full_name": "Ana"})
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_assigns_id(self):
        session = _session(_result(row=_row(id="ignored")))
        repo = SqlGuarantorRepository(session)

        await repo.create({"policy_id": "pol-1", "email": "a@b.mx", "not_a_column": 1})

        added = session.add.call_args[0][0]
        assert isinstance(added, GuarantorRow)
        assert len(added.id) == 36
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_submit_after_requested_changes_resets_review(self):
        row = _row(
            verification_status=VerificationStatus.REQUIRES_CHANGES,
            requires_changes=["New ID"],
            submitted_at=_NOW,
        )
        repo = SqlGuarantorRepository(_session(_result(row=row)))

        g = await repo.mark_as_submitted("g-1", _NOW)

        assert g.verification_status == VerificationStatus.PENDING
        assert g.requires_changes is None
        assert g.completed_at == _NOW
        assert g.information_complete

    @pytest.mark.asyncio
    async def test_archive_and_restore(self):
        row = _row(verification_status=VerificationStatus.APPROVED)
        repo = SqlGuarantorRepository(_session(_result(row=row)))

        archived = await repo.archive("g-1", _NOW)
        assert archived.is_archived
        assert archived.rejection_reason == "ARCHIVED"
        assert archived.verification_status == VerificationStatus.APPROVED

        restored = await repo.restore("g-1")
        assert not restored.is_archived
        assert restored.verification_status == VerificationStatus.PENDING


    @pytest.mark.asyncio
    async def test_clear_property_guarantee_selects_income_in_one_commit(self):
        row = _row(
            guarantee_method=GuaranteeMethod.PROPERTY,
            has_property_guarantee=True,
            property_value=Decimal("1500000.00"),
        )
        session = _session(_result(row=row))
        repo = SqlGuarantorRepository(session)

        g = await repo.clear_property_guarantee(
            "g-1",
            {
                "property_value": None,
                "guarantee_method": GuaranteeMethod.INCOME,
                "has_property_guarantee": False,
            },
        )

        session.commit.assert_awaited_once()
        assert g.guarantee_method == GuaranteeMethod.INCOME
        assert g.property_value is None
        assert not g.has_property_guarantee


class TestReferences:
    @pytest.mark.asyncio
    async def test_replace_personal_references(self):
        saved = [_reference(ReferenceKind.PERSONAL, "Laura")]
        session = _session(_result(row=_row()), _result(), _result(rows=saved))
        repo = SqlGuarantorRepository(session)

        result = await repo.save_personal_references(
            "g-1", [PersonalReference(name="Laura", phone="5500000000")]
        )

        added = session.add_all.call_args[0][0]
        assert [r.kind for r in added] == [ReferenceKind.PERSONAL]
        assert added[0].guarantor_id == "g-1"
        session.commit.assert_awaited_once()
        assert [r.name for r in result] == ["Laura"]

    @pytest.mark.asyncio
    async def test_replace_rolls_back_on_failure(self):
        session = _session(_result(row=_row()), _result())
        session.commit.side_effect = SQLAlchemyError("constraint")
        repo = SqlGuarantorRepository(session)

        with pytest.raises(SQLAlchemyError):
            await repo.save_personal_references(
                "g-1", [PersonalReference(name="Laura", phone="5500000000")]
            )
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_references_splits_by_kind(self):
        rows = [
            _reference(ReferenceKind.PERSONAL, "Laura"),
            _reference(ReferenceKind.COMMERCIAL, "Proveedora SA"),
        ]
        repo = SqlGuarantorRepository(_session(_result(rows=rows)))

        personal, commercial = await repo.get_references("g-1")

        assert [r.name for r in personal] == ["Laura"]
        assert [r.name for r in commercial] == ["Proveedora SA"]


# ---------------------------------------------------------------------------
# Activity log and policy completion
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_activity_log_appends_row():
    session = _session(_result())
    await SqlActivityLog(session).log_activity("pol-1", "aval_created", None, {"guarantor_id": "g-1"})

    entry = session.add.call_args[0][0]
    assert isinstance(entry, ActivityLog)
    assert entry.action == "aval_created"
    assert entry.details == {"guarantor_id": "g-1"}
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_policy_completion_waits_for_pending_guarantors():
    session = _session(_result(scalar=1))
    await SqlPolicyCompletionChecker(session).check_policy_completion("pol-1")
    session.add.assert_not_called()


@pytest.mark.asyncio
async def test_policy_completion_records_event():
    session = _session(_result(scalar=0))
    await SqlPolicyCompletionChecker(session).check_policy_completion("pol-1")

    entry = session.add.call_args[0][0]
    assert entry.action == POLICY_GUARANTORS_COMPLETE
    assert entry.policy_id == "pol-1"


@pytest.mark.asyncio
async def test_activity_log_failure_rolls_back_shared_session():
    session = _session(_result())
    session.commit.side_effect = SQLAlchemyError("no such table: activity_log")

    with pytest.raises(SQLAlchemyError):
        await SqlActivityLog(session).log_activity("pol-1", "aval_created")

    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_policy_completion_failure_rolls_back_shared_session():
    session = _session(_result(scalar=0))
    session.commit.side_effect = SQLAlchemyError("connection lost")

    with pytest.raises(SQLAlchemyError):
        await SqlPolicyCompletionChecker(session).check_policy_completion("pol-1")

    session.rollback.assert_awaited_once()


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


_ADDRESS = AddressDetails(
    street="Av. Reforma",
    exterior_number="222",
    postal_code="06600",
    state="CDMX",
)


@pytest.mark.asyncio
async def test_update_missing_address_is_not_found():
    session = _session(_result())
    session.get.return_value = None

    with pytest.raises(AddressNotFoundError) as exc_info:
        await SqlAddressService(session).update_address("addr-missing", _ADDRESS)

    assert exc_info.value.code == ErrorCode.NOT_FOUND
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_address_returns_new_id():
    session = _session(_result())

    address_id = await SqlAddressService(session).create_address(_ADDRESS)

    added = session.add.call_args[0][0]
    assert added.id == address_id
    assert added.street == "Av. Reforma"
    session.commit.assert_awaited_once()
