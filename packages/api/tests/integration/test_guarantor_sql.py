# This project was developed with assistance from AI tools.
"""Guarantor lifecycle against the real SQL repository, address, document,
activity and policy-completion collaborators."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from db import ActivityLog, GuarantorReference
from db.enums import GuaranteeMethod, GuarantorType, VerificationStatus
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from src.schemas.guarantor import (
    AddressDetails,
    GuarantorCreate,
    GuarantorUpdate,
    IncomeGuaranteeRequest,
    PropertyGuaranteeRequest,
)
from src.services.address import SqlAddressService
from src.services.errors import AddressNotFoundError, BusinessRuleError

from ..factories import make_personal_references

pytestmark = pytest.mark.integration

_ADDRESS = AddressDetails(
    street="Av. Reforma",
    exterior_number="222",
    postal_code="06600",
    state="CDMX",
)


async def _create(service, guarantor_type=GuarantorType.JOINT_OBLIGOR, **extra):
    return await service.create(
        GuarantorCreate(
            policy_id="pol-1",
            guarantor_type=guarantor_type,
            email="ana@example.com",
            phone="5512345678",
            **extra,
        )
    )


async def _actions(session) -> list[str]:
    result = await session.execute(select(ActivityLog.action).order_by(ActivityLog.id))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreate:
    @pytest.mark.asyncio
    async def test_person_is_stored_with_token(self, sql_service, db_session):
        created = await _create(sql_service)

        g = await sql_service.get(created.guarantor.id)
        assert not g.is_company
        assert g.verification_status == VerificationStatus.PENDING
        assert not g.information_complete
        assert g.access_token == created.invitation.token
        assert "/actor/joint-obligor/" in created.invitation.link
        assert await _actions(db_session) == ["joint_obligor_created"]

    @pytest.mark.asyncio
    async def test_company_is_stored(self, sql_service):
        created = await _create(sql_service, is_company=True, company_name="Acme SA de CV")

        g = await sql_service.get(created.guarantor.id)
        assert g.is_company
        assert g.company_name == "Acme SA de CV"

    @pytest.mark.asyncio
    async def test_aval_starts_in_property_mode_with_address(self, sql_service):
        created = await _create(
            sql_service, guarantor_type=GuarantorType.AVAL, address_details=_ADDRESS
        )

        g = await sql_service.get(created.guarantor.id)
        assert g.guarantee_method == GuaranteeMethod.PROPERTY
        assert g.has_property_guarantee
        assert g.address_id is not None

    @pytest.mark.asyncio
    async def test_listed_by_policy(self, sql_service):
        first = await _create(sql_service)
        second = await _create(sql_service, guarantor_type=GuarantorType.AVAL)

        found = await sql_service.list_by_policy("pol-1")

        assert {g.id for g in found} == {first.guarantor.id, second.guarantor.id}


# ---------------------------------------------------------------------------
# Activity log failures
# ---------------------------------------------------------------------------


class TestActivityLogFailure:
    @pytest.mark.asyncio
    async def test_create_survives_failed_activity_write(
        self, sql_service, broken_activity_log
    ):
        created = await _create(sql_service)

        g = await sql_service.get(created.guarantor.id)
        assert g.access_token == created.invitation.token

    @pytest.mark.asyncio
    async def test_later_operations_keep_working(self, sql_service, broken_activity_log):
        created = await _create(sql_service)
        guarantor_id = created.guarantor.id

        await sql_service.update(guarantor_id, GuarantorUpdate(full_name="Ana Gómez"))
        await sql_service.save_income_guarantee(
            guarantor_id,
            IncomeGuaranteeRequest(monthly_income=Decimal("45000"), income_source="Salary"),
        )

        g = await sql_service.get(guarantor_id)
        assert g.full_name == "Ana Gómez"
        assert g.guarantee_method == GuaranteeMethod.INCOME


# ---------------------------------------------------------------------------
# Guarantee method switch
# ---------------------------------------------------------------------------


class TestGuaranteeSwitch:
    @pytest.mark.asyncio
    async def test_switch_clears_income_data(self, sql_service):
        created = await _create(sql_service)
        guarantor_id = created.guarantor.id
        await sql_service.save_income_guarantee(
            guarantor_id,
            IncomeGuaranteeRequest(
                monthly_income=Decimal("45000"), income_source="Salary", bank_name="BBVA"
            ),
        )

        await sql_service.switch_guarantee_method(
            guarantor_id, GuaranteeMethod.PROPERTY, confirm_data_loss=True
        )

        g = await sql_service.get(guarantor_id)
        assert g.guarantee_method == GuaranteeMethod.PROPERTY
        assert g.has_property_guarantee
        assert g.monthly_income is None
        assert g.income_source is None
        assert g.bank_name is None

    @pytest.mark.asyncio
    async def test_unconfirmed_switch_leaves_data(self, sql_service):
        created = await _create(sql_service)
        guarantor_id = created.guarantor.id
        await sql_service.save_income_guarantee(
            guarantor_id,
            IncomeGuaranteeRequest(monthly_income=Decimal("45000"), income_source="Salary"),
        )

        with pytest.raises(BusinessRuleError):
            await sql_service.switch_guarantee_method(guarantor_id, GuaranteeMethod.PROPERTY)

        g = await sql_service.get(guarantor_id)
        assert g.guarantee_method == GuaranteeMethod.INCOME
        assert g.monthly_income == Decimal("45000")

    @pytest.mark.asyncio
    async def test_failed_switch_commit_rolls_back_everything(
        self, sql_service, db_session, monkeypatch
    ):
        created = await _create(sql_service)
        guarantor_id = created.guarantor.id
        await sql_service.save_income_guarantee(
            guarantor_id,
            IncomeGuaranteeRequest(monthly_income=Decimal("45000"), income_source="Salary"),
        )

        monkeypatch.setattr(
            db_session, "commit", AsyncMock(side_effect=SQLAlchemyError("disk I/O error"))
        )
        with pytest.raises(SQLAlchemyError):
            await sql_service.switch_guarantee_method(
                guarantor_id, GuaranteeMethod.PROPERTY, confirm_data_loss=True
            )
        monkeypatch.undo()

        g = await sql_service.get(guarantor_id)
        assert g.guarantee_method == GuaranteeMethod.INCOME
        assert not g.has_property_guarantee
        assert g.monthly_income == Decimal("45000")
        assert g.income_source == "Salary"

    @pytest.mark.asyncio
    async def test_property_guarantee_stores_its_address(self, sql_service):
        created = await _create(sql_service)
        guarantor_id = created.guarantor.id

        await sql_service.save_property_guarantee(
            guarantor_id,
            PropertyGuaranteeRequest(
                property_value=Decimal("2500000"),
                property_deed_number="ESC-4411",
                guarantee_property_details=_ADDRESS,
            ),
        )

        g = await sql_service.get(guarantor_id)
        assert g.guarantee_method == GuaranteeMethod.PROPERTY
        assert g.property_value == Decimal("2500000")
        assert g.guarantee_property_address_id is not None


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class TestReferenceReplace:
    @pytest.mark.asyncio
    async def test_save_replaces_whole_list(self, sql_service, db_session):
        created = await _create(sql_service)
        guarantor_id = created.guarantor.id

        await sql_service.save_personal_references(guarantor_id, make_personal_references(3))
        summary = await sql_service.save_personal_references(
            guarantor_id, make_personal_references(1)
        )

        assert [r.name for r in summary.personal_references] == ["Reference 1"]
        stored = await db_session.execute(
            select(func.count(GuarantorReference.id)).where(
                GuarantorReference.guarantor_id == guarantor_id
            )
        )
        assert stored.scalar_one() == 1
        g = await sql_service.get(guarantor_id)
        assert len(g.references) == 1


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_updating_a_missing_address_leaves_session_usable(sql_service, db_session):
    created = await _create(sql_service, address_details=_ADDRESS)
    addresses = SqlAddressService(db_session)

    with pytest.raises(AddressNotFoundError):
        await addresses.update_address("addr-missing", _ADDRESS)

    g = await sql_service.update(
        created.guarantor.id,
        GuarantorUpdate(address_details=_ADDRESS.model_copy(update={"street": "Insurgentes Sur"})),
    )
    assert g.address_id == created.guarantor.address_id
