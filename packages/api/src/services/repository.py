# This project was developed with assistance from AI tools.
"""SQL guarantor repository.

Both legal-person shapes share the ``guarantors`` table; rows are mapped to
the ``PersonGuarantor`` / ``CompanyGuarantor`` snapshots on the way out so
the engine never touches ORM objects.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from db import Guarantor as GuarantorRow
from db import GuarantorReference
from db.enums import ReferenceKind, VerificationStatus
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.guarantor import (
    ARCHIVED_REASON,
    CommercialReference,
    Guarantor,
    PersonalReference,
    parse_guarantor,
)
from .errors import GuarantorNotFoundError

logger = logging.getLogger(__name__)

_COLUMNS = tuple(c.name for c in GuarantorRow.__table__.columns)

# Set at creation, never patched afterwards.
_IMMUTABLE_FIELDS = {"id", "policy_id", "guarantor_type", "is_company", "created_at"}


def to_domain(row: GuarantorRow) -> Guarantor:
    """Map an ORM row (with references and documents loaded) to its snapshot."""
    data: dict[str, Any] = {name: getattr(row, name) for name in _COLUMNS}
    if row.is_company:
        data["commercial_references"] = [
            CommercialReference.model_validate(r)
            for r in row.references
            if r.kind == ReferenceKind.COMMERCIAL
        ]
    else:
        data["references"] = [
            PersonalReference.model_validate(r)
            for r in row.references
            if r.kind == ReferenceKind.PERSONAL
        ]
    data["document_ids"] = [d.id for d in row.documents]
    return parse_guarantor(data)


class SqlGuarantorRepository:
    """Guarantor storage on an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _select(self):
        return (
            select(GuarantorRow)
            .options(selectinload(GuarantorRow.references), selectinload(GuarantorRow.documents))
            .execution_options(populate_existing=True)
        )

    async def _get_row(self, guarantor_id: str) -> GuarantorRow:
        result = await self._session.execute(self._select().where(GuarantorRow.id == guarantor_id))
        row = result.scalar_one_or_none()
        if row is None:
            raise GuarantorNotFoundError(guarantor_id)
        return row

    async def _reload(self, guarantor_id: str) -> Guarantor:
        # Re-query with eager loading to avoid lazy-load in async context
        return to_domain(await self._get_row(guarantor_id))

    async def _apply(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor:
        """Assign ``patch`` and commit as one unit; roll back on any failure."""
        row = await self._get_row(guarantor_id)
        try:
            for field, value in patch.items():
                if field in _IMMUTABLE_FIELDS or field not in _COLUMNS:
                    continue
                setattr(row, field, value)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return await self._reload(guarantor_id)

    # -- Lookups --

    async def find_by_id(self, guarantor_id: str) -> Guarantor | None:
        result = await self._session.execute(self._select().where(GuarantorRow.id == guarantor_id))
        row = result.scalar_one_or_none()
        return to_domain(row) if row is not None else None

    async def find_by_policy_id(self, policy_id: str) -> list[Guarantor]:
        stmt = self._select().where(GuarantorRow.policy_id == policy_id).order_by(GuarantorRow.created_at)
        result = await self._session.execute(stmt)
        return [to_domain(row) for row in result.scalars().all()]

    async def find_by_token(self, token: str) -> Guarantor | None:
        result = await self._session.execute(self._select().where(GuarantorRow.access_token == token))
        row = result.scalar_one_or_none()
        return to_domain(row) if row is not None else None

    # -- Writes --

    async def create(self, data: dict[str, Any]) -> Guarantor:
        values = {k: v for k, v in data.items() if k in _COLUMNS}
        values.setdefault("id", str(uuid.uuid4()))
        row = GuarantorRow(**values)
        self._session.add(row)
        guarantor_id = row.id  # capture before commit expires the object
        await self._session.commit()
        return await self._reload(guarantor_id)

    async def update(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor:
        return await self._apply(guarantor_id, patch)

    async def delete(self, guarantor_id: str) -> None:
        row = await self._get_row(guarantor_id)
        await self._session.delete(row)
        await self._session.commit()

    async def set_guarantee_method(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor:
        logger.info(
            "Setting guarantee method %s on guarantor %s",
            patch.get("guarantee_method"), guarantor_id,
        )
        return await self._apply(guarantor_id, patch)

    async def save_property_guarantee(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor:
        return await self._apply(guarantor_id, patch)

    async def save_income_guarantee(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor:
        return await self._apply(guarantor_id, patch)

    async def clear_property_guarantee(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor:
        """Null the property data and select the new method in the same commit."""
        logger.info("Clearing property guarantee on guarantor %s", guarantor_id)
        return await self._apply(guarantor_id, patch)

    async def clear_income_guarantee(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor:
        logger.info("Clearing income guarantee on guarantor %s", guarantor_id)
        return await self._apply(guarantor_id, patch)

    async def mark_as_complete(self, guarantor_id: str, completed_at: datetime) -> Guarantor:
        return await self._apply(
            guarantor_id, {"information_complete": True, "completed_at": completed_at}
        )

    async def mark_as_submitted(self, guarantor_id: str, submitted_at: datetime) -> Guarantor:
        row = await self._get_row(guarantor_id)
        patch: dict[str, Any] = {"submitted_at": submitted_at, "information_complete": True}
        if row.completed_at is None:
            patch["completed_at"] = submitted_at
        if row.verification_status == VerificationStatus.REQUIRES_CHANGES:
            patch["verification_status"] = VerificationStatus.PENDING
            patch["requires_changes"] = None
        return await self._apply(guarantor_id, patch)

    async def record_verification(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor:
        return await self._apply(guarantor_id, patch)

    async def archive(self, guarantor_id: str, archived_at: datetime) -> Guarantor:
        return await self._apply(
            guarantor_id,
            {
                "archived_at": archived_at,
                "rejection_reason": ARCHIVED_REASON,
                "rejected_at": archived_at,
            },
        )

    async def restore(self, guarantor_id: str) -> Guarantor:
        return await self._apply(
            guarantor_id,
            {
                "archived_at": None,
                "rejection_reason": None,
                "rejected_at": None,
                "verification_status": VerificationStatus.PENDING,
            },
        )

    async def set_token(self, guarantor_id: str, token: str, expiry: datetime) -> None:
        await self._apply(guarantor_id, {"access_token": token, "token_expiry": expiry})

    async def clear_token(self, guarantor_id: str) -> None:
        await self._apply(guarantor_id, {"access_token": None, "token_expiry": None})

    # -- References --

    async def _replace_references(
        self, guarantor_id: str, kind: ReferenceKind, rows: list[GuarantorReference]
    ) -> None:
        await self._get_row(guarantor_id)
        try:
            await self._session.execute(
                delete(GuarantorReference).where(
                    GuarantorReference.guarantor_id == guarantor_id,
                    GuarantorReference.kind == kind,
                )
            )
            self._session.add_all(rows)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        logger.info("Replaced %s references for guarantor %s (%d)", kind.value, guarantor_id, len(rows))

    async def save_personal_references(
        self, guarantor_id: str, references: list[PersonalReference]
    ) -> list[PersonalReference]:
        rows = [
            GuarantorReference(
                guarantor_id=guarantor_id,
                kind=ReferenceKind.PERSONAL,
                name=ref.name,
                phone=ref.phone,
                email=ref.email,
                relationship_type=ref.relationship_type,
                occupation=ref.occupation,
            )
            for ref in references
        ]
        await self._replace_references(guarantor_id, ReferenceKind.PERSONAL, rows)
        personal, _ = await self.get_references(guarantor_id)
        return personal

    async def save_commercial_references(
        self, guarantor_id: str, references: list[CommercialReference]
    ) -> list[CommercialReference]:
        rows = [
            GuarantorReference(
                guarantor_id=guarantor_id,
                kind=ReferenceKind.COMMERCIAL,
                name=ref.name,
                contact_name=ref.contact_name,
                phone=ref.phone,
                email=ref.email,
                years_of_relationship=ref.years_of_relationship,
            )
            for ref in references
        ]
        await self._replace_references(guarantor_id, ReferenceKind.COMMERCIAL, rows)
        _, commercial = await self.get_references(guarantor_id)
        return commercial

    async def get_references(
        self, guarantor_id: str
    ) -> tuple[list[PersonalReference], list[CommercialReference]]:
        stmt = (
            select(GuarantorReference)
            .where(GuarantorReference.guarantor_id == guarantor_id)
            .order_by(GuarantorReference.id)
        )
        result = await self._session.execute(stmt)
        personal: list[PersonalReference] = []
        commercial: list[CommercialReference] = []
        for row in result.scalars().all():
            if row.kind == ReferenceKind.COMMERCIAL:
                commercial.append(CommercialReference.model_validate(row))
            else:
                personal.append(PersonalReference.model_validate(row))
        return personal, commercial
