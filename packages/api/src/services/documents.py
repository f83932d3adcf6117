# This project was developed with assistance from AI tools.
"""Uploaded-document queries used by the submission gate."""

from db import GuarantorDocument
from db.enums import DocumentCategory
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


class SqlDocumentService:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def count_documents(
        self, guarantor_id: str, category: DocumentCategory | None = None
    ) -> int:
        """Number of documents uploaded for a guarantor, optionally of one category."""
        stmt = select(func.count(GuarantorDocument.id)).where(
            GuarantorDocument.guarantor_id == guarantor_id
        )
        if category is not None:
            stmt = stmt.where(GuarantorDocument.category == category)
        result = await self._session.execute(stmt)
        return result.scalar_one()
