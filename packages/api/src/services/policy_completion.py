# This project was developed with assistance from AI tools.
"""Policy-wide completion check, run after a guarantor submits."""

import logging

from db import ActivityLog
from db import Guarantor as GuarantorRow
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

POLICY_GUARANTORS_COMPLETE = "policy_guarantors_complete"


class SqlPolicyCompletionChecker:
    """Records a policy event once every active guarantor on it has submitted."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def check_policy_completion(self, policy_id: str) -> None:
        pending_stmt = select(func.count(GuarantorRow.id)).where(
            GuarantorRow.policy_id == policy_id,
            GuarantorRow.archived_at.is_(None),
            GuarantorRow.submitted_at.is_(None),
        )
        try:
            pending = (await self._session.execute(pending_stmt)).scalar_one()
            if pending:
                logger.debug("Policy %s still has %d guarantor(s) to submit", policy_id, pending)
                return
            self._session.add(ActivityLog(policy_id=policy_id, action=POLICY_GUARANTORS_COMPLETE))
            await self._session.commit()
        except Exception:
            # Shared request session; an aborted transaction must not leak to the caller.
            await self._session.rollback()
            raise
        logger.info("All guarantors submitted for policy %s", policy_id)
