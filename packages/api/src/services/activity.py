# This project was developed with assistance from AI tools.
"""Policy activity trail.

Append-only rows recording what happened to a policy's guarantors. Writers
treat this as fire-and-forget; see ``GuarantorService._log``.
"""

import logging
from typing import Any

from db import ActivityLog
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class SqlActivityLog:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def log_activity(
        self,
        policy_id: str,
        action: str,
        actor_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Append one activity row and commit it."""
        entry = ActivityLog(
            policy_id=policy_id,
            action=action,
            actor_id=actor_id,
            details=details,
        )
        try:
            self._session.add(entry)
            await self._session.commit()
        except Exception:
            # The session is shared with the request; leave it usable for the caller.
            await self._session.rollback()
            raise
        logger.debug("Activity %s on policy %s", action, policy_id)

