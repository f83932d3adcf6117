# This project was developed with assistance from AI tools.
"""Address storage. Guarantors only keep the address id."""

import logging
import uuid

from db import Address
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.guarantor import AddressDetails
from .errors import AddressNotFoundError

logger = logging.getLogger(__name__)


class SqlAddressService:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def create_address(self, details: AddressDetails) -> str:
        address = Address(id=str(uuid.uuid4()), **details.model_dump())
        address_id = address.id
        try:
            self._session.add(address)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        logger.debug("Created address %s", address_id)
        return address_id

    async def update_address(self, address_id: str, details: AddressDetails) -> None:
        address = await self._session.get(Address, address_id)
        if address is None:
            raise AddressNotFoundError(address_id)
        try:
            for field, value in details.model_dump().items():
                setattr(address, field, value)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
