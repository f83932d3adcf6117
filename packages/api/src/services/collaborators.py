# This project was developed with assistance from AI tools.
"""Collaborator contracts consumed by the guarantor engine.

The engine only talks to storage, addresses, documents and the activity
trail through these protocols. SQL implementations live next to them
(``repository``, ``address``, ``documents``, ``activity``,
``policy_completion``); tests substitute ``AsyncMock`` objects.
"""

from datetime import datetime
from typing import Any, Protocol

from db.enums import DocumentCategory

from ..schemas.guarantor import AddressDetails, CommercialReference, Guarantor, PersonalReference


class GuarantorRepository(Protocol):
    async def find_by_id(self, guarantor_id: str) -> Guarantor | None: ...

    async def find_by_policy_id(self, policy_id: str) -> list[Guarantor]: ...

    async def find_by_token(self, token: str) -> Guarantor | None: ...

    async def create(self, data: dict[str, Any]) -> Guarantor: ...

    async def update(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor: ...

    async def delete(self, guarantor_id: str) -> None: ...

    # Guarantee patches are applied all-or-nothing. The clear_* calls carry the
    # clearing patch together with the new method selection.
    async def set_guarantee_method(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor: ...

    async def save_property_guarantee(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor: ...

    async def save_income_guarantee(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor: ...

    async def clear_property_guarantee(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor: ...

    async def clear_income_guarantee(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor: ...

    async def mark_as_complete(self, guarantor_id: str, completed_at: datetime) -> Guarantor: ...

    async def mark_as_submitted(self, guarantor_id: str, submitted_at: datetime) -> Guarantor: ...

    # Reference saves replace the whole list in one transaction.
    async def save_personal_references(
        self, guarantor_id: str, references: list[PersonalReference]
    ) -> list[PersonalReference]: ...

    async def save_commercial_references(
        self, guarantor_id: str, references: list[CommercialReference]
    ) -> list[CommercialReference]: ...

    async def get_references(
        self, guarantor_id: str
    ) -> tuple[list[PersonalReference], list[CommercialReference]]: ...

    async def record_verification(self, guarantor_id: str, patch: dict[str, Any]) -> Guarantor: ...

    async def archive(self, guarantor_id: str, archived_at: datetime) -> Guarantor: ...

    async def restore(self, guarantor_id: str) -> Guarantor: ...

    async def set_token(self, guarantor_id: str, token: str, expiry: datetime) -> None: ...

    async def clear_token(self, guarantor_id: str) -> None: ...


class AddressService(Protocol):
    async def create_address(self, details: AddressDetails) -> str: ...

    async def update_address(self, address_id: str, details: AddressDetails) -> None: ...


class DocumentService(Protocol):
    async def count_documents(
        self, guarantor_id: str, category: DocumentCategory | None = None
    ) -> int: ...


class ActivityLog(Protocol):
    async def log_activity(
        self,
        policy_id: str,
        action: str,
        actor_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None: ...


class PolicyCompletionChecker(Protocol):
    async def check_policy_completion(self, policy_id: str) -> None: ...
