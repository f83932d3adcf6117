# This project was developed with assistance from AI tools.
"""Guarantor engine error taxonomy.

Every error raised by the engine carries an ``ErrorCode`` so the HTTP layer
can map it to a Problem Details response without inspecting messages.
Storage failures are not wrapped and propagate unchanged.
"""

import enum


class ErrorCode(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    REQUIRED = "REQUIRED"
    INVALID_FORMAT = "INVALID_FORMAT"
    BUSINESS_RULE = "BUSINESS_RULE"
    INSUFFICIENT = "INSUFFICIENT"
    EXPIRED = "EXPIRED"
    INVALID = "INVALID"


class GuarantorError(Exception):
    """Base class for recoverable engine errors."""

    code: ErrorCode = ErrorCode.BUSINESS_RULE

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class GuarantorNotFoundError(GuarantorError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, guarantor_id: str):
        super().__init__(f"Guarantor {guarantor_id} not found")
        self.guarantor_id = guarantor_id


class AddressNotFoundError(GuarantorError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, address_id: str):
        super().__init__(f"Address {address_id} not found")
        self.address_id = address_id


class RequiredFieldError(GuarantorError):
    code = ErrorCode.REQUIRED


class InvalidFormatError(GuarantorError):
    code = ErrorCode.INVALID_FORMAT


class BusinessRuleError(GuarantorError):
    code = ErrorCode.BUSINESS_RULE


class KindMismatchError(BusinessRuleError):
    """Operation called on the wrong legal-person variant."""

    pass


class SubmissionBlockedError(BusinessRuleError):
    def __init__(self, missing_requirements: list[str]):
        super().__init__(
            "Cannot submit: Missing requirements: " + ", ".join(missing_requirements)
        )
        self.missing_requirements = missing_requirements


class TokenInvalidError(GuarantorError):
    code = ErrorCode.INVALID

    def __init__(self, message: str = "Invalid access token"):
        super().__init__(message)


class TokenExpiredError(GuarantorError):
    code = ErrorCode.EXPIRED

    def __init__(self, message: str = "Access token has expired"):
        super().__init__(message)
