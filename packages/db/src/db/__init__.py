# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, SessionLocal, engine, get_db
from .enums import (
    DocumentCategory,
    EmploymentStatus,
    GuaranteeMethod,
    GuarantorStage,
    GuarantorType,
    MaritalStatus,
    NationalityType,
    ReferenceKind,
    ReferenceRelationship,
    VerificationStatus,
)
from .models import (
    ActivityLog,
    Address,
    Guarantor,
    GuarantorDocument,
    GuarantorReference,
)

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "__version__",
    # Enums
    "DocumentCategory",
    "EmploymentStatus",
    "GuaranteeMethod",
    "GuarantorStage",
    "GuarantorType",
    "MaritalStatus",
    "NationalityType",
    "ReferenceKind",
    "ReferenceRelationship",
    "VerificationStatus",
    # Models
    "ActivityLog",
    "Address",
    "Guarantor",
    "GuarantorDocument",
    "GuarantorReference",
]
