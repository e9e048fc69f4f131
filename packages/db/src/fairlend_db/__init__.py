__version__ = "0.1.0"

from .database import Base, DatabaseService, SessionLocal, get_db, get_db_service
from .enums import AppealStatus, FinalDecision, Prediction, UserRole
from .gateway import PersistenceError, UniqueViolation
from .models import Appeal, ApprovedLoan, LoanApplication, Notification

__all__ = [
    "Base",
    "DatabaseService",
    "SessionLocal",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "AppealStatus",
    "FinalDecision",
    "Prediction",
    "UserRole",
    # Errors
    "PersistenceError",
    "UniqueViolation",
    # Models
    "Appeal",
    "ApprovedLoan",
    "LoanApplication",
    "Notification",
]
