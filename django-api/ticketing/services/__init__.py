from ticketing.services.issuance_service import IssuanceService
from ticketing.services.verification_service import VerificationService, staff_code_for

__all__ = [
    "IssuanceService",
    "VerificationService",
    "staff_code_for",
]
