"""
Custom exceptions for the Court Case service.

Every error carries a ``kind`` that the API layer maps onto an HTTP status
code, and a human-readable message.
"""

class CourtCaseServiceError(Exception):
    """Base class for exceptions in this module."""
    kind = "SERVER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

class ValidationError(CourtCaseServiceError):
    """Raised when required input is missing or malformed."""
    kind = "VALIDATION_ERROR"

class NotFoundError(CourtCaseServiceError):
    """Raised when a referenced case or principal does not resolve."""
    kind = "NOT_FOUND"

class CaseNotFoundError(NotFoundError):
    def __init__(self, case_id: str):
        self.case_id = case_id
        super().__init__(f"Case '{case_id}' not found.")

class PrincipalNotFoundError(NotFoundError):
    def __init__(self, principal_id: str, expected_role: str):
        self.principal_id = principal_id
        self.expected_role = expected_role
        super().__init__(f"No {expected_role} found with ID '{principal_id}'.")

class RoleMismatchError(CourtCaseServiceError):
    """Raised when a referenced principal exists but lacks the required role."""
    kind = "ROLE_MISMATCH"

    def __init__(self, principal_id: str, expected_role: str, actual_role: str):
        self.principal_id = principal_id
        self.expected_role = expected_role
        self.actual_role = actual_role
        super().__init__(
            f"Principal '{principal_id}' has role '{actual_role}', but role '{expected_role}' is required."
        )

class ForbiddenError(CourtCaseServiceError):
    """Raised when the acting principal is not permitted to perform an operation."""
    kind = "FORBIDDEN"

class ConcurrencyConflictError(CourtCaseServiceError):
    """Raised when a version conflict is detected during an update operation."""
    kind = "CONFLICT"

    def __init__(self, aggregate_id: str, expected_version: int):
        self.aggregate_id = aggregate_id
        self.expected_version = expected_version
        super().__init__(
            f"Concurrency conflict for case '{aggregate_id}'. "
            f"Expected version {expected_version}, but the stored case has changed."
        )

class ServerError(CourtCaseServiceError):
    """Raised on persistence or unexpected failures."""
    kind = "SERVER_ERROR"

class PersistenceError(ServerError):
    """Raised when the document store rejects or fails a read/write."""
    pass

class CaseNumberConflictError(ServerError):
    """Raised when no unique case number could be allocated."""
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not allocate a unique case number after {attempts} attempts.")

class IdentityServiceError(ServerError):
    """Raised when the identity collaborator cannot be reached or answers unexpectedly."""
    pass
