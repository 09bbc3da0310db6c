"""
Governance error taxonomy.

Policy evaluation and arbitration are total and never raise these. Errors
originate at the signal providers (risk, content) and at the review queue /
audit log boundary. Every error carries a machine-readable code so API
responses and logs can tell "we could not decide" apart from "a human must
decide".
"""
from typing import Any, Optional


class GovernanceError(Exception):
    code = "LG_INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        application_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.application_id = application_id
        self.details = details or {}

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.application_id:
            text += f" (application: {self.application_id})"
        return text

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.application_id:
            result["application_id"] = self.application_id
        if self.details:
            result["details"] = self.details
        return result


class InvalidApplication(GovernanceError):
    """Malformed or missing application fields; rejected before evaluation."""
    code = "LG_INVALID_APPLICATION"


class SignalUnavailable(GovernanceError):
    """Risk estimator or content analyzer failed or timed out."""
    code = "LG_SIGNAL_UNAVAILABLE"

    def __init__(self, signal: str, message: str, application_id: Optional[str] = None):
        super().__init__(message, application_id=application_id, details={"signal": signal})
        self.signal = signal


class DuplicateApplication(GovernanceError):
    """Application id is already in flight, pending review or audited."""
    code = "LG_DUPLICATE_APPLICATION"


class DuplicateEnqueue(DuplicateApplication):
    code = "LG_DUPLICATE_ENQUEUE"


class NotFound(GovernanceError):
    """No pending review entry for the application id."""
    code = "LG_NOT_FOUND"


class AlreadyClaimed(GovernanceError):
    code = "LG_ALREADY_CLAIMED"


class AuditUnavailable(GovernanceError):
    """Audit store could not be read."""
    code = "LG_AUDIT_UNAVAILABLE"


class AuditWriteFailure(AuditUnavailable):
    """Audit record could not be durably written."""
    code = "LG_AUDIT_WRITE_FAILURE"
