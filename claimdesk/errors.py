from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class FieldIssue:
    field: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class ClaimDeskError(Exception):
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def errors(self) -> List[Dict[str, Any]]:
        return []


class ValidationFailedError(ClaimDeskError):
    status_code = 422

    def __init__(self, issues: Sequence[FieldIssue], message: Optional[str] = None):
        self.issues = list(issues)
        if message is None:
            message = "Validation failed: " + "; ".join(f"{i.field}: {i.message}" for i in self.issues)
        super().__init__(message)

    def errors(self) -> List[Dict[str, Any]]:
        return [issue.as_dict() for issue in self.issues]


class ChecklistIncompleteError(ValidationFailedError):
    def __init__(self, missing: Sequence[Any]):
        self.missing = list(missing)
        labels = ", ".join(item.label for item in self.missing)
        super().__init__(
            [FieldIssue(f"checklist.{item.value}", f"{item.label} must be confirmed") for item in self.missing],
            message=f"Checklist incomplete. Missing: {labels}",
        )


class ConflictError(ClaimDeskError):
    status_code = 409


class InvalidStatusTransitionError(ConflictError):
    def __init__(self, current_status: Any, target_status: Any, message: str):
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(message)


class NotFoundError(ClaimDeskError):
    status_code = 404


class InfrastructureError(ClaimDeskError):
    status_code = 503
