from typing import Any, Dict, List, Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    kind = "service_error"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        entity: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.entity = entity

    @property
    def detail(self) -> Dict[str, Any]:
        """Structured payload for HTTPException.detail."""
        body: Dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.entity:
            body["entity"] = self.entity
        return body


class ValidationError(ServiceError):
    """Malformed input: blank required field, bad HH:MM, unknown enum value."""

    kind = "validation_error"

    def __init__(self, message: str, entity: Optional[str] = None) -> None:
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, entity)


class NotFoundError(ServiceError):
    kind = "not_found"

    def __init__(self, message: str, entity: Optional[str] = None) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND, entity)


class ConflictError(ServiceError):
    """Room conflict not overridden (or a uniqueness clash). Carries the conflict records."""

    kind = "conflict"

    def __init__(self, message: str, conflicts: Optional[List[Any]] = None, entity: Optional[str] = None) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT, entity)
        self.conflicts = list(conflicts or [])

    @property
    def detail(self) -> Dict[str, Any]:
        body = super().detail
        body["conflicts"] = [
            c.model_dump(mode="json") if hasattr(c, "model_dump") else c for c in self.conflicts
        ]
        return body


class ConstraintError(ServiceError):
    """Business rule violation: outline change on a populated timetable, assignment into a break."""

    kind = "constraint_violation"

    def __init__(self, message: str, entity: Optional[str] = None) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT, entity)
