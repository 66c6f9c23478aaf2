"""Errors raised by the service layer and mapped to HTTP responses in ``restops.main``."""


class ServiceError(Exception):
    """Base class for service-layer failures."""


class NotFoundError(ServiceError):
    """The requested entity does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ValidationError(ServiceError):
    """The request is well-formed but not allowed in the current state."""


def require_values(changes: dict, fields) -> None:
    """Reject partial updates that would clear a NOT NULL column."""
    cleared = sorted(f for f in fields if f in changes and changes[f] is None)
    if cleared:
        raise ValidationError(f"{', '.join(cleared)} may not be null")
