"""Exceptions raised by the RBAC services.

Routers translate these into HTTP responses; storage errors are not wrapped
and propagate unchanged.
"""


class TenantGateError(Exception):
    """Base exception for all TenantGate domain errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(TenantGateError):
    """Raised when an id-keyed lookup finds no record."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(TenantGateError):
    """Raised when input or a requested mutation violates an invariant."""

    pass


class ConflictError(ValidationError):
    """Raised when a uniqueness constraint would be violated."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class CycleError(ValidationError):
    """Raised when a reparent would make a menu its own ancestor."""

    pass


class HasChildrenError(ValidationError):
    """Raised when deleting a menu that still has children."""

    def __init__(self, menu_id: str) -> None:
        super().__init__(f"Menu {menu_id} has children, delete children first")
        self.menu_id = menu_id
