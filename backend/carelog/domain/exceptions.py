"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist (or is soft-deleted)."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class DomainValidationError(Exception):
    """Raised for malformed filters, patches or illegal state transitions."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class InvalidExportFormatError(DomainValidationError):
    """Raised when an export is requested in a format we cannot produce."""

    def __init__(self, export_format: str):
        self.export_format = export_format
        super().__init__(
            f"Unsupported export format '{export_format}'. Use csv or excel.",
            field="format",
        )


class BulkOperationError(Exception):
    """Raised when one item of an all-or-nothing batch fails.

    ``index`` is the zero-based position of the failing item and ``cause``
    the underlying domain error; the whole batch has been rolled back.
    """

    def __init__(self, entity_type: str, index: int, cause: Exception):
        self.entity_type = entity_type
        self.index = index
        self.cause = cause
        super().__init__(f"Bulk {entity_type} operation failed at item {index}: {cause}")


class AuthenticationRequiredError(Exception):
    """Raised when an operation needs an acting user and none was supplied."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class PermissionDeniedError(Exception):
    """Raised when the acting user may not perform the requested action."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Not allowed to {action}")


class PersistenceError(Exception):
    """Raised for store failures; the message never carries storage details."""

    def __init__(self, entity_type: str, operation: str):
        self.entity_type = entity_type
        self.operation = operation
        super().__init__(f"Failed to {operation} {entity_type}")
