"""Exception hierarchy for recoverable and fatal tracker errors."""

from __future__ import annotations


class GroceryTrackerError(Exception):
    """Base class for all errors raised by the tracker."""


class ValidationError(GroceryTrackerError):
    """Input rejected before any persistence attempt."""


class DuplicateNameError(GroceryTrackerError):
    """A category, item or market with the same name already exists."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"A {kind} with this name already exists: {name}")
        self.kind = kind
        self.name = name


class ReservedCategoryError(GroceryTrackerError):
    """Attempt to create, rename or delete the reserved Pfand category."""


class NotFoundError(GroceryTrackerError):
    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind.capitalize()} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class AuthenticationError(GroceryTrackerError):
    """No authenticated session is available."""


class SchemaError(GroceryTrackerError):
    """Persisted data has a shape no decoder understands."""


class MigrationAlreadyCompletedError(GroceryTrackerError):
    """Local data was already migrated to the remote gateway."""


class GatewayError(GroceryTrackerError):
    """The remote gateway rejected a request for a reason other than a duplicate."""
