from __future__ import annotations


class CatalogError(Exception):
    pass


class ValidationError(CatalogError):
    """One or more field-level violations, keyed by field or item identifier."""

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed") -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors

    def full_messages(self) -> list[str]:
        return [f"{field} {message}" for field, messages in self.errors.items() for message in messages]


class NotFoundError(CatalogError):
    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} {identifier} not found")
        self.resource = resource
        self.identifier = identifier


def add_error(errors: dict[str, list[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)
