from typing import Any, Sequence


class RegistryError(Exception):
    """Base exception for registry errors"""


class NotFoundError(RegistryError):
    """Raised when nothing in the registry matches a query"""

    def __init__(self, query: str) -> None:
        self.query: str = query
        super().__init__(f"Class or interface `{query}` is not in the registry")


class AmbiguousError(RegistryError):
    """Raised when more than one instance in the registry matches a query"""

    def __init__(self, query: str, matches: Sequence[Any]) -> None:
        self.query: str = query
        self.matches: list[Any] = list(matches)
        described: str = ", ".join(repr(match) for match in self.matches)
        super().__init__(
            f"Class or interface `{query}` is in the registry multiple times - {described}"
        )


class TypeResolutionError(RegistryError):
    """Raised when a qualified name cannot be resolved to a type"""

    def __init__(self, name: str) -> None:
        self.name: str = name
        super().__init__(f"Unable to resolve `{name}` to a type")
