import importlib
import logging
import threading
from abc import ABCMeta
from typing import Any, Dict, Optional, TypeVar

from service_registry.registry.registry_errors import TypeResolutionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TypeCatalog:
    """
    Answers the type questions the registry asks: is a type a capability,
    does a concrete type implement a capability, what are its ancestors,
    and which type does a fully qualified name refer to.
    """

    def __init__(self) -> None:
        self._names: Dict[str, type[Any]] = {}
        self._lock: threading.Lock = threading.Lock()

    @staticmethod
    def qualified_name(type_: type[Any]) -> str:
        return f"{type_.__module__}.{type_.__qualname__}"

    @staticmethod
    def is_capability(type_: type[Any]) -> bool:
        """
        Protocols and abstract base classes are capabilities, anything else is a plain class

        Args:
            type_: the type to classify
        """
        if getattr(type_, "_is_protocol", False):
            return True
        return isinstance(type_, ABCMeta)

    @staticmethod
    def implements(concrete: type[Any], capability: type[Any]) -> bool:
        """
        Transitive capability check.  issubclass() covers nominal subclasses,
        virtual subclasses registered on an ABC and runtime checkable protocols.
        """
        try:
            return issubclass(concrete, capability)
        except TypeError:
            # protocols that are not runtime checkable only match nominally
            return capability in concrete.__mro__

    @staticmethod
    def ancestors(concrete: type[Any]) -> tuple[type[Any], ...]:
        """Strict superclasses in method resolution order, without `object`"""
        return tuple(
            ancestor for ancestor in concrete.__mro__[1:] if ancestor is not object
        )

    def register(self, type_: type[T], name: Optional[str] = None) -> type[T]:
        """
        Register a type under an explicit name so resolve() can find it without importing.
        Returns the type, so this can be used as a class decorator.

        Args:
            type_: the type to register
            name: the name to register it under, defaults to the qualified name
        """
        key: str = name or self.qualified_name(type_)
        with self._lock:
            self._names[key] = type_
        logger.debug(f"TypeCatalog registered {key}")
        return type_

    def resolve(self, name: str) -> type[Any]:
        """
        Resolve a fully qualified name to a type

        Args:
            name: dotted name such as `package.module.ClassName`

        Returns:
            The type the name refers to

        Raises:
            TypeResolutionError: if the name does not refer to a known type
        """
        if not name:
            raise TypeResolutionError(name)

        with self._lock:
            registered: Optional[type[Any]] = self._names.get(name)
        if registered is not None:
            return registered

        parts: list[str] = name.split(".")
        # relative or malformed names never reach importlib
        if "" in parts:
            raise TypeResolutionError(name)
        for index in range(len(parts) - 1, 0, -1):
            module_name: str = ".".join(parts[:index])
            try:
                found: Any = importlib.import_module(module_name)
            except ImportError:
                continue
            for attribute in parts[index:]:
                found = getattr(found, attribute, None)
                if found is None:
                    raise TypeResolutionError(name)
            if not isinstance(found, type):
                raise TypeResolutionError(name)
            return found

        raise TypeResolutionError(name)


default_type_catalog: TypeCatalog = TypeCatalog()
