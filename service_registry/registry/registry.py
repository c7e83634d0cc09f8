import logging
import threading
import time
from typing import Any, Dict, List, Optional, TypeVar, overload

from service_registry.registry.lookup_stats import LookupStats
from service_registry.registry.registry_errors import (
    AmbiguousError,
    NotFoundError,
    RegistryError,
)
from service_registry.registry.type_catalog import TypeCatalog, default_type_catalog
from service_registry.utilities.environment_variables import EnvironmentVariables

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Registry:
    """
    Type indexed store of service instances.

    Holds at most one instance per concrete type.  Instances are looked up by
    their concrete type, by any capability (protocol or abstract base class)
    they implement, or by any ancestor class.  A lookup succeeds only when
    exactly one stored instance matches.

    Single-key operations are safe to call from several threads.
    store_or_replace() is a lookup followed by a separate write and is not
    atomic, so wire up the registry from one thread before sharing it.
    """

    def __init__(
        self,
        *instances: Any,
        catalog: Optional[TypeCatalog] = None,
        stats_logging: Optional[bool] = None,
    ) -> None:
        """
        Create a registry

        Args:
            instances: initial instances, each stored under its own concrete type
            catalog: type catalog used for matching and name resolution
            stats_logging: time successful lookups.  Defaults to SERVICE_REGISTRY_STATS_LOGGING
        """
        self._registry: Dict[type[Any], Any] = {}
        self._lock: threading.RLock = threading.RLock()
        self._catalog: TypeCatalog = catalog or default_type_catalog
        self._stats_logging_enabled: bool = (
            stats_logging
            if stats_logging is not None
            else EnvironmentVariables().stats_logging_enabled
        )
        self._lookup_count: int = 0
        self._elapsed_lookup_time: float = 0.0

        for instance in instances:
            self._registry[type(instance)] = instance

    def enable_stats_logging(self) -> "Registry":
        self._stats_logging_enabled = True
        return self

    def store(self, instance: Any) -> "Registry":
        """Store an instance under its concrete type, replacing any instance of the same type"""
        with self._lock:
            self._registry[type(instance)] = instance
        logger.debug(f"Registry stored {self._catalog.qualified_name(type(instance))}")
        return self

    def store_or_replace(self, instance: Any, target: type[Any] | str) -> "Registry":
        """
        Store an instance, first removing the instance that get(target) currently returns

        Args:
            instance: the instance to store
            target: type or qualified name of the instance to replace

        Raises:
            AmbiguousError: if more than one stored instance matches target.  Nothing is changed.
        """
        replaced: bool = True
        existing: Any = None
        try:
            existing = self.get(target)
        except NotFoundError:
            replaced = False

        with self._lock:
            if replaced:
                self._registry.pop(type(existing), None)
            self._registry[type(instance)] = instance

        if replaced:
            logger.debug(
                f"Registry replaced {self._catalog.qualified_name(type(existing))}"
                f" with {self._catalog.qualified_name(type(instance))}"
            )
        return self

    @overload
    def get(self, target: type[T]) -> T: ...

    @overload
    def get(self, target: str) -> Any: ...

    def get(self, target: type[Any] | str) -> Any:
        """
        Find the single instance matching a class, capability or fully qualified name

        Args:
            target: a type, or the fully qualified name of one

        Raises:
            NotFoundError: if no stored instance matches
            AmbiguousError: if more than one stored instance matches
            TypeResolutionError: if a name cannot be resolved to a type
        """
        timed: bool = self._stats_logging_enabled
        start: float = time.perf_counter() if timed else 0.0

        query: str
        matches: List[Any]
        if isinstance(target, str):
            query = target
            matches = self._match_name(target)
        else:
            query = self._catalog.qualified_name(target)
            matches = self._match_type(target)

        if not matches:
            raise NotFoundError(query)
        if len(matches) > 1:
            raise AmbiguousError(query, matches)

        if timed:
            self._record_lookup(query, time.perf_counter() - start)
        return matches[0]

    def get_or_else(self, target: type[T] | str, fallback: T) -> T:
        try:
            return self.get(target)
        except RegistryError:
            return fallback

    def get_or_none(self, target: type[T] | str) -> Optional[T]:
        try:
            return self.get(target)
        except RegistryError:
            return None

    def contains(self, target: type[Any] | str) -> bool:
        try:
            self.get(target)
            return True
        except RegistryError:
            return False

    def missing(self, target: type[Any] | str) -> bool:
        return not self.contains(target)

    def flush(self) -> "Registry":
        with self._lock:
            self._registry.clear()
        logger.debug("Registry flushed")
        return self

    def clone(self) -> "Registry":
        """
        Copy the registry.  The copy has its own mapping but holds the same instances.
        Lookup statistics start afresh in the copy.
        """
        cloned: Registry = Registry(catalog=self._catalog)
        with self._lock:
            cloned._registry = dict(self._registry)
        return cloned

    def instances(self) -> List[Any]:
        return [instance for _, instance in self._snapshot()]

    @property
    def stats(self) -> LookupStats:
        with self._lock:
            return LookupStats(
                enabled=self._stats_logging_enabled,
                lookup_count=self._lookup_count,
                total_elapsed_seconds=self._elapsed_lookup_time,
            )

    def __getitem__(self, target: type[Any] | str) -> Any:
        return self.get(target)

    def __contains__(self, target: type[Any] | str) -> bool:
        return self.contains(target)

    def __len__(self) -> int:
        with self._lock:
            return len(self._registry)

    def __repr__(self) -> str:
        names: str = ", ".join(
            self._catalog.qualified_name(concrete) for concrete, _ in self._snapshot()
        )
        return f"Registry([{names}])"

    def _snapshot(self) -> List[tuple[type[Any], Any]]:
        with self._lock:
            return list(self._registry.items())

    def _match_type(self, target: type[Any]) -> List[Any]:
        capability: bool = self._catalog.is_capability(target)
        # keyed by identity so an instance matching several rules counts once
        matches: Dict[int, Any] = {}
        for concrete, instance in self._snapshot():
            if concrete is target:
                matches[id(instance)] = instance
            elif capability and self._catalog.implements(concrete, target):
                matches[id(instance)] = instance
            elif target in self._catalog.ancestors(concrete):
                matches[id(instance)] = instance
        return list(matches.values())

    def _match_name(self, name: str) -> List[Any]:
        target: type[Any] = self._catalog.resolve(name)
        target_name: str = self._catalog.qualified_name(target)
        capability: bool = self._catalog.is_capability(target)
        matches: Dict[int, Any] = {}
        for concrete, instance in self._snapshot():
            if capability:
                if self._catalog.implements(concrete, target):
                    matches[id(instance)] = instance
                continue
            lineage: tuple[type[Any], ...] = (concrete,) + self._catalog.ancestors(
                concrete
            )
            if any(self._catalog.qualified_name(t) == target_name for t in lineage):
                matches[id(instance)] = instance
        return list(matches.values())

    def _record_lookup(self, query: str, elapsed: float) -> None:
        with self._lock:
            self._lookup_count += 1
            self._elapsed_lookup_time += elapsed
            total: float = self._elapsed_lookup_time
        logger.info(
            f"Lookup of {query} took {elapsed * 1_000_000:.0f} us, total time {total * 1000:.0f} ms"
        )
