import logging
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request

from service_registry.registry.registry import Registry
from service_registry.registry.type_catalog import TypeCatalog

logger = logging.getLogger(__name__)


def attach_registry(app: FastAPI, registry: Registry) -> FastAPI:
    """Make the registry available to route dependencies of this app"""
    app.state.registry = registry
    logger.info(f"Attached {registry!r} to app {app.title}")
    return app


def get_registry(request: Request) -> Registry:
    """helper function to get the registry attached to the app"""
    registry: Registry | None = getattr(request.app.state, "registry", None)
    if registry is None:
        raise RuntimeError("No registry attached to the app. Call attach_registry() first")
    assert isinstance(registry, Registry), type(registry)
    return registry


class RegistryDependency:
    """
    FastAPI dependency that looks up a service in the attached registry

    Usage:
        manager: Annotated[ModelManager, Depends(RegistryDependency(ModelManager))]
    """

    def __init__(self, target: type[Any] | str) -> None:
        self.target: type[Any] | str = target

    def __call__(
        self, registry: Annotated[Registry, Depends(get_registry)]
    ) -> Any:
        return registry.get(self.target)

    def __repr__(self) -> str:
        target_name: str = (
            self.target
            if isinstance(self.target, str)
            else TypeCatalog.qualified_name(self.target)
        )
        return f"RegistryDependency({target_name})"
