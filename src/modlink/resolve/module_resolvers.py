"""
Built-in module-identifier resolvers.

    (here helpers util)  -> helpers and util next to the current module
    (lib "srfi/1")       -> srfi/1 under the library base
    (core)               -> a fixed built-in pseudo-module (singleton resolver)
"""

import logging
from typing import Any, List, Optional

from ..shared.datum import Symbol, slist, sym
from ..shared.errors import InvalidModuleIdentifier, NoModuleContext
from ..utils.config import PATH_SEPARATOR
from .module_id import Loader, ModuleId

logger = logging.getLogger(__name__)


def _reference_text(value: Any) -> str:
    if isinstance(value, Symbol):
        return value.name
    if isinstance(value, str):
        return value
    raise InvalidModuleIdentifier(value)


def here_resolver(engine, loader: Optional[Loader], current_path: Optional[str], *ids: Any) -> List[ModuleId]:
    """One module per id, each absolutized against the current module's path."""
    if loader is None:
        raise NoModuleContext(slist(sym("here"), *ids))
    modules = []
    for ref in ids:
        path = loader.absolutize(_reference_text(ref), current_path)
        modules.append(engine.identify(loader, path))
    return modules


def make_package_resolver(package_loader: Loader, base_path: str):
    """
    Resolver for references rooted at a fixed package directory.

    Ignores the ambient loader and path: every argument is absolutized against
    `base_path` with `package_loader`.
    """
    if not base_path.endswith(PATH_SEPARATOR):
        base_path = base_path + PATH_SEPARATOR

    def package_resolver(engine, loader, current_path, *ids: Any) -> List[ModuleId]:
        return [
            engine.identify(package_loader, package_loader.absolutize(_reference_text(ref), base_path))
            for ref in ids
        ]

    package_resolver.base_path = base_path
    return package_resolver


def make_singleton_resolver(module_id: ModuleId):
    """Resolver that always yields `module_id`, whatever it is given."""

    def singleton_resolver(engine, loader, current_path, *args: Any) -> List[ModuleId]:
        return [module_id]

    return singleton_resolver
