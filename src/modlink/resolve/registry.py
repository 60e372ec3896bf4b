"""
Resolver registries.

Three independent tag -> handler tables: module-identifier resolvers, import
combinators and export combinators. They are filled at bring-up, frozen, and
handed to the ResolutionEngine; lookups of unknown tags fail loudly.

Handler signatures (the engine is always passed first):
    module resolver:    handler(engine, loader, current_path, *args) -> List[ModuleId]
    import combinator:  handler(engine, context_module, *args) -> BindingSet
    export combinator:  handler(engine, env, *args) -> BindingSet
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

from ..shared.errors import RegistryFrozenError, ResolverNotFound
from ..utils.config import DEFAULT_LIB_BASE

logger = logging.getLogger(__name__)

Handler = Callable[..., object]


class ModuleTag(Enum):
    HERE = "here"
    LIB = "lib"


class ImportTag(Enum):
    ONLY = "only:"
    EXCEPT = "except:"
    PREFIX = "prefix:"
    RENAME = "rename:"


class ExportTag(Enum):
    RENAME = "rename:"
    RE_EXPORT = "re-export:"


class ResolverRegistry:
    """
    One tag -> handler table.

    Registration is last-write-wins while the registry is open; after
    freeze() the table is read-only.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._handlers: Dict[str, Handler] = {}
        self._frozen = False

    def register(self, tag: Union[str, Enum], handler: Handler) -> None:
        name = tag.value if isinstance(tag, Enum) else tag
        if self._frozen:
            raise RegistryFrozenError(self.kind, name)
        if name in self._handlers:
            logger.warning(f"{self.kind} resolver `{name}` registered twice; last registration wins")
        self._handlers[name] = handler

    def freeze(self) -> "ResolverRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, tag: str, value: object = None) -> Handler:
        handler = self._handlers.get(tag)
        if handler is None:
            raise ResolverNotFound(tag, self.kind, value)
        return handler

    def tags(self) -> Tuple[str, ...]:
        return tuple(self._handlers)

    def __contains__(self, tag: object) -> bool:
        return tag in self._handlers


@dataclass(frozen=True)
class Registries:
    """The three registries the engine consults."""
    modules: ResolverRegistry
    imports: ResolverRegistry
    exports: ResolverRegistry

    def freeze(self) -> "Registries":
        self.modules.freeze()
        self.imports.freeze()
        self.exports.freeze()
        return self


def empty_registries() -> Registries:
    return Registries(
        modules=ResolverRegistry("module"),
        imports=ResolverRegistry("import"),
        exports=ResolverRegistry("export"),
    )


def register_builtins(
    registries: Registries,
    lib_loader,
    lib_base: str = DEFAULT_LIB_BASE,
    builtins: Optional[Mapping[str, object]] = None,
) -> Registries:
    """Install the built-in resolvers and combinators into open registries."""
    from .module_resolvers import here_resolver, make_package_resolver, make_singleton_resolver
    from .imports import IMPORT_COMBINATORS
    from .exports import EXPORT_COMBINATORS

    registries.modules.register(ModuleTag.HERE, here_resolver)
    registries.modules.register(ModuleTag.LIB, make_package_resolver(lib_loader, lib_base))
    for tag, module_id in (builtins or {}).items():
        registries.modules.register(tag, make_singleton_resolver(module_id))

    _register_all(registries.imports, IMPORT_COMBINATORS.items())
    _register_all(registries.exports, EXPORT_COMBINATORS.items())
    return registries


def _register_all(registry: ResolverRegistry, entries: Iterable[Tuple[Enum, Handler]]) -> None:
    for tag, handler in entries:
        registry.register(tag, handler)


def default_registries(
    lib_loader,
    lib_base: str = DEFAULT_LIB_BASE,
    builtins: Optional[Mapping[str, object]] = None,
) -> Registries:
    """
    Built-in registries, frozen.

    Args:
        lib_loader: Loader used by the `lib` resolver
        lib_base: Base path `lib` references are absolutized against
        builtins: Extra module tags mapped to fixed ModuleIds (singleton resolvers)
    """
    return register_builtins(empty_registries(), lib_loader, lib_base, builtins).freeze()
