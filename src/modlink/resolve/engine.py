"""
Resolution Engine

Rust Pattern: rustc_resolve::imports::ImportResolver

Turns import and export specifications into BindingSets. The engine owns the
registries it was built with (frozen) and one ResolutionCache; every public
entry point runs inside a cache scope, so a module's exports are fetched from
the module registry at most once per resolution pass no matter how many specs
reference it.
"""

import logging
from typing import Any, Iterable, List, Optional, Protocol

from ..shared.bindings import BindingSet
from ..shared.datum import Symbol, form_tag, split_form
from ..shared.environment import Environment
from ..shared.errors import (
    AmbiguousOrMissingModule,
    InvalidExportDeclaration,
    InvalidModuleIdentifier,
)
from .cache import ResolutionCache
from .exports import lookup_binding
from .module_id import Loader, ModuleId, current_loader, current_module_path
from .registry import ModuleTag, Registries

logger = logging.getLogger(__name__)


class ModuleRegistry(Protocol):
    """What the engine needs from the module system."""

    def identify(self, loader: Loader, path: str) -> ModuleId:
        ...

    def exports(self, module_id: ModuleId) -> BindingSet:
        ...


class ResolutionEngine:
    """
    Import/export resolution over a fixed set of registries.

    Args:
        registries: Frozen resolver registries (see registry.default_registries)
        module_registry: Source of module identities and module exports
    """

    def __init__(self, registries: Registries, module_registry: ModuleRegistry):
        if not (registries.modules.frozen and registries.imports.frozen and registries.exports.frozen):
            registries.freeze()
        self.registries = registries
        self.module_registry = module_registry
        self.cache = ResolutionCache()

    # ------------------------------------------------------------------
    # Module identifiers
    # ------------------------------------------------------------------

    def identify(self, loader: Loader, path: str) -> ModuleId:
        return self.module_registry.identify(loader, path)

    def resolve_module(self, ref: Any, context_module: Optional[ModuleId] = None) -> List[ModuleId]:
        """Resolve a module reference to one or more module identifiers."""
        if isinstance(ref, ModuleId):
            return [ref]
        if isinstance(ref, Symbol):
            tag, args = ModuleTag.HERE.value, (ref,)
        elif isinstance(ref, str):
            tag, args = ModuleTag.LIB.value, (ref,)
        elif form_tag(ref) is not None:
            tag, args = split_form(ref)
        else:
            raise InvalidModuleIdentifier(ref)

        handler = self.registries.modules.lookup(tag, ref)
        if context_module is not None:
            loader, current_path = context_module.loader, context_module.path
        else:
            loader, current_path = current_loader(), current_module_path()
        modules = list(handler(self, loader, current_path, *args))
        logger.debug(f"Module reference {tag} {args} -> {[str(m) for m in modules]}")
        return modules

    def resolve_one_module(self, ref: Any, context_module: Optional[ModuleId] = None) -> ModuleId:
        modules = self.resolve_module(ref, context_module)
        if len(modules) != 1:
            raise AmbiguousOrMissingModule(ref, len(modules))
        return modules[0]

    def module_exports(self, module_id: ModuleId) -> BindingSet:
        """Exports of a module, memoized for the current resolution pass."""
        with self.cache.scope():
            return self.cache.module_exports(module_id, self.module_registry.exports)

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def is_import_combinator(self, spec: Any) -> bool:
        tag = form_tag(spec)
        return tag is not None and tag in self.registries.imports

    def resolve_import(self, spec: Any, context_module: Optional[ModuleId] = None) -> BindingSet:
        with self.cache.scope():
            if self.is_import_combinator(spec):
                tag, args = split_form(spec)
                logger.debug(f"Dispatching import combinator {tag}")
                return self.registries.imports.lookup(tag)(self, context_module, *args)

            modules = self.resolve_module(spec, context_module)
            return BindingSet.concat_all(
                BindingSet(self.module_exports(m).bindings, (m,)) for m in modules
            )

    def resolve_many(self, specs: Iterable[Any], context_module: Optional[ModuleId] = None) -> BindingSet:
        with self.cache.scope():
            return BindingSet.concat_all([self.resolve_import(s, context_module) for s in specs])

    def resolve_all_imports(self, specs: Iterable[Any], context_module: Optional[ModuleId] = None) -> BindingSet:
        """Entry point: a module's whole import list."""
        return self.resolve_many(specs, context_module)

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------

    def resolve_export(self, spec: Any, env: Environment) -> BindingSet:
        with self.cache.scope():
            if isinstance(spec, Symbol):
                return BindingSet((lookup_binding(env, spec.name, spec.name, location=spec.location),))
            if form_tag(spec) is not None:
                tag, args = split_form(spec)
                handler = self.registries.exports.lookup(tag, spec)
                logger.debug(f"Dispatching export combinator {tag}")
                return handler(self, env, *args)
            raise InvalidExportDeclaration(spec)

    def resolve_all_exports(self, specs: Iterable[Any], env: Environment) -> BindingSet:
        """Entry point: a module's whole export list."""
        with self.cache.scope():
            return BindingSet.concat_all([self.resolve_export(s, env) for s in specs])
