"""
Module Loader

Reference module registry: reads module sources, resolves their import lists,
builds their environments and answers export queries for the engine.

Rust Pattern: rustc_metadata::loader

This class handles:
- Module identity (identify)
- Loading and caching ModuleInfo per module
- Export resolution per module (exports)
- Built-in pseudo-modules with fixed bindings
- Circular import detection
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from ..frontend.declaration import parse_module_declaration
from ..frontend.parser import Parser
from ..resolve.engine import ResolutionEngine
from ..resolve.module_id import BUILTIN_LOADER, FileLoader, Loader, ModuleId, module_context
from ..resolve.registry import Registries, default_registries
from ..shared.bindings import Binding, BindingSet
from ..shared.environment import BindingKind, Environment
from ..shared.errors import CircularImportError, ModlinkImplementationError
from ..utils.config import DEFAULT_LIB_BASE, MAX_LOADING_DEPTH
from .module_info import ModuleInfo

logger = logging.getLogger(__name__)


class ModuleLoader:
    """
    Module registry backed by FileLoaders.

    Args:
        root: Directory holding the application's modules
        lib_root: Directory `lib` references resolve into (defaults to root, sharing
            the application loader)
        source_overlay: In-memory sources for application module paths
        lib_overlay: In-memory sources for library module paths
        builtins: Built-in pseudo-modules, tag -> bindings; `(tag)` names them
        registries: Resolver registries to use instead of the defaults
        parser: Parser instance (auto-created if None)
    """

    def __init__(
        self,
        root: Path,
        lib_root: Optional[Path] = None,
        source_overlay: Optional[Dict[str, str]] = None,
        lib_overlay: Optional[Dict[str, str]] = None,
        builtins: Optional[Mapping[str, Iterable[Binding]]] = None,
        registries: Optional[Registries] = None,
        parser: Optional[Parser] = None,
    ):
        self.loader = FileLoader(root, source_overlay)
        # Same root and no separate overlay: share the loader so `util` and
        # "util" identify the same module.
        if lib_root is None and not lib_overlay:
            self.lib_loader = self.loader
        else:
            self.lib_loader = FileLoader(lib_root if lib_root is not None else root, lib_overlay)
        self.parser = parser if parser is not None else Parser()

        self.builtin_modules: Dict[ModuleId, BindingSet] = {}
        builtin_ids: Dict[str, ModuleId] = {}
        for tag, bindings in (builtins or {}).items():
            module_id = self.identify(BUILTIN_LOADER, "/" + tag)
            self.builtin_modules[module_id] = BindingSet(tuple(bindings))
            builtin_ids[tag] = module_id

        if registries is None:
            registries = default_registries(self.lib_loader, DEFAULT_LIB_BASE, builtin_ids)
        self.engine = ResolutionEngine(registries, self)

        self.loaded_modules: Dict[ModuleId, ModuleInfo] = {}
        self.loading_stack: List[ModuleId] = []
        # source name -> text, for rendering diagnostics
        self.sources: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Module registry protocol
    # ------------------------------------------------------------------

    def identify(self, loader: Loader, path: str) -> ModuleId:
        return ModuleId(loader, path)

    def exports(self, module_id: ModuleId) -> BindingSet:
        """Exported bindings of a module, resolved on first request."""
        if module_id in self.builtin_modules:
            return self.builtin_modules[module_id]

        info = self.load_module(module_id)
        if info.exports is not None:
            return info.exports

        self._push(module_id)
        try:
            with module_context(module_id):
                info.exports = self.engine.resolve_all_exports(info.declaration.exports, info.env)
        finally:
            self.loading_stack.pop()
        logger.debug(f"Resolved exports of {module_id}: {', '.join(info.exports.names())}")
        return info.exports

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _push(self, module_id: ModuleId) -> None:
        if module_id in self.loading_stack:
            raise CircularImportError(self.loading_stack + [module_id])
        if len(self.loading_stack) >= MAX_LOADING_DEPTH:
            stack_str = " -> ".join(str(m) for m in self.loading_stack[-10:])
            raise ModlinkImplementationError(
                f"Deep module nesting (depth {len(self.loading_stack)}): ...{stack_str}"
            )
        self.loading_stack.append(module_id)

    def load_module(self, module_id: ModuleId) -> ModuleInfo:
        """
        Load a module: parse it, resolve its imports, build its environment.

        Raises:
            ModuleSourceNotFound: If the module has no source
            CircularImportError: If the module is reached again while loading
        """
        if module_id in self.loaded_modules:
            return self.loaded_modules[module_id]

        self._push(module_id)
        try:
            loader = module_id.loader
            source = loader.read_source(module_id.path)
            source_name = loader.source_name(module_id.path)
            self.sources[source_name] = source
            declaration = parse_module_declaration(self.parser.parse(source, source_name))

            with module_context(module_id):
                imported = self.engine.resolve_all_imports(declaration.imports, module_id)

            import_env = Environment(module=module_id)
            import_env.import_bindings(imported)
            env = import_env.child()
            for definition in declaration.definitions:
                if definition.kind is BindingKind.MACRO:
                    env.define_macro(definition.name, definition.payload)
                else:
                    env.define_value(definition.name, definition.payload)

            info = ModuleInfo(
                module_id=module_id,
                source_name=source_name,
                declaration=declaration,
                imports=imported,
                env=env,
            )
            self.loaded_modules[module_id] = info
            logger.debug(f"Loaded module {module_id}: {len(imported)} imports, "
                         f"{len(declaration.definitions)} definitions")
            return info
        finally:
            self.loading_stack.pop()

    def resolve(self, module_id: ModuleId) -> ModuleInfo:
        """Load a module and resolve its exports in a single resolution pass."""
        with self.engine.cache.scope():
            info = self.load_module(module_id)
            self.exports(module_id)
        return info

    def resolve_path(self, path: str) -> ModuleInfo:
        """resolve() for an application module path such as "main" or "/app/main"."""
        return self.resolve(self.identify(self.loader, self.loader.absolutize(path)))

    def is_module_loaded(self, module_id: ModuleId) -> bool:
        return module_id in self.loaded_modules
