"""Name resolution: module identifiers, import/export combinators, registries."""

from .module_id import (
    BUILTIN_LOADER, BuiltinLoader, FileLoader, Loader, ModuleId,
    current_loader, current_module_path, loader_context, module_context,
)
from .registry import (
    ExportTag, ImportTag, ModuleTag, Registries, ResolverRegistry,
    default_registries, empty_registries, register_builtins,
)
from .cache import ResolutionCache
from .engine import ModuleRegistry, ResolutionEngine

__all__ = [
    'BUILTIN_LOADER',
    'BuiltinLoader',
    'FileLoader',
    'Loader',
    'ModuleId',
    'current_loader',
    'current_module_path',
    'loader_context',
    'module_context',
    'ExportTag',
    'ImportTag',
    'ModuleTag',
    'Registries',
    'ResolverRegistry',
    'default_registries',
    'empty_registries',
    'register_builtins',
    'ResolutionCache',
    'ModuleRegistry',
    'ResolutionEngine',
]
