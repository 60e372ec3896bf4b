"""
modlink: name resolution for a module system.

Computes the bindings a module imports and exports, and the modules those
bindings depend on, from declarative import/export specifications.
"""

from .shared import (
    BindingSet, Environment, MacroBinding, ModlinkError, ResolutionError,
    SList, Symbol, ValueBinding, slist, sym,
)
from .resolve import (
    FileLoader, ModuleId, ResolutionEngine, default_registries,
)
from .loader import ModuleInfo, ModuleLoader

__version__ = "0.1.0"
