"""
Shared data types: datums, bindings, environments, errors.
"""

from .source_location import SourceLocation
from .datum import Symbol, SList, sym, slist, write_datum
from .bindings import Binding, BindingSet, MacroBinding, ValueBinding
from .environment import BindingKind, EnvEntry, Environment
from .errors import (
    Error, ErrorReporter, ModlinkError, ResolutionError, ModlinkImplementationError,
    ResolverNotFound, InvalidModuleIdentifier, AmbiguousOrMissingModule,
    UndefinedSymbol, NameCollision, InvalidRenameForm, InvalidPrefix,
    InvalidExportDeclaration, InvalidSymbolName, NoModuleContext,
    CircularImportError, InvalidModuleDeclaration, ModuleSourceNotFound,
    RegistryFrozenError,
)
