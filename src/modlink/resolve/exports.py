"""
Export combinators.

Exports are drawn from the module's own environment, not from another
module, so their dependencies are empty, except for `re-export:`, which is
"import on my behalf, then expose the result".
"""

import logging
from typing import Any, Optional

from ..shared.bindings import Binding, BindingSet, MacroBinding, ValueBinding
from ..shared.datum import location_of
from ..shared.environment import BindingKind, Environment
from ..shared.errors import UndefinedSymbol
from ..shared.source_location import SourceLocation
from .imports import parse_rename_pair
from .registry import ExportTag

logger = logging.getLogger(__name__)


def lookup_binding(
    env: Environment,
    name: str,
    label: str,
    context: Any = None,
    location: Optional[SourceLocation] = None,
) -> Binding:
    """Binding for `name` in `env`, labelled `label`."""
    entry = env.lookup(name)
    if entry is None:
        raise UndefinedSymbol(name, context, location or location_of(context))
    if entry.kind is BindingKind.MACRO:
        return MacroBinding(label, entry.payload, entry.env)
    return ValueBinding(label, entry.payload)


def rename_export(engine, env: Environment, *pairs: Any) -> BindingSet:
    bindings = []
    for pair in pairs:
        source, target = parse_rename_pair(pair)
        bindings.append(lookup_binding(env, source, target, pair))
    return BindingSet(tuple(bindings))


def re_export(engine, env: Environment, *specs: Any) -> BindingSet:
    context_module = env.module
    logger.debug(f"Re-exporting {len(specs)} import specs on behalf of {context_module}")
    return engine.resolve_many(specs, context_module)


EXPORT_COMBINATORS = {
    ExportTag.RENAME: rename_export,
    ExportTag.RE_EXPORT: re_export,
}
