"""
Import combinators.

Each combinator resolves its nested import spec first and derives a new
BindingSet from it; the nested result is never modified. Dependencies pass
through unchanged: filtering or renaming names does not change which modules
must be loaded.

    (only: helpers a b)          keep a and b, in that order
    (except: helpers a)          everything but a
    (prefix: helpers h-)         a -> h-a for every binding ('h- also accepted)
    (rename: helpers (a x))      a -> x
"""

import logging
from typing import Any, List, Tuple

from ..shared.bindings import Binding, BindingSet
from ..shared.datum import SList, Symbol, form_tag, is_form, location_of, sym
from ..shared.errors import (
    InvalidModuleIdentifier,
    InvalidPrefix,
    InvalidRenameForm,
    InvalidSymbolName,
    NameCollision,
    UndefinedSymbol,
)
from .registry import ImportTag

logger = logging.getLogger(__name__)


def _context(tag: ImportTag, args: Tuple[Any, ...]) -> SList:
    """Rebuild the combinator form for error messages."""
    return SList((sym(tag.value),) + args, location_of(args[0]) if args else None)


def _symbol_name(value: Any, context: Any) -> str:
    if not isinstance(value, Symbol):
        raise InvalidSymbolName(value, context)
    return value.name


def parse_rename_pair(pair: Any) -> Tuple[str, str]:
    """(from to) -> ("from", "to")"""
    if not is_form(pair) or len(pair) != 2:
        raise InvalidRenameForm(pair)
    source, target = pair
    if not isinstance(source, Symbol) or not isinstance(target, Symbol):
        raise InvalidRenameForm(pair)
    return source.name, target.name


def resolve_nested(engine, spec: Any, context_module) -> BindingSet:
    """
    Bindings of a combinator's nested spec.

    Nested combinator forms recurse; a plain module reference must name
    exactly one module.
    """
    if engine.is_import_combinator(spec):
        return engine.resolve_import(spec, context_module)
    module_id = engine.resolve_one_module(spec, context_module)
    exports = engine.module_exports(module_id)
    return BindingSet(exports.bindings, (module_id,))


def only_combinator(engine, context_module, *args: Any) -> BindingSet:
    context = _context(ImportTag.ONLY, args)
    if not args:
        raise InvalidModuleIdentifier(context)
    mod_spec, names = args[0], args[1:]
    nested = resolve_nested(engine, mod_spec, context_module)
    kept: List[Binding] = []
    for name in names:
        text = _symbol_name(name, context)
        binding = nested.get(text)
        if binding is None:
            raise UndefinedSymbol(text, context, location_of(name))
        kept.append(binding)
    return nested.with_bindings(kept)


def except_combinator(engine, context_module, *args: Any) -> BindingSet:
    context = _context(ImportTag.EXCEPT, args)
    if not args:
        raise InvalidModuleIdentifier(context)
    mod_spec, names = args[0], args[1:]
    nested = resolve_nested(engine, mod_spec, context_module)
    excluded = set()
    for name in names:
        text = _symbol_name(name, context)
        if text not in nested:
            raise UndefinedSymbol(text, context, location_of(name))
        excluded.add(text)
    return nested.with_bindings(b for b in nested if b.name not in excluded)


def prefix_combinator(engine, context_module, *args: Any) -> BindingSet:
    context = _context(ImportTag.PREFIX, args)
    if len(args) != 2:
        raise InvalidPrefix(context)
    mod_spec, prefix = args
    # 'px- reads as (quote px-)
    if form_tag(prefix) == "quote" and len(prefix) == 2:
        prefix = prefix[1]
    if not isinstance(prefix, Symbol):
        raise InvalidPrefix(prefix)
    nested = resolve_nested(engine, mod_spec, context_module)
    return nested.with_bindings(b.renamed(prefix.name + b.name) for b in nested)


def rename_combinator(engine, context_module, *args: Any) -> BindingSet:
    """
    Pairs apply in order; each one checks the set as it stands after the
    previous pairs, so (a a) and swaps like (a b) (b a) are collisions.
    """
    context = _context(ImportTag.RENAME, args)
    if not args:
        raise InvalidModuleIdentifier(context)
    mod_spec, pairs = args[0], args[1:]
    nested = resolve_nested(engine, mod_spec, context_module)
    current: List[Binding] = list(nested.bindings)
    for pair in pairs:
        source, target = parse_rename_pair(pair)
        names = {b.name for b in current}
        if source not in names:
            raise UndefinedSymbol(source, context, location_of(pair))
        if target in names:
            raise NameCollision(target, context, location_of(pair))
        current = [b.renamed(target) if b.name == source else b for b in current]
    return nested.with_bindings(current)


IMPORT_COMBINATORS = {
    ImportTag.ONLY: only_combinator,
    ImportTag.EXCEPT: except_combinator,
    ImportTag.PREFIX: prefix_combinator,
    ImportTag.RENAME: rename_combinator,
}
