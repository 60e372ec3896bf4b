"""
Module declarations.

Interprets the top-level forms of a module source:

    (import spec ...)                    import specs, in order
    (export spec ...)                    export specs, in order
    (define name expr)                   value binding
    (define (name . params) body ...)    value binding (procedure shorthand)
    (define-syntax name expander)        macro binding
    (define-macro (name . params) ...)   macro binding

Anything else is body. Bodies are never evaluated here; definitions keep the
unevaluated datum as their value or expander.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List

from ..shared.datum import Symbol, form_tag, is_form
from ..shared.environment import BindingKind
from ..shared.errors import InvalidModuleDeclaration

logger = logging.getLogger(__name__)

IMPORT_FORM = "import"
EXPORT_FORM = "export"
VALUE_DEFINITION_FORMS = ("define",)
MACRO_DEFINITION_FORMS = ("define-syntax", "define-macro")


@dataclass(frozen=True)
class Definition:
    """One top-level definition: name, kind, and the unevaluated defining datum."""
    name: str
    kind: BindingKind
    payload: Any


@dataclass
class ModuleDeclaration:
    imports: List[Any] = field(default_factory=list)
    exports: List[Any] = field(default_factory=list)
    definitions: List[Definition] = field(default_factory=list)
    body: List[Any] = field(default_factory=list)

    def __str__(self) -> str:
        return (f"ModuleDeclaration({len(self.imports)} imports, {len(self.exports)} exports, "
                f"{len(self.definitions)} definitions)")


def _definition(form: Any, kind: BindingKind) -> Definition:
    if len(form) < 2:
        raise InvalidModuleDeclaration(form, "definition needs a name")
    target = form[1]
    if isinstance(target, Symbol):
        if len(form) != 3:
            raise InvalidModuleDeclaration(form, f"expected ({form[0]} name expr)")
        return Definition(target.name, kind, form[2])
    if is_form(target) and len(target) > 0 and isinstance(target[0], Symbol):
        return Definition(target[0].name, kind, form)
    raise InvalidModuleDeclaration(form, "definition name must be a symbol")


def parse_module_declaration(datums: List[Any]) -> ModuleDeclaration:
    """Sort a module's top-level datums into imports, exports, definitions and body."""
    declaration = ModuleDeclaration()
    for datum in datums:
        tag = form_tag(datum)
        if tag == IMPORT_FORM:
            declaration.imports.extend(datum[1:])
        elif tag == EXPORT_FORM:
            declaration.exports.extend(datum[1:])
        elif tag in VALUE_DEFINITION_FORMS:
            declaration.definitions.append(_definition(datum, BindingKind.VALUE))
        elif tag in MACRO_DEFINITION_FORMS:
            declaration.definitions.append(_definition(datum, BindingKind.MACRO))
        else:
            logger.debug(f"Keeping body form {tag or type(datum).__name__} unevaluated")
            declaration.body.append(datum)
    return declaration
