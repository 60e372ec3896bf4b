"""
Datum types

Specifications are plain data: symbols, strings, numbers and composed forms.
The reader produces these; tests and embedding code may build them by hand.

    (only: (except: helpers a) b)
    -> SList((Symbol('only:'), SList((Symbol('except:'), Symbol('helpers'), Symbol('a'))), Symbol('b')))
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Tuple

from .source_location import SourceLocation


@dataclass(frozen=True)
class Symbol:
    """A bare name. Equality and hashing ignore the source location."""
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.name


class SList(tuple):
    """
    Composed form: a tuple that remembers where it was read from.

    Plain tuples and lists are accepted everywhere an SList is; the subclass
    only exists so diagnostics can point at the offending form.
    """

    location: Optional[SourceLocation]

    def __new__(cls, items: Iterable[Any] = (), location: Optional[SourceLocation] = None):
        obj = super().__new__(cls, items)
        obj.location = location
        return obj

    def __repr__(self) -> str:
        return f"SList({tuple.__repr__(self)})"


def sym(name: str) -> Symbol:
    """Shorthand constructor for symbols."""
    return Symbol(name)


def slist(*items: Any) -> SList:
    """Shorthand constructor for forms: slist(sym('only:'), sym('m'), sym('a'))."""
    return SList(items)


def is_form(value: Any) -> bool:
    """True for composed forms (SList, tuple or list)."""
    return isinstance(value, (tuple, list))


def form_tag(value: Any) -> Optional[str]:
    """Tag name of a tagged form, or None if value is not a tagged form."""
    if is_form(value) and len(value) > 0 and isinstance(value[0], Symbol):
        return value[0].name
    return None


def split_form(value: Any) -> Tuple[str, Tuple[Any, ...]]:
    """Split a tagged form into (tag, args). Caller checks form_tag() first."""
    return value[0].name, tuple(value[1:])


def location_of(value: Any) -> Optional[SourceLocation]:
    """Source location of a datum, when the reader attached one."""
    return getattr(value, "location", None)


def write_datum(value: Any) -> str:
    """Render a datum back to S-expression text (for messages and the CLI)."""
    if isinstance(value, Symbol):
        return value.name
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if is_form(value):
        return "(" + " ".join(write_datum(item) for item in value) + ")"
    return str(value)
