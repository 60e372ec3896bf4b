"""
Lexical/macro environment.

Same idea as a scope chain: each Environment maps name -> EnvEntry, lookup
walks inner -> outer, define overwrites (shadowing). A module's environment
has its imported names in a parent scope and its own definitions in a child
scope, so local definitions shadow imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from .bindings import BindingSet, MacroBinding

if TYPE_CHECKING:
    from ..resolve.module_id import ModuleId


class BindingKind(Enum):
    VALUE = "def"
    MACRO = "mac"


@dataclass(frozen=True)
class EnvEntry:
    """One name binding. `env` is the environment the name was defined in."""
    kind: BindingKind
    payload: Any
    env: Environment


class Environment:
    """
    One scope level with an optional parent.

    `module` is the module that owns this environment; children inherit it
    from their parent unless given their own.
    """

    def __init__(self, module: Optional[ModuleId] = None, parent: Optional[Environment] = None):
        self.parent = parent
        self._module = module
        self._entries: Dict[str, EnvEntry] = {}

    @property
    def module(self) -> Optional[ModuleId]:
        if self._module is not None:
            return self._module
        if self.parent is not None:
            return self.parent.module
        return None

    def child(self) -> Environment:
        return Environment(parent=self)

    def lookup(self, name: str) -> Optional[EnvEntry]:
        """Entry for name along the chain, innermost first."""
        if name in self._entries:
            return self._entries[name]
        if self.parent is not None:
            return self.parent.lookup(name)
        return None

    def define_value(self, name: str, value: Any) -> None:
        self._entries[name] = EnvEntry(BindingKind.VALUE, value, self)

    def define_macro(self, name: str, expander: Any, definition_env: Optional[Environment] = None) -> None:
        env = definition_env if definition_env is not None else self
        self._entries[name] = EnvEntry(BindingKind.MACRO, expander, env)

    def import_bindings(self, bindings: BindingSet) -> None:
        """Define every binding of an import result in this scope (last wins)."""
        for binding in bindings:
            if isinstance(binding, MacroBinding):
                self.define_macro(binding.name, binding.expander, binding.definition_env)
            else:
                self.define_value(binding.name, binding.value)

    def local_names(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"Environment(module={self.module}, names={list(self._entries)})"
