"""
Bindings and Binding Sets

Pure data: what a module makes visible, and which modules must be loaded for
those names to be usable. No resolution logic lives here.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Optional, Tuple, Union

if TYPE_CHECKING:
    from ..resolve.module_id import ModuleId
    from .environment import Environment


@dataclass(frozen=True)
class ValueBinding:
    """A name bound to a value definition."""
    name: str
    value: Any

    @property
    def kind(self) -> str:
        return "def"

    def renamed(self, new_name: str) -> "ValueBinding":
        return replace(self, name=new_name)


@dataclass(frozen=True)
class MacroBinding:
    """A name bound to a macro expander, closed over its definition environment."""
    name: str
    expander: Any
    definition_env: "Environment"

    @property
    def kind(self) -> str:
        return "mac"

    def renamed(self, new_name: str) -> "MacroBinding":
        return replace(self, name=new_name)


Binding = Union[ValueBinding, MacroBinding]


def _unique(modules: Iterable["ModuleId"]) -> Tuple["ModuleId", ...]:
    seen = []
    for module in modules:
        if module not in seen:
            seen.append(module)
    return tuple(seen)


@dataclass(frozen=True)
class BindingSet:
    """
    Ordered bindings plus the modules they depend on.

    Bindings keep insertion order and may hold duplicate names when several
    modules are aggregated; name lookup is last-wins. Dependencies are kept in
    first-seen order without duplicates.
    """
    bindings: Tuple[Binding, ...] = ()
    dependencies: Tuple["ModuleId", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "bindings", tuple(self.bindings))
        object.__setattr__(self, "dependencies", _unique(self.dependencies))

    @classmethod
    def empty(cls) -> "BindingSet":
        return cls()

    @classmethod
    def concat_all(cls, sets: Iterable["BindingSet"]) -> "BindingSet":
        bindings = []
        dependencies = []
        for binding_set in sets:
            bindings.extend(binding_set.bindings)
            dependencies.extend(binding_set.dependencies)
        return cls(tuple(bindings), tuple(dependencies))

    def concat(self, other: "BindingSet") -> "BindingSet":
        return BindingSet.concat_all((self, other))

    def with_bindings(self, bindings: Iterable[Binding]) -> "BindingSet":
        """Same dependencies, new bindings."""
        return BindingSet(tuple(bindings), self.dependencies)

    def names(self) -> Tuple[str, ...]:
        return tuple(b.name for b in self.bindings)

    def get(self, name: str) -> Optional[Binding]:
        for binding in reversed(self.bindings):
            if binding.name == name:
                return binding
        return None

    def __contains__(self, name: object) -> bool:
        return any(b.name == name for b in self.bindings)

    def __iter__(self) -> Iterator[Binding]:
        return iter(self.bindings)

    def __len__(self) -> int:
        return len(self.bindings)
