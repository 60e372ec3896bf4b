"""
Module System Types

Pure data about a loaded module; no loading logic.

Rust Pattern: rustc_resolve::module::Module
"""

from dataclasses import dataclass
from typing import Optional

from ..frontend.declaration import ModuleDeclaration
from ..resolve.module_id import ModuleId
from ..shared.bindings import BindingSet
from ..shared.environment import Environment


@dataclass
class ModuleInfo:
    """
    Information about a loaded module.

    - module_id: identity of the module
    - source_name: file name used in source locations
    - declaration: its imports, exports, definitions and body
    - imports: resolved import list
    - env: module scope (definitions), whose parent holds the imports
    - exports: resolved export list, filled in on first request
    """
    module_id: ModuleId
    source_name: str
    declaration: ModuleDeclaration
    imports: BindingSet
    env: Environment
    exports: Optional[BindingSet] = None

    def __str__(self) -> str:
        exported = "unresolved" if self.exports is None else f"{len(self.exports)} exports"
        return f"Module({self.module_id}, {len(self.imports)} imports, {exported})"
