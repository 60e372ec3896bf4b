"""
Resolution cache scope.

One resolution pass (a module's full import and export lists) shares one memo
table keyed by ModuleId. The scope is re-entrant: the first enter opens it,
nested enters reuse it, and the matching outermost exit drops it.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Dict, Generator, Optional

from ..shared.bindings import BindingSet
from ..shared.errors import ModlinkImplementationError
from .module_id import ModuleId

logger = logging.getLogger(__name__)


class ResolutionCache:
    def __init__(self) -> None:
        self._entries: Optional[Dict[ModuleId, BindingSet]] = None
        self._depth = 0
        self.hits = 0
        self.misses = 0

    @property
    def is_open(self) -> bool:
        return self._depth > 0

    @property
    def depth(self) -> int:
        return self._depth

    @contextmanager
    def scope(self) -> Generator["ResolutionCache", None, None]:
        """Enter the pass scope, opening it if this is the outermost enter."""
        self._depth += 1
        if self._depth == 1:
            self._entries = {}
            self.hits = 0
            self.misses = 0
            logger.debug("Resolution pass opened")
        try:
            yield self
        finally:
            self._depth -= 1
            if self._depth == 0:
                logger.debug(f"Resolution pass closed: {self.misses} modules resolved, {self.hits} cache hits")
                self._entries = None

    def module_exports(self, module_id: ModuleId, compute: Callable[[ModuleId], BindingSet]) -> BindingSet:
        """Exports of `module_id`, computed at most once per open scope."""
        if self._entries is None:
            raise ModlinkImplementationError("module exports requested outside of a resolution pass")
        if module_id in self._entries:
            self.hits += 1
            return self._entries[module_id]
        self.misses += 1
        logger.debug(f"Resolving exports of {module_id}")
        result = compute(module_id)
        self._entries[module_id] = result
        return result
