"""Reference module registry: module loading on top of the resolution engine."""

from .module_info import ModuleInfo
from .module_loader import ModuleLoader

__all__ = [
    'ModuleInfo',
    'ModuleLoader',
]
