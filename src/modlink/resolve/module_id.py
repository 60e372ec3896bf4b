"""
Module identifiers, loaders and the ambient loader context.

A ModuleId is a (loader, path) pair. Paths are root-relative posix strings
such as "/app/main"; the loader decides how a path maps to source text.

Rust Pattern: rustc_resolve::module::PathResolution
"""

import logging
import posixpath
from abc import ABC, abstractmethod
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Generator, Optional

from ..shared.errors import ModuleSourceNotFound
from ..utils.config import BUILTIN_LOADER_NAME, MODULE_FILE_EXTENSION, PATH_SEPARATOR
from ..utils.io_utils import read_source_file

logger = logging.getLogger(__name__)


class Loader(ABC):
    """Maps module paths to sources and absolutizes relative references."""

    name: str = "loader"

    @abstractmethod
    def absolutize(self, reference: str, base_path: Optional[str] = None) -> str:
        """Absolute module path for `reference` relative to the directory of `base_path`."""

    @abstractmethod
    def read_source(self, path: str) -> str:
        """Source text of the module at `path`."""

    def source_name(self, path: str) -> str:
        """Name used for source locations of the module at `path`."""
        return f"{self.name}:{path}"


@dataclass(frozen=True)
class ModuleId:
    """
    Unique module handle.

    Two ids denote the same module iff their loaders compare equal and their
    paths are equal.
    """
    loader: Loader
    path: str

    def __str__(self) -> str:
        return f"{self.loader.name}:{self.path}"


def normalize_module_path(path: str) -> str:
    """Collapse `.`/`..` segments and force a single leading separator."""
    normalized = posixpath.normpath(path)
    return PATH_SEPARATOR + normalized.lstrip(PATH_SEPARATOR)


class FileLoader(Loader):
    """
    Loads modules from `root`, where "/a/b" lives at root/a/b.scm.

    `source_overlay` maps module paths to in-memory source text and is
    consulted before the filesystem.
    """

    name = "file"

    def __init__(self, root: Path, source_overlay: Optional[Dict[str, str]] = None):
        if not isinstance(root, Path):
            root = Path(root)
        self.root = root.resolve()
        self.source_overlay = {
            normalize_module_path(path): source
            for path, source in (source_overlay or {}).items()
        }

    def absolutize(self, reference: str, base_path: Optional[str] = None) -> str:
        if reference.endswith(MODULE_FILE_EXTENSION):
            reference = reference[: -len(MODULE_FILE_EXTENSION)]
        if reference.startswith(PATH_SEPARATOR):
            return normalize_module_path(reference)
        base_dir = posixpath.dirname(base_path) if base_path else PATH_SEPARATOR
        return normalize_module_path(posixpath.join(base_dir, reference))

    def file_for(self, path: str) -> Path:
        return self.root / (path.lstrip(PATH_SEPARATOR) + MODULE_FILE_EXTENSION)

    def read_source(self, path: str) -> str:
        if path in self.source_overlay:
            return self.source_overlay[path]
        file_path = self.file_for(path)
        if not file_path.is_file():
            raise ModuleSourceNotFound(path, searched=str(file_path))
        logger.debug(f"FileLoader: reading {file_path}")
        return read_source_file(file_path)

    def source_name(self, path: str) -> str:
        if path in self.source_overlay:
            return f"<overlay:{path}>"
        return str(self.file_for(path))

    def __repr__(self) -> str:
        return f"FileLoader({self.root})"


class BuiltinLoader(Loader):
    """Owner of built-in pseudo-modules; they have no source."""

    name = BUILTIN_LOADER_NAME

    def absolutize(self, reference: str, base_path: Optional[str] = None) -> str:
        return reference

    def read_source(self, path: str) -> str:
        raise ModuleSourceNotFound(path, searched="built-in modules")

    def __repr__(self) -> str:
        return "BuiltinLoader()"


BUILTIN_LOADER = BuiltinLoader()


# ---------------------------------------------------------------------------
# Ambient loader context (current loader / current module path)
# ---------------------------------------------------------------------------

_current_loader: ContextVar[Optional[Loader]] = ContextVar("modlink_current_loader", default=None)
_current_path: ContextVar[Optional[str]] = ContextVar("modlink_current_path", default=None)


def current_loader() -> Optional[Loader]:
    return _current_loader.get()


def current_module_path() -> Optional[str]:
    return _current_path.get()


@contextmanager
def loader_context(loader: Loader, path: Optional[str] = None) -> Generator[None, None, None]:
    """Make `loader`/`path` the ambient context for relative module references."""
    loader_token = _current_loader.set(loader)
    path_token = _current_path.set(path)
    try:
        yield
    finally:
        _current_path.reset(path_token)
        _current_loader.reset(loader_token)


def module_context(module_id: ModuleId):
    """loader_context() for the module being loaded."""
    return loader_context(module_id.loader, module_id.path)
