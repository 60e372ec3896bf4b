"""
Pytest configuration and shared fixtures for all modlink tests.

Engine-level tests run against CountingRegistry, an in-memory module registry
that records how often each module's exports were requested. Loader-level
tests use ModuleLoader with in-memory source overlays to avoid disk I/O.
"""

import sys
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from modlink.resolve import (
    BUILTIN_LOADER, FileLoader, Loader, ModuleId, ResolutionEngine, default_registries,
)
from modlink.shared import (
    Binding, BindingSet, Environment, MacroBinding, ModuleSourceNotFound, ValueBinding,
)


APP_ROOT = Path("/modlink-tests/app")
LIB_ROOT = Path("/modlink-tests/lib")


def values(*names: str) -> list:
    """Value bindings whose values are their names, upper-cased."""
    return [ValueBinding(name, name.upper()) for name in names]


class CountingRegistry:
    """In-memory module registry keyed by module path."""

    def __init__(self, modules: Dict[str, Iterable[Binding]]):
        self.modules = {path: tuple(bindings) for path, bindings in modules.items()}
        self.calls: Counter = Counter()

    def identify(self, loader: Loader, path: str) -> ModuleId:
        return ModuleId(loader, path)

    def exports(self, module_id: ModuleId) -> BindingSet:
        self.calls[module_id.path] += 1
        if module_id.path not in self.modules:
            raise ModuleSourceNotFound(module_id.path)
        return BindingSet(self.modules[module_id.path])


# =============================================================================
# Loaders and module identities
# =============================================================================

@pytest.fixture(scope="session")
def app_loader():
    return FileLoader(APP_ROOT)


@pytest.fixture(scope="session")
def lib_loader():
    return FileLoader(LIB_ROOT)


@pytest.fixture
def main_module(app_loader):
    """The module whose specs are being resolved."""
    return ModuleId(app_loader, "/main")


@pytest.fixture
def core_module():
    return ModuleId(BUILTIN_LOADER, "/core")


# =============================================================================
# Engine over an in-memory registry
# =============================================================================

@pytest.fixture
def macro_env():
    return Environment()


@pytest.fixture
def module_registry(macro_env):
    return CountingRegistry({
        "/m": values("a", "b", "c"),
        "/n": values("c", "d"),
        "/single": values("a"),
        "/sub/x": values("x"),
        "/macros": values("helper") + [MacroBinding("when", "(when-expander)", macro_env)],
        "/list": values("fold", "map"),
        "/core": values("car", "cdr"),
    })


@pytest.fixture
def engine(module_registry, lib_loader, core_module):
    registries = default_registries(lib_loader, builtins={"core": core_module})
    return ResolutionEngine(registries, module_registry)


@pytest.fixture
def env(main_module):
    """Module environment with a value, a macro and an imported-style parent."""
    parent = Environment(module=main_module)
    parent.define_value("imported", "IMPORTED")
    local = parent.child()
    local.define_value("square", "(lambda (x) (* x x))")
    local.define_macro("unless", "(unless-expander)")
    return local


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
