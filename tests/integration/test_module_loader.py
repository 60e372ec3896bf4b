"""
End-to-end tests for ModuleLoader: module sources in, resolved imports,
environments and exports out.

Most tests use in-memory source overlays; the last class reads real files.
"""

import pytest

from modlink.loader import ModuleLoader
from modlink.resolve import BUILTIN_LOADER, ModuleId
from modlink.shared import (
    BindingKind,
    CircularImportError,
    ErrorReporter,
    MacroBinding,
    ModuleSourceNotFound,
    NameCollision,
    UndefinedSymbol,
    ValueBinding,
    sym,
)

APP_ROOT = "/modlink-tests/app"
LIB_ROOT = "/modlink-tests/lib"


def make_loader(modules, lib=None, **kwargs):
    return ModuleLoader(APP_ROOT, lib_root=LIB_ROOT, source_overlay=modules, lib_overlay=lib, **kwargs)


UTIL = """
(define a 1)
(define b 2)
(define (twice x) (* 2 x))
(define-syntax when (syntax-rules () ((_ c body ...) (if c (begin body ...)))))
(export a b twice when)
"""


class TestImportsAndEnvironment:
    def test_imports_are_visible_in_module_env(self):
        loader = make_loader({"/main": "(import (only: util a twice))", "/util": UTIL})
        info = loader.resolve_path("main")
        assert info.imports.names() == ("a", "twice")
        assert info.imports.dependencies == (ModuleId(loader.loader, "/util"),)
        assert info.env.lookup("a").payload == 1
        assert info.env.lookup("b") is None

    def test_local_definitions_shadow_imports(self):
        loader = make_loader({
            "/main": "(import util) (define a 100) (export a b)",
            "/util": UTIL,
        })
        info = loader.resolve_path("main")
        assert info.exports.get("a").value == 100
        assert info.exports.get("b").value == 2

    def test_later_import_wins_in_env(self):
        loader = make_loader({
            "/main": "(import util (rename: other (z a)))",
            "/util": UTIL,
            "/other": "(define z 26) (export z)",
        })
        info = loader.resolve_path("main")
        assert info.imports.names().count("a") == 2
        assert info.env.lookup("a").payload == 26

    def test_subdirectory_modules_resolve_relative_to_themselves(self):
        loader = make_loader({
            "/main": "(import pkg/api)",
            "/pkg/api": "(import impl) (export (re-export: impl))",
            "/pkg/impl": "(define secret 7) (export secret)",
        })
        info = loader.resolve_path("main")
        assert info.imports.names() == ("secret",)
        assert info.imports.dependencies == (ModuleId(loader.loader, "/pkg/api"),)
        assert loader.is_module_loaded(ModuleId(loader.loader, "/pkg/impl"))

    def test_library_modules(self):
        loader = make_loader(
            {"/main": '(import (prefix: "list" l-))'},
            lib={"/list": '(define fold "f") (export fold)'},
        )
        info = loader.resolve_path("main")
        assert info.imports.names() == ("l-fold",)
        assert info.imports.dependencies == (ModuleId(loader.lib_loader, "/list"),)

    def test_builtin_modules(self):
        loader = make_loader(
            {"/main": "(import (core)) (export car)"},
            builtins={"core": [ValueBinding("car", "<car>"), ValueBinding("cdr", "<cdr>")]},
        )
        info = loader.resolve_path("main")
        assert info.imports.names() == ("car", "cdr")
        assert info.imports.dependencies == (ModuleId(BUILTIN_LOADER, "/core"),)
        assert info.exports.get("car").value == "<car>"


class TestExports:
    def test_rename_and_re_export(self):
        loader = make_loader({
            "/main": "(import api)",
            "/api": "(import util) (define c 3) (export c (rename: (a alpha)) (re-export: (only: util b)))",
            "/util": UTIL,
        })
        api = loader.exports(ModuleId(loader.loader, "/api"))
        assert api.names() == ("c", "alpha", "b")
        assert api.dependencies == (ModuleId(loader.loader, "/util"),)

    def test_re_export_chain(self):
        loader = make_loader({
            "/main": "(import c)",
            "/c": "(export (re-export: b))",
            "/b": "(export (re-export: (prefix: a a-)))",
            "/a": "(define x 1) (export x)",
        })
        info = loader.resolve_path("main")
        assert info.imports.names() == ("a-x",)
        assert info.env.lookup("a-x").payload == 1

    def test_quoted_prefix_from_source(self):
        loader = make_loader({"/main": "(import (prefix: util 'px-))", "/util": "(define a 1) (export a)"})
        info = loader.resolve_path("main")
        assert info.imports.names() == ("px-a",)
        assert info.env.lookup("px-a").payload == 1

    def test_macro_keeps_definition_environment(self):
        loader = make_loader({"/main": "(import (prefix: util u-))", "/util": UTIL})
        info = loader.resolve_path("main")
        util_info = loader.loaded_modules[ModuleId(loader.loader, "/util")]

        binding = info.imports.get("u-when")
        assert isinstance(binding, MacroBinding)
        assert binding.definition_env is util_info.env

        entry = info.env.lookup("u-when")
        assert entry.kind is BindingKind.MACRO
        assert entry.env is util_info.env
        assert entry.env.lookup("twice") is not None

    def test_undefined_export(self):
        loader = make_loader({"/main": "(export nope)"})
        with pytest.raises(UndefinedSymbol):
            loader.resolve_path("main")


class TestLoaderErrors:
    def test_missing_module(self):
        loader = make_loader({"/main": "(import missing)"})
        with pytest.raises(ModuleSourceNotFound) as exc_info:
            loader.resolve_path("main")
        assert exc_info.value.path == "/missing"

    def test_circular_imports(self):
        loader = make_loader({"/a": "(import b)", "/b": "(import a)"})
        with pytest.raises(CircularImportError) as exc_info:
            loader.resolve_path("a")
        assert [m.path for m in exc_info.value.chain] == ["/a", "/b", "/a"]
        assert loader.loading_stack == []

    def test_circular_re_exports(self):
        loader = make_loader({
            "/a": "(export (re-export: b))",
            "/b": "(export (re-export: a))",
        })
        with pytest.raises(CircularImportError):
            loader.resolve_path("a")

    def test_self_import(self):
        loader = make_loader({"/a": "(import a)"})
        with pytest.raises(CircularImportError):
            loader.resolve_path("a")

    def test_collision_points_at_source(self):
        loader = make_loader({"/main": "(import\n  (rename: util (a b)))", "/util": UTIL})
        with pytest.raises(NameCollision) as exc_info:
            loader.resolve_path("main")
        assert exc_info.value.location.file == "<overlay:/main>"
        assert exc_info.value.location.line == 2

    def test_diagnostic_renders_module_source(self):
        loader = make_loader({"/main": "(import (only: util zzz))", "/util": UTIL})
        with pytest.raises(UndefinedSymbol) as exc_info:
            loader.resolve_path("main")
        reporter = ErrorReporter(loader.sources)
        reporter.report(exc_info.value)
        text = reporter.format_all_errors(color=False)
        assert "--> <overlay:/main>:1:21" in text
        assert "1 | (import (only: util zzz))" in text


class TestLoaderCaching:
    def test_shared_module_resolved_once_per_pass(self):
        loader = make_loader({
            "/main": "(import (only: util a) (prefix: util u-) (except: util b))",
            "/util": UTIL,
        })
        loader.resolve_path("main")
        assert loader.engine.cache.misses == 1
        assert loader.engine.cache.hits == 2

    def test_loaded_modules_are_reused(self):
        loader = make_loader({"/main": "(import util)", "/util": UTIL})
        first = loader.resolve_path("main")
        assert loader.resolve_path("main") is first
        assert loader.is_module_loaded(ModuleId(loader.loader, "/util"))


class TestFilesOnDisk:
    def test_reads_module_files(self, tmp_path):
        (tmp_path / "main.scm").write_text("(import (here util)) (export (re-export: util))\n")
        (tmp_path / "util.scm").write_text(UTIL)
        loader = ModuleLoader(tmp_path)
        info = loader.resolve_path("main.scm")
        assert info.exports.names() == ("a", "b", "twice", "when")
        assert info.source_name == str(tmp_path.resolve() / "main.scm")
        assert str(tmp_path.resolve() / "util.scm") in loader.sources

    def test_lib_root_separate_from_app_root(self, tmp_path):
        app = tmp_path / "app"
        lib = tmp_path / "lib"
        (lib / "srfi").mkdir(parents=True)
        app.mkdir()
        (app / "main.scm").write_text('(import (lib "srfi/1"))\n')
        (lib / "srfi" / "1.scm").write_text("(define (iota n) n) (export iota)\n")
        loader = ModuleLoader(app, lib_root=lib)
        info = loader.resolve_path("main")
        assert info.imports.names() == ("iota",)
        assert info.imports.dependencies == (ModuleId(loader.lib_loader, "/srfi/1"),)
        assert info.imports.get("iota").value[1] == (sym("iota"), sym("n"))

    def test_lib_reference_to_app_root_is_the_same_module(self, tmp_path):
        (tmp_path / "main.scm").write_text('(import util "util")\n')
        (tmp_path / "util.scm").write_text("(define a 1) (export a)\n")
        loader = ModuleLoader(tmp_path)
        assert loader.lib_loader is loader.loader

        info = loader.resolve_path("main")
        assert info.imports.names() == ("a", "a")
        assert info.imports.dependencies == (ModuleId(loader.loader, "/util"),)
        assert len(loader.loaded_modules) == 2
        assert loader.engine.cache.misses == 1
