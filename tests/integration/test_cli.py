"""
End-to-end tests for the `modlink` command line.
"""

import pytest

from modlink.__main__ import main


@pytest.fixture(autouse=True)
def no_lib_env(monkeypatch):
    monkeypatch.delenv("MODLINK_LIB", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")


class TestCli:
    def test_prints_imports_and_exports(self, tmp_path, capsys):
        (tmp_path / "main.scm").write_text(
            "(import (rename: util (a alpha)))\n"
            "(define-syntax my-when (syntax-rules ()))\n"
            "(export my-when (re-export: (only: util b)))\n"
        )
        (tmp_path / "util.scm").write_text("(define a 1) (define b 2) (export a b)\n")

        assert main([str(tmp_path / "main.scm")]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "module file:/main",
            "imports:",
            "  alpha  def",
            "  b  def",
            "dependencies:",
            "  file:/util",
            "exports:",
            "  my-when  mac",
            "  b  def",
            "export dependencies:",
            "  file:/util",
        ]

    def test_lib_option(self, tmp_path, capsys):
        app = tmp_path / "app"
        lib = tmp_path / "lib"
        app.mkdir()
        lib.mkdir()
        (app / "main.scm").write_text('(import "list")\n')
        (lib / "list.scm").write_text("(define fold 0) (export fold)\n")

        assert main([str(app / "main.scm"), "--lib", str(lib)]) == 0
        out = capsys.readouterr().out
        assert "  fold  def" in out
        assert "export dependencies:" not in out

    def test_lib_from_environment(self, tmp_path, capsys, monkeypatch):
        lib = tmp_path / "lib"
        lib.mkdir()
        (lib / "list.scm").write_text("(define fold 0) (export fold)\n")
        (tmp_path / "main.scm").write_text('(import "list")\n')
        monkeypatch.setenv("MODLINK_LIB", str(lib))

        assert main([str(tmp_path / "main.scm")]) == 0
        assert "  fold  def" in capsys.readouterr().out

    def test_resolution_error_is_reported(self, tmp_path, capsys):
        (tmp_path / "main.scm").write_text("(import (only: util zzz))\n")
        (tmp_path / "util.scm").write_text("(define a 1) (export a)\n")

        assert main([str(tmp_path / "main.scm")]) == 1
        err = capsys.readouterr().err
        assert "error[E0403]: undefined symbol `zzz`" in err
        assert "1 | (import (only: util zzz))" in err
        assert "aborting due to 1 previous error" in err

    def test_parse_error_is_reported(self, tmp_path, capsys):
        (tmp_path / "main.scm").write_text("(import util\n")
        assert main([str(tmp_path / "main.scm")]) == 1
        assert "error[E0100]" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.scm")]) == 1
        assert "file not found" in capsys.readouterr().err

    def test_directory_is_not_a_file(self, tmp_path, capsys):
        assert main([str(tmp_path)]) == 1
        assert "not a file" in capsys.readouterr().err
