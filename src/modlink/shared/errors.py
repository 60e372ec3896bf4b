"""
Error Reporting

Rust Pattern: rustc_errors::Diagnostic

Resolution is all-or-nothing: every failure below aborts the enclosing
resolution call. Each error keeps the offending value and, when the value came
from the reader, its source location so the CLI can point at it.
"""

import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .source_location import SourceLocation
from ..utils.config import COLOR_ENV_VAR, ERROR_POINTER_CHAR


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get(COLOR_ENV_VAR, "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return sys.stderr.isatty()

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Error dataclass
# ---------------------------------------------------------------------------

@dataclass
class Error:
    """
    One diagnostic.

    Rust Pattern: rustc_errors::Diagnostic
    """
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None


# ---------------------------------------------------------------------------
# Formatting engine
# ---------------------------------------------------------------------------

def _format_diagnostic(
    error: Error,
    source_files: Dict[str, str],
    color: bool = False,
) -> str:
    """
    Render a single diagnostic in rustc style.

    Example output (plain, no color)::

        error[E0403]: undefined symbol `sqrt` in (only: "math" sqrt)
         --> main.scm:1:9
          |
        1 | (import (only: "math" sqrt))
          |         ^^^^^^^^^^^^^^^^^^^^ not exported here
          |
          = help: check the names the module exports
    """
    out: List[str] = []

    code_str = f"[{error.code}]" if error.code else ""
    out.append(
        _style(f"error{code_str}", _BOLD, _RED, color=color)
        + _style(f": {error.message}", _BOLD, color=color)
    )

    if error.location is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + "<unknown location>")
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    loc = error.location
    source = source_files.get(loc.file)
    if source is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + str(loc))
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    src_lines = source.split("\n")
    gw = max(len(str(loc.line)), 1)

    out.append(_style(" " * gw + "--> ", _BOLD, _BLUE, color=color) + str(loc))
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))

    idx = loc.line - 1
    code_line = src_lines[idx] if 0 <= idx < len(src_lines) else ""
    out.append(_style(str(loc.line).rjust(gw) + " | ", _BOLD, _BLUE, color=color) + code_line)

    col_start = max(loc.column, 1) - 1
    if loc.end_line == loc.line and loc.end_column > loc.column:
        span_len = loc.end_column - loc.column
    else:
        # Multi-line form: underline to the end of the first line
        span_len = max(1, len(code_line.rstrip()) - col_start)
    carets = " " * col_start + ERROR_POINTER_CHAR * span_len
    label_suffix = f" {error.label}" if error.label else ""
    out.append(
        _style(" " * (gw + 1) + "| ", _BOLD, _BLUE, color=color)
        + _style(carets + label_suffix, _BOLD, _RED, color=color)
    )

    _append_annotations(out, error, gw, color)
    return "\n".join(out)


def _append_annotations(
    out: List[str],
    error: Error,
    gw: int,
    color: bool,
) -> None:
    if not (error.help or error.note):
        return
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))
    pad = " " * (gw + 1)
    if error.help:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("help: ", _BOLD, color=color)
            + error.help
        )
    if error.note:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("note: ", _BOLD, color=color)
            + error.note
        )


# ---------------------------------------------------------------------------
# ErrorReporter
# ---------------------------------------------------------------------------

class ErrorReporter:
    """
    Collects diagnostics and renders them against the known source files.

    Rust Pattern: rustc_errors::Emitter
    """

    def __init__(self, source_files: Optional[Dict[str, str]] = None):
        self.source_files = source_files if source_files is not None else {}
        self.errors: List[Error] = []

    def report(self, exc: "ModlinkError") -> None:
        self.errors.append(exc.to_diagnostic())

    def format_error(self, error: Error, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(error, self.source_files, color=use_color)

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        parts = [self.format_error(e, color=use_color) for e in self.errors]
        count = len(self.errors)
        summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
        parts.append(
            _style("error", _BOLD, _RED, color=use_color)
            + _style(f": {summary}", _BOLD, color=use_color)
        )
        return "\n\n".join(parts)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def print_errors(self) -> None:
        print(self.format_all_errors(), file=sys.stderr)


# ============================================================================
# Exception Classes
# ============================================================================

def _describe(value: Any) -> str:
    from .datum import write_datum
    return write_datum(value)


class ModlinkError(Exception):
    """Base exception for all modlink errors"""

    error_code = "E0001"
    label: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def to_diagnostic(self) -> Error:
        return Error(
            message=self.message,
            location=self.location,
            code=self.error_code,
            help=self.help,
            note=self.note,
            label=self.label,
        )

    def __str__(self):
        if self.location:
            return f"error[{self.error_code}]: {self.message}\n --> {self.location}"
        return self.message


class ResolutionError(ModlinkError):
    """Failure while resolving an import, export or module reference."""

    def __init__(self, message: str, value: Any = None, location: Optional[SourceLocation] = None):
        if location is None:
            location = getattr(value, "location", None)
        super().__init__(message, location)
        self.value = value


class ResolverNotFound(ResolutionError):
    error_code = "E0400"
    help = "register the tag before building the resolution engine"

    def __init__(self, tag: str, kind: str, value: Any = None):
        super().__init__(f"no {kind} resolver registered for `{tag}`", value)
        self.tag = tag
        self.kind = kind


class InvalidModuleIdentifier(ResolutionError):
    error_code = "E0401"
    help = "use a symbol, a string, a tagged form or a module identifier"

    def __init__(self, value: Any):
        super().__init__(f"invalid module identifier {_describe(value)}", value)


class AmbiguousOrMissingModule(ResolutionError):
    error_code = "E0402"

    def __init__(self, value: Any, count: int):
        super().__init__(
            f"{_describe(value)} must name exactly one module, resolved to {count}", value
        )
        self.count = count


class UndefinedSymbol(ResolutionError):
    error_code = "E0403"
    label = "not defined here"

    def __init__(self, name: str, context: Any = None, location: Optional[SourceLocation] = None):
        where = f" in {_describe(context)}" if context is not None else ""
        super().__init__(f"undefined symbol `{name}`{where}", context, location)
        self.name = name
        self.context = context


class NameCollision(ResolutionError):
    error_code = "E0404"
    help = "pick a target name that the binding set does not already contain"

    def __init__(self, name: str, context: Any = None, location: Optional[SourceLocation] = None):
        where = f" in {_describe(context)}" if context is not None else ""
        super().__init__(f"name `{name}` is already bound{where}", context, location)
        self.name = name


class InvalidRenameForm(ResolutionError):
    error_code = "E0405"
    help = "rename pairs are written (from to)"

    def __init__(self, value: Any):
        super().__init__(f"invalid rename form {_describe(value)}", value)


class InvalidPrefix(ResolutionError):
    error_code = "E0406"

    def __init__(self, value: Any):
        super().__init__(f"prefix must be a symbol, got {_describe(value)}", value)


class InvalidExportDeclaration(ResolutionError):
    error_code = "E0407"

    def __init__(self, value: Any):
        super().__init__(f"invalid export declaration {_describe(value)}", value)


class InvalidSymbolName(ResolutionError):
    error_code = "E0408"

    def __init__(self, value: Any, context: Any = None):
        super().__init__(f"expected a symbol, got {_describe(value)}", value,
                         location=getattr(value, "location", None) or getattr(context, "location", None))


class NoModuleContext(ResolutionError):
    error_code = "E0409"
    note = "relative module references need a current loader"

    def __init__(self, value: Any):
        super().__init__(f"cannot resolve {_describe(value)} outside of a module", value)


class CircularImportError(ResolutionError):
    error_code = "E0410"

    def __init__(self, chain: List[Any]):
        super().__init__("circular import detected: " + " -> ".join(str(m) for m in chain))
        self.chain = chain


class InvalidModuleDeclaration(ResolutionError):
    error_code = "E0411"

    def __init__(self, value: Any, reason: str):
        super().__init__(f"invalid module declaration {_describe(value)}: {reason}", value)


class ModuleSourceNotFound(ResolutionError):
    error_code = "E0412"

    def __init__(self, path: str, searched: Optional[str] = None):
        message = f"module `{path}` not found"
        if searched:
            message += f" (searched {searched})"
        super().__init__(message)
        self.path = path


class ModlinkImplementationError(Exception):
    """
    Error in modlink itself, not in the module being resolved.

    - Cache used outside a resolution scope
    - Registry modified after it was frozen
    """
    def __init__(self, message: str, error_code: str = "E9999"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"


class RegistryFrozenError(ModlinkImplementationError):
    def __init__(self, kind: str, tag: str):
        super().__init__(f"cannot register `{tag}`: {kind} registry is frozen", "E9001")
