"""CLI entry point: run `modlink file.scm` or `python -m modlink file.scm`."""

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .utils.config import LIB_PATH_ENV_VAR, MODULE_FILE_EXTENSION


def _print_bindings(title: str, bindings) -> None:
    print(f"{title}:")
    for binding in bindings:
        print(f"  {binding.name}  {binding.kind}")


def main(argv: Optional[List[str]] = None) -> int:
    import argparse
    from .loader.module_loader import ModuleLoader
    from .shared.errors import ErrorReporter, ModlinkError

    parser = argparse.ArgumentParser(
        prog="modlink",
        description="Resolve the imports and exports of a module declaration file.",
    )
    parser.add_argument("file", type=Path, help=f"Path to a {MODULE_FILE_EXTENSION} module file")
    parser.add_argument(
        "--lib",
        type=Path,
        default=os.environ.get(LIB_PATH_ENV_VAR),
        help=f"Library root for (lib ...) references (default: ${LIB_PATH_ENV_VAR} or the file's directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log resolution steps")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    path = args.file.resolve()
    if not path.exists():
        sys.stderr.write(f"modlink: error: file not found: {path}\n")
        return 1
    if not path.is_file():
        sys.stderr.write(f"modlink: error: not a file: {path}\n")
        return 1

    lib_root = Path(args.lib) if args.lib else None
    module_loader = ModuleLoader(path.parent, lib_root=lib_root)
    try:
        info = module_loader.resolve_path(path.name)
    except ModlinkError as e:
        reporter = ErrorReporter(module_loader.sources)
        reporter.report(e)
        reporter.print_errors()
        return 1

    print(f"module {info.module_id}")
    _print_bindings("imports", info.imports)
    print("dependencies:")
    for module_id in info.imports.dependencies:
        print(f"  {module_id}")
    _print_bindings("exports", info.exports)
    if info.exports.dependencies:
        print("export dependencies:")
        for module_id in info.exports.dependencies:
            print(f"  {module_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
