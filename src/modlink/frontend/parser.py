"""
Parser

Rust Pattern: rustc_parse

Reads module source text into datums (Symbol, str, int/float, SList) with
source locations attached, using a Lark LALR parser.
"""

import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Union

from lark import Lark, Transformer, v_args
from lark.exceptions import ParseError as LarkParseError
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken
from typing_extensions import TypeAlias

from ..shared.datum import SList, Symbol
from ..shared.errors import ModlinkError
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_PARSER_CACHE_FILE

logger = logging.getLogger(__name__)

Datum: TypeAlias = Union[Symbol, str, int, float, SList]

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


class ParseError(ModlinkError):
    """Source text could not be read as S-expressions."""

    error_code = "E0100"

    def __init__(self, message: str, source_file: str, location: Optional[SourceLocation] = None):
        super().__init__(message, location)
        self.source_file = source_file


@v_args(meta=True)
class DatumTransformer(Transformer):
    """Converts the Lark parse tree into datums."""

    def __init__(self, source_file: str = "<input>"):
        super().__init__()
        self.source_file = source_file

    def _location(self, meta) -> Optional[SourceLocation]:
        if getattr(meta, "empty", True):
            return None
        return SourceLocation(
            file=self.source_file,
            line=meta.line,
            column=meta.column,
            end_line=meta.end_line,
            end_column=meta.end_column,
        )

    def start(self, meta, children) -> List[Datum]:
        return list(children)

    def form(self, meta, children) -> SList:
        return SList(children, self._location(meta))

    def string(self, meta, children) -> str:
        body = str(children[0])[1:-1]
        return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)

    def quote(self, meta, children) -> SList:
        location = self._location(meta)
        return SList((Symbol("quote", location), children[0]), location)

    def atom(self, meta, children) -> Union[Symbol, int, float]:
        text = str(children[0])
        if _INT_RE.match(text):
            return int(text)
        if _FLOAT_RE.match(text):
            return float(text)
        return Symbol(text, self._location(meta))


class Parser:
    """
    S-expression reader.

    Rust Pattern: rustc_parse::parse()

    The grammar is compiled once per Parser with Lark's native cache.
    """

    def __init__(self, cache_file: str = DEFAULT_PARSER_CACHE_FILE):
        grammar_path = Path(__file__).parent / "grammar.lark"
        self.parser = Lark.open(
            str(grammar_path),
            start="start",
            parser="lalr",
            cache=cache_file,
            propagate_positions=True,
            maybe_placeholders=False,
        )

    def parse(self, source: str, source_file: str = "<input>") -> List[Datum]:
        """Parse source text into its top-level datums."""
        try:
            tree = self.parser.parse(source)
        except (UnexpectedToken, UnexpectedCharacters, UnexpectedEOF, LarkParseError) as e:
            location = None
            line = getattr(e, "line", None)
            column = getattr(e, "column", None)
            if isinstance(line, int) and isinstance(column, int) and line > 0:
                location = SourceLocation(file=source_file, line=line, column=column)
            raise ParseError(f"Parse error: {e}", source_file, location) from e
        datums = DatumTransformer(source_file).transform(tree)
        logger.debug(f"Read {len(datums)} top-level forms from {source_file}")
        return datums

    def parse_datum(self, source: str, source_file: str = "<input>") -> Datum:
        """Parse text holding exactly one datum."""
        datums = self.parse(source, source_file)
        if len(datums) != 1:
            raise ParseError(f"expected one datum, found {len(datums)}", source_file)
        return datums[0]
