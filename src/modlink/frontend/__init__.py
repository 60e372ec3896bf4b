"""Reader and module declaration interpretation."""

from .parser import Parser, ParseError, DatumTransformer
from .declaration import Definition, ModuleDeclaration, parse_module_declaration

__all__ = [
    'Parser',
    'ParseError',
    'DatumTransformer',
    'Definition',
    'ModuleDeclaration',
    'parse_module_declaration',
]
