"""
Configuration constants for modlink
"""

import os
import tempfile

# Module source files
MODULE_FILE_EXTENSION = ".scm"
PATH_SEPARATOR = "/"
DEFAULT_FILE_ENCODING = "utf-8"

# Library resolution: `lib` references are absolutized against this base
# inside the library loader's root.
DEFAULT_LIB_BASE = "/"

# Name of the loader that owns built-in pseudo-modules
BUILTIN_LOADER_NAME = "builtin"

# Parser configuration (cache under temp dir to avoid cluttering project root)
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "modlink_reader.cache")

# Environment variables
LIB_PATH_ENV_VAR = "MODLINK_LIB"
COLOR_ENV_VAR = "MODLINK_COLOR"

# Maximum nesting of modules being loaded at once before giving up
MAX_LOADING_DEPTH = 64

# Error reporting constants
ERROR_POINTER_CHAR = "^"
