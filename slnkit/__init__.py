import pathlib

from .csproj import AssemblyReference, CsProjFile
from .exceptions import (FormatError, NameConflictError, ParseError,
                         SlnkitError, StructureError)
from .filesystem import LocalFileSystem, MemoryFileSystem
from .parse import get_parser, new_parser, parse_solution
from .solution import BuildConfiguration, ProjectReference, Section, Solution
from .version import SolutionVersion
from .write import write_solution

__version__ = "0.1.0"

MODULE_PATH = pathlib.Path(__file__).parent
del pathlib

GRAMMAR_FILENAME = MODULE_PATH / "sln.lark"

__all__ = [
    "AssemblyReference",
    "BuildConfiguration",
    "CsProjFile",
    "FormatError",
    "GRAMMAR_FILENAME",
    "LocalFileSystem",
    "MemoryFileSystem",
    "NameConflictError",
    "ParseError",
    "ProjectReference",
    "Section",
    "SlnkitError",
    "Solution",
    "SolutionVersion",
    "StructureError",
    "get_parser",
    "new_parser",
    "parse_solution",
    "write_solution",
]
