"""
``slnkit.exceptions`` - errors raised while loading, resolving and editing
solutions.

Lookups that find nothing (e.g., ``Solution.find_project``) return ``None``
instead of raising; the exceptions here are reserved for malformed input and
caller mistakes.
"""
from __future__ import annotations

import pathlib
from typing import Optional


class SlnkitError(Exception):
    """Solution handling-related exception base class."""


class FormatError(SlnkitError):
    """The raw file contents could not be decoded as text."""


class ParseError(SlnkitError):
    """
    A structurally malformed solution file.

    Attributes
    ----------
    line_number : int
        The 1-based line number where the offending block starts.
    filename : pathlib.Path, optional
        The file being parsed, if known.
    """

    line_number: int
    filename: Optional[pathlib.Path]

    def __init__(
        self,
        msg: str,
        line_number: int,
        filename: Optional[pathlib.Path] = None,
    ):
        self.line_number = line_number
        self.filename = filename
        location = f"{filename}:{line_number}" if filename else f"line {line_number}"
        super().__init__(f"{msg} ({location})")


class StructureError(SlnkitError):
    """
    Inconsistent data in an otherwise well-formed solution.

    For example, a cycle in the solution folder nesting or a nesting entry
    that refers to a project GUID which is not in the solution.
    """


class NameConflictError(SlnkitError):
    """A project with the requested name already exists in the solution."""

    name: str

    def __init__(self, msg: str, name: str):
        self.name = name
        super().__init__(msg)
