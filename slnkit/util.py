from __future__ import annotations

import os
import pathlib
import uuid

import lxml.etree

from .typing import AnyPath


def new_guid() -> str:
    """Generate a new identifier in the braced, upper-case form solutions use."""
    return f"{{{str(uuid.uuid4()).upper()}}}"


def normalize_guid(guid: str) -> str:
    """Normalize a GUID for comparison: no braces, no whitespace, upper case."""
    return guid.strip().strip("{}").upper()


def guids_equal(first: str, second: str) -> bool:
    return normalize_guid(first) == normalize_guid(second)


def to_windows_path(path: AnyPath) -> str:
    """Render a relative path with backslashes, as solution files store them."""
    return str(pathlib.PureWindowsPath(*pathlib.PurePath(path).parts))


def relative_windows_path(path: AnyPath, start: AnyPath) -> str:
    """The path from ``start`` to ``path``, with backslashes."""
    return to_windows_path(os.path.relpath(os.fspath(path), os.fspath(start)))


def from_windows_path(root: AnyPath, path: str) -> pathlib.Path:
    """Join a backslash-separated relative ``path`` to ``root``."""
    return pathlib.Path(root).joinpath(*pathlib.PureWindowsPath(path).parts)


def fix_case_insensitive_path(path: AnyPath) -> pathlib.Path:
    """
    Match a path in a case-insensitive manner.

    Required on Linux to find files in a case-insensitive way. Not required on
    OSX/Windows, but platform checks are not done here.

    Parameters
    ----------
    path : pathlib.Path or str
        The case-insensitive path

    Returns
    -------
    path : pathlib.Path
        The case-corrected path.

    Raises
    ------
    FileNotFoundError
        When the file can't be found
    """
    path = pathlib.Path(path).expanduser().resolve()
    if path.exists():
        return path.resolve()

    new_path = pathlib.Path(path.parts[0])
    for part in path.parts[1:]:
        if not (new_path / part).exists():
            if not new_path.is_dir():
                raise FileNotFoundError(f"Path does not exist: {path}")
            all_files = {fn.name.lower(): fn.name for fn in new_path.iterdir()}
            try:
                part = all_files[part.lower()]
            except KeyError:
                raise FileNotFoundError(
                    f"Path does not exist: {path}\n{new_path}{os.sep}{part} missing"
                ) from None
        new_path = new_path / part
    return new_path.resolve()


def tree_to_xml_source(
    tree: lxml.etree.Element,
    delimiter: str = "\r\n",
    xml_header: str = '<?xml version="1.0" encoding="utf-8"?>',
    indent: str = "  ",
    include_utf8_sig: bool = True,
) -> str:
    """Return the text to write for the given XML tree."""
    # NOTE: we avoid lxml.etree.tostring(xml_declaration=True) as we want
    # to write a declaration that matches what Visual Studio writes. It uses
    # double quotes instead of single quotes.
    lxml.etree.indent(tree, space=indent)
    header = xml_header
    if include_utf8_sig:
        # Visual Studio includes a utf-8 byte order marker (BOM).
        header = "\ufeff" + header

    body = lxml.etree.tostring(tree, pretty_print=True, encoding="unicode")
    source = "\n".join((header, body))
    if delimiter == "\n":
        # This is what lxml gives us
        return source

    return delimiter.join(source.split("\n"))
