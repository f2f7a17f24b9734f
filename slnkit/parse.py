"""
``slnkit.parse`` - turn solution file text into a ``Solution``.

Lines are read one at a time.  Block-opening lines (``Project(...)``,
``GlobalSection(...)``, ``ProjectSection(...)``) are parsed with the lark
grammar in ``sln.lark``; everything else is recognized by its fixed marker
text or carried along verbatim.
"""
from __future__ import annotations

import dataclasses
import logging
import pathlib
from typing import Dict, List, Optional, Union

import lark

import slnkit

from .exceptions import ParseError
from .filesystem import LocalFileSystem
from .lines import TokenizedText, tokenize
from .solution import NESTED_PROJECTS, ProjectReference, Section, Solution
from .typing import AnyPath, GuidFactory, SupportsFileAccess
from .util import new_guid, normalize_guid
from .version import FORMAT_LINE_PREFIX, RE_FORMAT_LINE, SolutionVersion

logger = logging.getLogger(__name__)

_PARSER = None

PROJECT_START = "Project("
PROJECT_END = "EndProject"
PROJECT_SECTION_START = "ProjectSection("
PROJECT_SECTION_END = "EndProjectSection"
GLOBAL_START = "Global"
GLOBAL_END = "EndGlobal"
GLOBAL_SECTION_START = "GlobalSection("
GLOBAL_SECTION_END = "EndGlobalSection"

STRUCTURE_MARKERS = (
    PROJECT_END,
    PROJECT_SECTION_END,
    GLOBAL_START,
    GLOBAL_END,
    GLOBAL_SECTION_END,
)
BLOCK_PREFIXES = (
    PROJECT_START,
    PROJECT_SECTION_START,
    GLOBAL_SECTION_START,
)

STARTING_RULES = ["project_declaration", "section_header"]


def new_parser(**kwargs) -> lark.Lark:
    """
    Get a new parser for solution declaration lines.

    Parameters
    ----------
    **kwargs :
        See :class:`lark.lark.LarkOptions`.
    """
    return lark.Lark.open_from_package(
        "slnkit",
        slnkit.GRAMMAR_FILENAME.name,
        parser="lalr",
        start=STARTING_RULES,
        **kwargs,
    )


def get_parser() -> lark.Lark:
    """Get a cached lark.Lark parser for solution declaration lines."""
    global _PARSER

    if _PARSER is None:
        _PARSER = new_parser()
    return _PARSER


@dataclasses.dataclass(frozen=True)
class ProjectDeclaration:
    """``Project("{type}") = "name", "path", "{guid}"``"""
    type_guid: str
    name: str
    relative_path: str
    project_guid: str


@dataclasses.dataclass(frozen=True)
class SectionHeader:
    """``GlobalSection(name) = disposition`` or ``ProjectSection(...)``"""
    kind: str
    name: str
    disposition: str


class DeclarationTransformer(lark.Transformer):
    """Turn declaration line parse trees into dataclasses."""

    def QUOTED(self, token: lark.Token) -> str:
        return str(token)[1:-1]

    def project_declaration(self, children: list) -> ProjectDeclaration:
        type_guid, name, relative_path, project_guid = children
        return ProjectDeclaration(
            type_guid=type_guid,
            name=name,
            relative_path=relative_path,
            project_guid=project_guid,
        )

    def section_header(self, children: list) -> SectionHeader:
        kind, name, disposition = children
        return SectionHeader(
            kind=str(kind),
            name=str(name),
            disposition=str(disposition),
        )


def _parse_line(
    line: str,
    rule: str,
    line_number: int,
    filename: Optional[pathlib.Path] = None,
):
    try:
        tree = get_parser().parse(line.strip(), start=rule)
    except lark.UnexpectedInput as ex:
        raise ParseError(
            f"Malformed {rule.replace('_', ' ')}: {line.strip()!r}",
            line_number=line_number,
            filename=filename,
        ) from ex
    return DeclarationTransformer().transform(tree)


def parse_project_declaration(
    line: str, line_number: int = 1, filename: Optional[pathlib.Path] = None
) -> ProjectDeclaration:
    """Parse a ``Project(...) = ...`` line."""
    return _parse_line(line, "project_declaration", line_number, filename)


def parse_section_header(
    line: str, line_number: int = 1, filename: Optional[pathlib.Path] = None
) -> SectionHeader:
    """Parse a ``GlobalSection(...) = ...`` or ``ProjectSection(...) = ...`` line."""
    return _parse_line(line, "section_header", line_number, filename)


class SolutionParser:
    """
    Single-use reader producing the parts of a ``Solution``.

    Parameters
    ----------
    text : TokenizedText
        The tokenized solution file.
    filename : pathlib.Path, optional
        Used for error messages.
    """

    def __init__(self, text: TokenizedText, filename: Optional[pathlib.Path] = None):
        self.text = text
        self.filename = filename
        self._index = 0
        self.header_lines: List[str] = []
        self.projects: List[ProjectReference] = []
        self.sections: Dict[str, Section] = {}
        self.global_lines: List[str] = []
        self.trailing_lines: List[str] = []
        self.version: Optional[SolutionVersion] = None

    @property
    def at_end(self) -> bool:
        return self._index >= len(self.text.lines)

    def _peek(self) -> str:
        return self.text.lines[self._index]

    def _next(self) -> tuple[int, str]:
        line = self.text.lines[self._index]
        self._index += 1
        return self._index, line

    def _error(self, msg: str, line_number: int) -> ParseError:
        return ParseError(msg, line_number=line_number, filename=self.filename)

    @staticmethod
    def _is_block_start(line: str) -> bool:
        line = line.strip()
        return line.startswith(PROJECT_START) or line == GLOBAL_START

    def parse(self) -> SolutionParser:
        """Read the whole text; returns self."""
        self._read_header()
        global_seen = False
        while not self.at_end:
            line_number, line = self._next()
            stripped = line.strip()
            if global_seen:
                if stripped in STRUCTURE_MARKERS or stripped.startswith(BLOCK_PREFIXES):
                    raise self._error(f"Unexpected {stripped!r} after {GLOBAL_END}", line_number)
                self.trailing_lines.append(line)
            elif stripped.startswith(PROJECT_START):
                project = self._read_project(line_number, line)
                guid = normalize_guid(project.project_guid)
                if any(normalize_guid(other.project_guid) == guid for other in self.projects):
                    raise self._error(
                        f"Duplicate project GUID {project.project_guid}", line_number
                    )
                self.projects.append(project)
            elif stripped == GLOBAL_START:
                self._read_global(line_number)
                global_seen = True
            elif stripped in STRUCTURE_MARKERS or stripped.startswith(BLOCK_PREFIXES):
                raise self._error(f"Unexpected {stripped!r}", line_number)
            else:
                self.projects[-1].trailing_lines.append(line)

        if not global_seen:
            raise self._error(f"Missing {GLOBAL_START} block", max(len(self.text.lines), 1))

        while self.trailing_lines and not self.trailing_lines[-1].strip():
            self.trailing_lines.pop(-1)

        self._assign_nesting()
        return self

    def _read_header(self) -> None:
        while not self.at_end and not self._is_block_start(self._peek()):
            line_number, line = self._next()
            stripped = line.strip()
            if stripped.startswith(FORMAT_LINE_PREFIX) and not RE_FORMAT_LINE.match(stripped):
                raise self._error(f"Unrecognized format header: {stripped!r}", line_number)
            if stripped in STRUCTURE_MARKERS or stripped.startswith(BLOCK_PREFIXES):
                raise self._error(f"Unexpected {stripped!r} in header", line_number)
            self.header_lines.append(line)

        self.version = SolutionVersion.detect(self.header_lines)
        if self.version is None:
            self.version = SolutionVersion.oldest()
            logger.debug(
                "No known version framing in solution header; using %s", self.version
            )

    def _read_project(self, line_number: int, line: str) -> ProjectReference:
        declaration = parse_project_declaration(line, line_number, self.filename)
        project = ProjectReference(
            project_guid=declaration.project_guid,
            type_guid=declaration.type_guid,
            project_name=declaration.name,
            relative_path=declaration.relative_path,
        )
        while not self.at_end:
            inner_number, inner = self._next()
            stripped = inner.strip()
            if stripped == PROJECT_END:
                logger.debug("Found project %s (%s)", project.project_name, project.project_guid)
                return project
            if stripped.startswith(PROJECT_SECTION_START):
                project.sections.append(
                    self._read_section(inner_number, inner, PROJECT_SECTION_END)
                )
            elif self._is_block_start(stripped) or stripped in STRUCTURE_MARKERS:
                break
            elif project.sections:
                project.sections[-1].trailing_lines.append(inner)
            else:
                project.extra_lines.append(inner)

        raise self._error(
            f"Missing {PROJECT_END} for project {declaration.name!r}", line_number
        )

    def _read_section(self, line_number: int, line: str, end_marker: str) -> Section:
        header = parse_section_header(line, line_number, self.filename)
        expected_kind = end_marker[len("End"):]
        if header.kind != expected_kind:
            raise self._error(
                f"{header.kind} is not allowed here (expected {expected_kind})",
                line_number,
            )

        section = Section(name=header.name, disposition=header.disposition)
        while not self.at_end:
            _, inner = self._next()
            stripped = inner.strip()
            if stripped == end_marker:
                return section
            if stripped in STRUCTURE_MARKERS or stripped.startswith(BLOCK_PREFIXES):
                break
            section.properties.append(stripped)

        raise self._error(f"Missing {end_marker} for section {header.name!r}", line_number)

    def _read_global(self, line_number: int) -> None:
        while not self.at_end:
            inner_number, inner = self._next()
            stripped = inner.strip()
            if stripped == GLOBAL_END:
                return
            if stripped.startswith(GLOBAL_SECTION_START):
                section = self._read_section(inner_number, inner, GLOBAL_SECTION_END)
                if section.name in self.sections:
                    raise self._error(f"Duplicate section {section.name!r}", inner_number)
                self.sections[section.name] = section
            elif self._is_block_start(stripped) or stripped in STRUCTURE_MARKERS:
                break
            elif stripped.startswith(BLOCK_PREFIXES):
                raise self._error(f"Unexpected {stripped!r} in {GLOBAL_START}", inner_number)
            elif self.sections:
                list(self.sections.values())[-1].trailing_lines.append(inner)
            else:
                self.global_lines.append(inner)

        raise self._error(f"Missing {GLOBAL_END}", line_number)

    def _assign_nesting(self) -> None:
        nested = self.sections.get(NESTED_PROJECTS)
        if nested is None:
            return

        by_guid = {normalize_guid(project.project_guid): project for project in self.projects}
        for child_guid, parent_guid in nested.items():
            child = by_guid.get(normalize_guid(child_guid))
            if child is None:
                logger.debug("Nesting entry for unknown project %s", child_guid)
                continue
            child.nested_under = parent_guid


def parse_solution(
    source: Union[str, bytes],
    directory: AnyPath = ".",
    name: str = "",
    *,
    filename: Optional[AnyPath] = None,
    fs: Optional[SupportsFileAccess] = None,
    guid_factory: Optional[GuidFactory] = None,
) -> Solution:
    """
    Parse solution file contents.

    Parameters
    ----------
    source : str or bytes
        The solution (.sln) file contents.
    directory : AnyPath, optional
        The directory holding the solution; project paths are relative to it.
    name : str, optional
        The solution name.
    filename : AnyPath, optional
        The solution filename, for error messages.
    fs : SupportsFileAccess, optional
        File access for the resulting solution.
    guid_factory : callable, optional
        Identifier generator for projects added later.

    Returns
    -------
    Solution

    Raises
    ------
    FormatError
        If ``source`` cannot be decoded.
    ParseError
        On malformed or misplaced blocks, including a missing ``Global``
        block.  No partial solution is returned.
    """
    filename = pathlib.Path(filename) if filename is not None else None
    text = tokenize(source)
    parser = SolutionParser(text, filename=filename).parse()
    return Solution(
        directory=pathlib.Path(directory),
        name=name,
        version=parser.version,
        projects=parser.projects,
        sections=parser.sections,
        header_lines=parser.header_lines,
        global_lines=parser.global_lines,
        trailing_lines=parser.trailing_lines,
        newline=text.newline,
        byte_order_mark=text.byte_order_mark,
        fs=fs or LocalFileSystem(),
        guid_factory=guid_factory or new_guid,
    )
