"""
``slnkit.write`` - serialize a ``Solution`` back to solution file text.

Sections are written with Visual Studio's indentation (one tab for section
markers, two for properties).  The output always ends with exactly one line
terminator.
"""
from __future__ import annotations

import logging
from typing import List

from .lines import join_lines
from .solution import ProjectReference, Section, Solution

logger = logging.getLogger(__name__)

INDENT = "\t"


def section_to_lines(section: Section, kind: str) -> List[str]:
    """
    Lines for a ``GlobalSection`` or ``ProjectSection`` block.

    Parameters
    ----------
    section : Section
    kind : str
        "GlobalSection" or "ProjectSection".
    """
    lines = [f"{INDENT}{kind}({section.name}) = {section.disposition}"]
    lines.extend(
        f"{INDENT * 2}{line}" if line else ""
        for line in section.properties
    )
    lines.append(f"{INDENT}End{kind}")
    lines.extend(section.trailing_lines)
    return lines


def project_to_lines(project: ProjectReference) -> List[str]:
    """Lines for a ``Project(...) = ...`` through ``EndProject`` block."""
    lines = [
        f'Project("{project.type_guid}") = "{project.project_name}", '
        f'"{project.relative_path}", "{project.project_guid}"'
    ]
    lines.extend(project.extra_lines)
    for section in project.sections:
        lines.extend(section_to_lines(section, "ProjectSection"))
    lines.append("EndProject")
    lines.extend(project.trailing_lines)
    return lines


def global_to_lines(solution: Solution) -> List[str]:
    """Lines for the ``Global`` through ``EndGlobal`` block."""
    lines = ["Global"]
    lines.extend(solution.global_lines)
    for section in solution.sections.values():
        lines.extend(section_to_lines(section, "GlobalSection"))
    lines.append("EndGlobal")
    return lines


def _strip_trailing_blank_lines(lines: List[str]) -> List[str]:
    while lines and not lines[-1].strip():
        lines.pop(-1)
    return lines


def solution_to_lines(solution: Solution) -> List[str]:
    """All lines of the solution file, without terminators."""
    lines = solution.get_header_lines()
    for project in solution.projects:
        lines.extend(project_to_lines(project))
    lines.extend(global_to_lines(solution))
    lines.extend(solution.trailing_lines)
    return _strip_trailing_blank_lines(lines)


def write_solution(solution: Solution) -> str:
    """
    Serialize the solution.

    Parameters
    ----------
    solution : Solution

    Returns
    -------
    str
        The file contents, with the solution's line terminator and byte
        order mark.
    """
    lines = solution_to_lines(solution)
    logger.debug(
        "Writing solution %s: %d projects, %d sections, %d lines",
        solution.name, len(solution.projects), len(solution.sections), len(lines),
    )
    return join_lines(
        lines,
        newline=solution.newline,
        byte_order_mark=solution.byte_order_mark,
    )
