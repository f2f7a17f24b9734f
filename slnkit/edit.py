"""
`slnkit edit` is a command-line utility to add and remove projects in a Visual
Studio solution file.  Unchanged parts of the solution are written back
exactly as they were.
"""
from __future__ import annotations

import argparse
import logging
import pathlib
from typing import List, Optional

from .solution import Solution
from .typing import AnyPath
from .version import SolutionVersion

DESCRIPTION = __doc__

logger = logging.getLogger(__name__)


def build_arg_parser(argparser=None):
    if argparser is None:
        argparser = argparse.ArgumentParser()

    argparser.description = DESCRIPTION
    argparser.formatter_class = argparse.RawTextHelpFormatter

    argparser.add_argument(
        "filename",
        type=str,
        help="Path to the solution file (.sln)",
    )

    argparser.add_argument(
        "--add",
        action="append",
        metavar="NAME",
        help="Add a new, blank project (no-op if already present)",
    )

    argparser.add_argument(
        "--add-template",
        action="append",
        nargs=2,
        metavar=("NAME", "TEMPLATE"),
        help="Create a project from a template project file",
    )

    argparser.add_argument(
        "--remove",
        action="append",
        metavar="NAME_OR_GUID",
        help="Remove a project (project files are left in place)",
    )

    argparser.add_argument(
        "--set-version",
        choices=[version.name for version in SolutionVersion],
        help="Rewrite the solution header for this format version",
    )

    argparser.add_argument(
        "--write-to",
        type=str,
        help="Write the solution to this path instead of overwriting it",
    )
    return argparser


def main(
    filename: AnyPath,
    add: Optional[List[str]] = None,
    add_template: Optional[List[List[str]]] = None,
    remove: Optional[List[str]] = None,
    set_version: Optional[str] = None,
    write_to: Optional[AnyPath] = None,
) -> Solution:
    """
    Edit the given solution and save it.
    """
    solution = Solution.load_from(filename)

    for name in remove or []:
        if not solution.remove_project(name):
            logger.warning("Project not found in solution: %s", name)

    for name in add or []:
        solution.add_project(name)

    for name, template in add_template or []:
        solution.add_project_from_template(name, template)

    if set_version is not None:
        solution.version = SolutionVersion[set_version]

    solution.save(pathlib.Path(write_to) if write_to else None)
    return solution
