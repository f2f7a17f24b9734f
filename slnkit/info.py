"""
`slnkit info` is a command-line utility to summarize Visual Studio solution
files: format version, projects (with their solution folder paths) and build
configurations.
"""
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .exceptions import StructureError
from .solution import ProjectReference, Solution
from .typing import AnyPath

try:
    import apischema
except ImportError:
    apischema = None


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
        "--json",
        dest="use_json",
        action="store_true",
        help="Output the summary as JSON",
    )
    return argparser


@dataclass
class ProjectSummary:
    name: str
    project_guid: str
    type_guid: str
    relative_path: str
    solution_path: Optional[str] = None
    is_solution_folder: bool = False

    @classmethod
    def from_reference(cls, reference: ProjectReference) -> ProjectSummary:
        try:
            solution_path = reference.solution_path
        except StructureError as ex:
            logger.warning("Unable to resolve solution path: %s", ex)
            solution_path = None

        return cls(
            name=reference.project_name,
            project_guid=reference.project_guid,
            type_guid=reference.type_guid,
            relative_path=reference.relative_path,
            solution_path=solution_path,
            is_solution_folder=reference.is_solution_folder,
        )


@dataclass
class SolutionSummary:
    filename: str
    version: str
    projects: List[ProjectSummary] = field(default_factory=list)
    configurations: List[str] = field(default_factory=list)
    sections: List[str] = field(default_factory=list)

    @classmethod
    def from_solution(cls, solution: Solution) -> SolutionSummary:
        return cls(
            filename=str(solution.filename),
            version=str(solution.version),
            projects=[
                ProjectSummary.from_reference(project)
                for project in solution.projects
            ],
            configurations=[
                configuration.key for configuration in solution.configurations()
            ],
            sections=list(solution.sections),
        )

    def __str__(self) -> str:
        lines = [
            f"Solution: {self.filename}",
            f"Version: {self.version}",
            "Projects:",
        ]
        for project in self.projects:
            if project.is_solution_folder:
                continue
            lines.append(
                f"    {project.solution_path or project.name} "
                f"({project.relative_path}) {project.project_guid}"
            )
        lines.append("Configurations:")
        lines.extend(f"    {configuration}" for configuration in self.configurations)
        return "\n".join(lines)


def main(filename: AnyPath, use_json: bool = False) -> SolutionSummary:
    """
    Summarize the given solution.
    """
    if use_json and apischema is None:
        raise RuntimeError(
            "Optional dependency apischema is required to output a JSON "
            "representation of a solution."
        )

    solution = Solution.load_from(filename)
    summary = SolutionSummary.from_solution(solution)
    if use_json:
        print(json.dumps(apischema.serialize(summary), indent=2))
    else:
        print(summary)
    return summary
