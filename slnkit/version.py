"""
``slnkit.version`` - solution file format versions and section conventions.

Solution files carry a few framing lines ahead of the first project:

    Microsoft Visual Studio Solution File, Format Version 12.00
    # Visual Studio 2013
    VisualStudioVersion = 12.0.21005.1
    MinimumVisualStudioVersion = 10.0.40219.1

Visual Studio also writes an empty line (after the UTF-8 byte order mark)
before the format line.
"""
from __future__ import annotations

import dataclasses
import enum
import re
from typing import Optional, Sequence

from .typing import GlobalDisposition, ProjectDisposition

FORMAT_LINE_PREFIX = "Microsoft Visual Studio Solution File"
PRODUCT_LINE_PREFIX = "# Visual Studio"
VISUAL_STUDIO_VERSION_KEY = "VisualStudioVersion"
MINIMUM_VISUAL_STUDIO_VERSION_KEY = "MinimumVisualStudioVersion"

RE_FORMAT_LINE = re.compile(
    r"^Microsoft Visual Studio Solution File, Format Version (?P<format>\d+\.\d+)$"
)


class SolutionVersion(enum.Enum):
    VS2008 = enum.auto()
    VS2010 = enum.auto()
    VS2012 = enum.auto()
    VS2013 = enum.auto()

    def __str__(self) -> str:
        return self.name

    @property
    def year(self) -> str:
        return self.name[len("VS"):]

    def get_format_version(self) -> str:
        return {
            SolutionVersion.VS2008: "10.00",
            SolutionVersion.VS2010: "11.00",
            SolutionVersion.VS2012: "12.00",
            SolutionVersion.VS2013: "12.00",
        }[self]

    def get_framing(self) -> tuple[str, ...]:
        """The header lines Visual Studio writes for this version."""
        framing = (
            "",
            f"{FORMAT_LINE_PREFIX}, Format Version {self.get_format_version()}",
            f"{PRODUCT_LINE_PREFIX} {self.year}",
        )
        if self is SolutionVersion.VS2013:
            framing += (
                f"{VISUAL_STUDIO_VERSION_KEY} = 12.0.21005.1",
                f"{MINIMUM_VISUAL_STUDIO_VERSION_KEY} = 10.0.40219.1",
            )
        return framing

    def matches(self, header_lines: Sequence[str]) -> bool:
        """Does the given solution header carry this version's framing?"""
        stripped = [line.strip() for line in header_lines]
        format_line = f"{FORMAT_LINE_PREFIX}, Format Version {self.get_format_version()}"
        if format_line not in stripped:
            return False

        # e.g., "# Visual Studio 2013" or "# Visual Studio Express 2013 for Web"
        return any(
            line.startswith(PRODUCT_LINE_PREFIX) and self.year in line.split()
            for line in stripped
        )

    @classmethod
    def detect(cls, header_lines: Sequence[str]) -> Optional[SolutionVersion]:
        """Find the version matching ``header_lines``, if any."""
        for version in cls:
            if version.matches(header_lines):
                return version
        return None

    @classmethod
    def oldest(cls) -> SolutionVersion:
        return min(cls, key=lambda version: version.value)


def is_framing_line(line: str) -> bool:
    """Is ``line`` one of the version-dependent header lines?"""
    line = line.strip()
    return not line or line.startswith(
        (
            FORMAT_LINE_PREFIX,
            PRODUCT_LINE_PREFIX,
            VISUAL_STUDIO_VERSION_KEY,
            MINIMUM_VISUAL_STUDIO_VERSION_KEY,
        )
    )


@dataclasses.dataclass(frozen=True)
class KnownSection:
    """Placement convention for a well-known section name."""
    name: str
    disposition: str


#: Global sections in the order Visual Studio writes them.  A newly created
#: section is inserted ahead of the first existing section that sorts after
#: it in this table; unknown sections sort last.
KNOWN_GLOBAL_SECTIONS: tuple[KnownSection, ...] = (
    KnownSection("TeamFoundationVersionControl", "preSolution"),
    KnownSection("SolutionConfigurationPlatforms", "preSolution"),
    KnownSection("ProjectConfigurationPlatforms", "postSolution"),
    KnownSection("SolutionProperties", "preSolution"),
    KnownSection("NestedProjects", "preSolution"),
    KnownSection("ExtensibilityGlobals", "postSolution"),
    KnownSection("ExtensibilityAddIns", "postSolution"),
)

KNOWN_PROJECT_SECTIONS: tuple[KnownSection, ...] = (
    KnownSection("WebsiteProperties", "preProject"),
    KnownSection("SolutionItems", "preProject"),
    KnownSection("ProjectDependencies", "postProject"),
)

DEFAULT_GLOBAL_DISPOSITION = "postSolution"
DEFAULT_PROJECT_DISPOSITION = "preProject"


def get_section_rank(name: str) -> int:
    """Canonical position of a global section; unknown names sort last."""
    for rank, section in enumerate(KNOWN_GLOBAL_SECTIONS):
        if section.name == name:
            return rank
    return len(KNOWN_GLOBAL_SECTIONS)


def get_global_disposition(name: str) -> GlobalDisposition:
    for section in KNOWN_GLOBAL_SECTIONS:
        if section.name == name:
            return section.disposition
    return DEFAULT_GLOBAL_DISPOSITION


def get_project_disposition(name: str) -> ProjectDisposition:
    for section in KNOWN_PROJECT_SECTIONS:
        if section.name == name:
            return section.disposition
    return DEFAULT_PROJECT_DISPOSITION
