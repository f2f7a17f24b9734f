"""
``slnkit.solution`` - the Visual Studio solution (.sln) model.

A solution file looks like this (indentation is tabs)::

    Microsoft Visual Studio Solution File, Format Version 12.00
    # Visual Studio 2013
    VisualStudioVersion = 12.0.21005.1
    MinimumVisualStudioVersion = 10.0.40219.1
    Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}") = "client", "client", "{...}"
    EndProject
    Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "app", "app\\app.csproj", "{...}"
    EndProject
    Global
        GlobalSection(SolutionConfigurationPlatforms) = preSolution
            Debug|Any CPU = Debug|Any CPU
        EndGlobalSection
        GlobalSection(NestedProjects) = preSolution
            {app guid} = {client guid}
        EndGlobalSection
    EndGlobal

Section contents are kept as ordered raw lines; typed views such as
``Solution.configurations()`` are derived from them on demand.  Loading then
saving an unmodified solution reproduces the original text.
"""
from __future__ import annotations

import dataclasses
import logging
import os
import pathlib
from typing import ClassVar, Dict, Generator, List, Optional, Union

import packaging.version

from . import config, util
from .csproj import CsProjFile
from .exceptions import NameConflictError, StructureError
from .filesystem import LocalFileSystem
from .typing import AnyPath, GuidFactory, Self, SupportsFileAccess
from .version import (MINIMUM_VISUAL_STUDIO_VERSION_KEY,
                      VISUAL_STUDIO_VERSION_KEY, SolutionVersion,
                      get_global_disposition, get_project_disposition,
                      get_section_rank, is_framing_line)

logger = logging.getLogger(__name__)

SOLUTION_FOLDER_TYPE_GUID = "{2150E333-8FDC-42A3-9474-1A3956D46DE8}"

SOLUTION_CONFIGURATION_PLATFORMS = "SolutionConfigurationPlatforms"
PROJECT_CONFIGURATION_PLATFORMS = "ProjectConfigurationPlatforms"
SOLUTION_PROPERTIES = "SolutionProperties"
NESTED_PROJECTS = "NestedProjects"
PROJECT_DEPENDENCIES = "ProjectDependencies"

DEFAULT_CONFIGURATIONS = (
    "Debug|Any CPU = Debug|Any CPU",
    "Debug|x86 = Debug|x86",
    "Release|Any CPU = Release|Any CPU",
    "Release|x86 = Release|x86",
)

PROPERTY_SEPARATOR = " = "


def split_property(line: str) -> tuple[str, str]:
    """Split ``key = value`` at the first equals sign."""
    key, sep, value = line.partition("=")
    if not sep:
        return line.strip(), ""
    return key.strip(), value.strip()


@dataclasses.dataclass
class Section:
    """
    A ``GlobalSection`` or ``ProjectSection`` block.

    The properties are the stripped body lines, in file order; duplicates are
    kept.
    """

    #: The section name, e.g. "SolutionConfigurationPlatforms".
    name: str
    #: preSolution/postSolution (global) or preProject/postProject (project).
    disposition: str
    #: The body lines, without indentation.
    properties: List[str] = dataclasses.field(default_factory=list)
    #: Unrecognized lines following the end of this section, kept verbatim.
    trailing_lines: List[str] = dataclasses.field(default_factory=list)

    def items(self) -> Generator[tuple[str, str], None, None]:
        """Yield ``(key, value)`` for each property line."""
        for line in self.properties:
            if line:
                yield split_property(line)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for item_key, value in self.items():
            if item_key == key:
                return value
        return default

    def add_property(self, key: str, value: str) -> str:
        line = f"{key}{PROPERTY_SEPARATOR}{value}"
        self.properties.append(line)
        return line

    def remove_where(self, predicate) -> int:
        """Remove property lines where ``predicate(key, value)``; return the count."""
        kept = [
            line for line in self.properties
            if not (line and predicate(*split_property(line)))
        ]
        removed = len(self.properties) - len(kept)
        self.properties[:] = kept
        return removed


@dataclasses.dataclass(frozen=True)
class BuildConfiguration:
    """
    A solution build configuration, e.g. ``Debug|Any CPU = Debug|Any CPU``.

    Equality only considers the configuration and platform names.
    """

    configuration: str
    platform: str
    value: str = dataclasses.field(default="", compare=False)

    @property
    def key(self) -> str:
        return f"{self.configuration}|{self.platform}"

    def __str__(self) -> str:
        return f"{self.key}{PROPERTY_SEPARATOR}{self.value or self.key}"

    @classmethod
    def from_line(cls: type[Self], line: str) -> Self:
        key, value = split_property(line)
        configuration, _, platform = key.partition("|")
        return cls(
            configuration=configuration.strip(),
            platform=platform.strip(),
            value=value,
        )


@dataclasses.dataclass
class ProjectReference:
    """A ``Project(...) = ...`` entry of a solution."""

    #: The globally unique identifier for the project, e.g. "{5B1D...}".
    project_guid: str
    #: The project type identifier.
    type_guid: str
    #: The project name.
    project_name: str
    #: The path from the solution directory, as written (likely with
    #: backslashes).  Solution folders use their name here.
    relative_path: str
    #: The GUID of the solution folder this project is nested under.
    nested_under: Optional[str] = None
    #: ``ProjectSection`` blocks, in file order.
    sections: List[Section] = dataclasses.field(default_factory=list)
    #: Unrecognized lines between the declaration and the first section.
    extra_lines: List[str] = dataclasses.field(default_factory=list)
    #: Unrecognized lines following ``EndProject``.
    trailing_lines: List[str] = dataclasses.field(default_factory=list)
    #: The owning solution.
    solution: Optional[Solution] = dataclasses.field(
        default=None, repr=False, compare=False
    )
    #: The loaded project file, if any.
    loaded: Optional[CsProjFile] = dataclasses.field(
        default=None, repr=False, compare=False
    )
    #: The loaded project file was created in memory and has not been saved.
    unsaved: bool = dataclasses.field(default=False, repr=False, compare=False)

    @property
    def is_solution_folder(self) -> bool:
        return util.guids_equal(self.type_guid, SOLUTION_FOLDER_TYPE_GUID)

    @property
    def solution_path(self) -> str:
        """
        The project's path within the solution's folder tree.

        For "app" in solution folder "client", this is ``client/app`` (with
        the platform path separator).

        Raises
        ------
        StructureError
            If the folder chain loops, refers to an unknown GUID, or passes
            through something other than a solution folder.
        """
        projects = self.solution.projects if self.solution is not None else [self]
        return resolve_solution_path(self, projects)

    def find_section(self, name: str) -> Optional[Section]:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def get_or_create_section(self, name: str) -> Section:
        section = self.find_section(name)
        if section is None:
            section = Section(name=name, disposition=get_project_disposition(name))
            self.sections.append(section)
        return section

    def local_path(self) -> Optional[pathlib.Path]:
        """The project file's path on this machine, if it can be found."""
        if self.solution is None:
            return None
        path = util.from_windows_path(self.solution.directory, self.relative_path)
        if isinstance(self.solution.fs, LocalFileSystem):
            try:
                return util.fix_case_insensitive_path(path)
            except FileNotFoundError:
                logger.debug("Unable to find local file for project: %s", path)
        return path

    @property
    def project(self) -> CsProjFile:
        """The referenced project file, loaded on first access."""
        if self.loaded is not None:
            return self.loaded

        if self.is_solution_folder:
            raise ValueError(
                f"Solution folder {self.project_name!r} has no project file"
            )

        path = self.local_path()
        if path is None:
            raise FileNotFoundError(
                f"File from project settings not found: {self.relative_path}"
            )

        fs = self.solution.fs if self.solution is not None else LocalFileSystem()
        self.loaded = CsProjFile.load(path, fs=fs)
        return self.loaded


def resolve_solution_path(
    reference: ProjectReference,
    projects: List[ProjectReference],
) -> str:
    """
    Walk the ``nested_under`` chain of ``reference`` up to the root.

    Parameters
    ----------
    reference : ProjectReference
    projects : list of ProjectReference
        All projects in the solution; indexed by GUID here.

    Returns
    -------
    str
        Folder names from the root, then the project name, joined by os.sep.
    """
    by_guid = {util.normalize_guid(project.project_guid): project for project in projects}
    names = [reference.project_name]
    visited = {util.normalize_guid(reference.project_guid)}
    parent_guid = reference.nested_under
    while parent_guid is not None:
        key = util.normalize_guid(parent_guid)
        if key in visited:
            raise StructureError(
                f"Cycle in solution folder nesting of {reference.project_name!r} "
                f"at {parent_guid}"
            )
        visited.add(key)

        parent = by_guid.get(key)
        if parent is None:
            raise StructureError(
                f"{names[-1]!r} is nested under unknown project {parent_guid}"
            )
        if not parent.is_solution_folder:
            raise StructureError(
                f"{names[-1]!r} is nested under {parent.project_name!r}, which "
                f"is not a solution folder"
            )
        names.append(parent.project_name)
        parent_guid = parent.nested_under

    return os.sep.join(reversed(names))


ProjectLike = Union[ProjectReference, CsProjFile, str]


@dataclasses.dataclass
class Solution:
    """A container for a Visual Studio solution (.sln)."""

    file_extension: ClassVar[str] = ".sln"
    #: The directory containing the solution file.
    directory: pathlib.Path
    #: The solution name (file name without extension).
    name: str
    #: The format version.
    version: SolutionVersion
    #: Project entries, in file order.
    projects: List[ProjectReference] = dataclasses.field(default_factory=list)
    #: Global sections by name, in file order.
    sections: Dict[str, Section] = dataclasses.field(default_factory=dict)
    #: Header lines as loaded; empty to use the version's framing.
    header_lines: List[str] = dataclasses.field(default_factory=list)
    #: Unrecognized lines between ``Global`` and the first global section.
    global_lines: List[str] = dataclasses.field(default_factory=list)
    #: Non-blank content following ``EndGlobal``.
    trailing_lines: List[str] = dataclasses.field(default_factory=list)
    #: The line terminator to write.
    newline: str = "\r\n"
    #: Write a UTF-8 byte order mark.
    byte_order_mark: bool = True
    #: File access for loading/saving the solution and its projects.
    fs: SupportsFileAccess = dataclasses.field(
        default_factory=LocalFileSystem, repr=False, compare=False
    )
    #: Identifier generator for new projects.
    guid_factory: GuidFactory = dataclasses.field(
        default=util.new_guid, repr=False, compare=False
    )

    def __post_init__(self):
        self.directory = pathlib.Path(self.directory)
        for project in self.projects:
            project.solution = self

    @property
    def filename(self) -> pathlib.Path:
        return self.directory / f"{self.name}{self.file_extension}"

    @property
    def projects_by_name(self) -> Dict[str, ProjectReference]:
        return {project.project_name: project for project in self.projects}

    def get_header_lines(self) -> List[str]:
        """
        The header lines to write.

        Loaded header lines are reused as long as they still match
        ``version``; otherwise the version's framing is written, followed by
        any non-framing lines from the loaded header.
        """
        if self.header_lines and SolutionVersion.detect(self.header_lines) is self.version:
            return list(self.header_lines)

        extra = [line for line in self.header_lines if not is_framing_line(line)]
        return list(self.version.get_framing()) + extra

    def _get_header_version(self, key: str) -> Optional[packaging.version.Version]:
        for line in self.get_header_lines():
            line_key, value = split_property(line)
            if line_key == key and value:
                return packaging.version.parse(value)
        return None

    @property
    def visual_studio_version(self) -> Optional[packaging.version.Version]:
        """The ``VisualStudioVersion`` header value (VS2013 and later)."""
        return self._get_header_version(VISUAL_STUDIO_VERSION_KEY)

    @property
    def minimum_visual_studio_version(self) -> Optional[packaging.version.Version]:
        """The ``MinimumVisualStudioVersion`` header value (VS2013 and later)."""
        return self._get_header_version(MINIMUM_VISUAL_STUDIO_VERSION_KEY)

    # Sections

    def find_section(self, name: str) -> Optional[Section]:
        """Get the global section ``name``, or None."""
        return self.sections.get(name)

    def get_or_create_section(self, name: str) -> Section:
        """Get the global section ``name``, creating it in its usual position."""
        section = self.find_section(name)
        if section is not None:
            return section

        section = Section(name=name, disposition=get_global_disposition(name))
        rank = get_section_rank(name)
        ordered = list(self.sections.values())
        index = next(
            (
                idx for idx, existing in enumerate(ordered)
                if get_section_rank(existing.name) > rank
            ),
            len(ordered),
        )
        ordered.insert(index, section)
        self.sections = {existing.name: existing for existing in ordered}
        logger.debug("Created section %s at position %d", name, index)
        return section

    def configurations(self) -> List[BuildConfiguration]:
        """The solution build configurations, in file order."""
        section = self.find_section(SOLUTION_CONFIGURATION_PLATFORMS)
        if section is None:
            return []
        return [
            BuildConfiguration.from_line(line)
            for line in section.properties
            if line
        ]

    # Project lookup

    def find_project(self, name: str) -> Optional[ProjectReference]:
        """Find a project by name, or None."""
        for project in self.projects:
            if project.project_name == name:
                return project
        return None

    def find_project_by_guid(self, guid: str) -> Optional[ProjectReference]:
        """Find a project by GUID (braces and case are ignored), or None."""
        for project in self.projects:
            if util.guids_equal(project.project_guid, guid):
                return project
        return None

    def _find(self, project: ProjectLike) -> Optional[ProjectReference]:
        if isinstance(project, ProjectReference):
            return project if any(p is project for p in self.projects) else None
        if isinstance(project, CsProjFile):
            if project.project_guid:
                found = self.find_project_by_guid(project.project_guid)
                if found is not None:
                    return found
            return self.find_project(project.name)
        return self.find_project_by_guid(project) or self.find_project(project)

    def get_nested_children(self, folder: ProjectReference) -> List[ProjectReference]:
        """Projects directly nested under ``folder``."""
        children: Dict[str, List[ProjectReference]] = {}
        for project in self.projects:
            if project.nested_under is not None:
                key = util.normalize_guid(project.nested_under)
                children.setdefault(key, []).append(project)
        return children.get(util.normalize_guid(folder.project_guid), [])

    # Project repository operations

    def _new_unique_guid(self, preferred: Optional[str] = None) -> str:
        if preferred and self.find_project_by_guid(preferred) is None:
            return preferred
        while True:
            guid = self.guid_factory()
            if self.find_project_by_guid(guid) is None:
                return guid

    def _register(self, reference: ProjectReference) -> ProjectReference:
        reference.solution = self
        self.projects.append(reference)
        logger.debug(
            "Added project %s (%s) at %s",
            reference.project_name, reference.project_guid, reference.relative_path,
        )
        if not reference.is_solution_folder:
            self._add_project_configurations(reference)
        return reference

    def _add_project_configurations(self, reference: ProjectReference) -> None:
        configurations = self.configurations()
        if not configurations:
            return

        section = self.get_or_create_section(PROJECT_CONFIGURATION_PLATFORMS)
        for configuration in configurations:
            for suffix in ("ActiveCfg", "Build.0"):
                section.add_property(
                    f"{reference.project_guid}.{configuration.key}.{suffix}",
                    configuration.value or configuration.key,
                )

    def add_project(self, project: Union[str, CsProjFile]) -> ProjectReference:
        """
        Add a project, unless one with the same name is already present.

        Parameters
        ----------
        project : str or CsProjFile
            A name, to create a new blank project at ``<name>\\<name>.csproj``
            (written on ``save``), or an existing project file.

        Returns
        -------
        ProjectReference
            The new reference, or the existing one of the same name.
        """
        name = project if isinstance(project, str) else project.name
        existing = self.find_project(name)
        if existing is not None:
            logger.debug("Project %s is already in the solution", name)
            return existing

        relative_path = util.to_windows_path(
            pathlib.PurePath(name) / f"{name}{CsProjFile.file_extension}"
        )
        if isinstance(project, str):
            guid = self._new_unique_guid()
            csproj = CsProjFile.create_new(
                name,
                guid=guid,
                filename=util.from_windows_path(self.directory, relative_path),
            )
            unsaved = True
        else:
            csproj = project
            guid = self._new_unique_guid(preferred=csproj.project_guid)
            if csproj.filename is not None:
                relative_path = util.relative_windows_path(csproj.filename, self.directory)
            unsaved = csproj.filename is None
            if unsaved:
                csproj.filename = util.from_windows_path(self.directory, relative_path)
            if guid != csproj.project_guid:
                # Taken by another project (or missing): re-identify the file
                csproj.set_property("ProjectGuid", guid)
                unsaved = True

        return self._register(
            ProjectReference(
                project_guid=guid,
                type_guid=csproj.project_type_guid,
                project_name=name,
                relative_path=relative_path,
                loaded=csproj,
                unsaved=unsaved,
            )
        )

    def add_project_from_template(
        self, name: str, template_path: AnyPath
    ) -> ProjectReference:
        """
        Create project ``name`` from a template project file and add it.

        The template is copied to ``<solution directory>/<name>/<name>.csproj``
        and given a new identity (ProjectGuid, RootNamespace, AssemblyName).

        Raises
        ------
        NameConflictError
            If a project named ``name`` is already in the solution.
        """
        if self.find_project(name) is not None:
            raise NameConflictError(
                f"Project {name!r} already exists in solution {self.name!r}",
                name=name,
            )

        target = self.directory / name / f"{name}{CsProjFile.file_extension}"
        self.fs.makedirs(target.parent)
        self.fs.copy(template_path, target)

        csproj = CsProjFile.load(target, fs=self.fs)
        csproj.rename(name, guid=self._new_unique_guid())
        csproj.save(fs=self.fs)
        logger.debug("Created project %s from template %s", name, template_path)
        return self.add_project(csproj)

    def add_solution_folder(
        self, name: str, parent: Optional[ProjectReference] = None
    ) -> ProjectReference:
        """Add a solution folder (optionally inside ``parent``), or get the existing one."""
        folder = self.find_project(name)
        if folder is None:
            folder = self._register(
                ProjectReference(
                    project_guid=self._new_unique_guid(),
                    type_guid=SOLUTION_FOLDER_TYPE_GUID,
                    project_name=name,
                    relative_path=name,
                )
            )
        if parent is not None:
            self.nest_project(folder, parent)
        return folder

    def nest_project(self, child: ProjectReference, folder: ProjectReference) -> None:
        """Place ``child`` inside solution folder ``folder``."""
        if not folder.is_solution_folder:
            raise StructureError(
                f"Cannot nest {child.project_name!r} under "
                f"{folder.project_name!r}: not a solution folder"
            )

        section = self.get_or_create_section(NESTED_PROJECTS)
        section.remove_where(
            lambda key, _: util.guids_equal(key, child.project_guid)
        )
        section.add_property(child.project_guid, folder.project_guid)
        child.nested_under = folder.project_guid

    def remove_project(self, project: ProjectLike) -> bool:
        """
        Remove a project from the solution; its files are left alone.

        Parameters
        ----------
        project : ProjectReference, CsProjFile or str
            The reference, its project file, or its GUID or name.

        Returns
        -------
        bool
            False if the project was not in the solution.
        """
        reference = self._find(project)
        if reference is None:
            logger.debug("Project to remove not found: %s", project)
            return False

        guid = reference.project_guid
        self.projects[:] = [p for p in self.projects if p is not reference]
        reference.solution = None

        for child in self.projects:
            if child.nested_under is not None and util.guids_equal(child.nested_under, guid):
                child.nested_under = None

        nested = self.find_section(NESTED_PROJECTS)
        if nested is not None:
            nested.remove_where(
                lambda key, value: util.guids_equal(key, guid) or util.guids_equal(value, guid)
            )

        for other in self.projects:
            dependencies = other.find_section(PROJECT_DEPENDENCIES)
            if dependencies is not None:
                dependencies.remove_where(
                    lambda key, value: util.guids_equal(key, guid) or util.guids_equal(value, guid)
                )
                if not dependencies.properties and not dependencies.trailing_lines:
                    other.sections.remove(dependencies)

        configurations = self.find_section(PROJECT_CONFIGURATION_PLATFORMS)
        if configurations is not None:
            # e.g. {GUID}.Debug|Any CPU.ActiveCfg = Debug|Any CPU
            configurations.remove_where(
                lambda key, _: util.guids_equal(key.split(".", 1)[0], guid)
            )

        logger.debug("Removed project %s (%s)", reference.project_name, guid)
        return True

    # Loading and saving

    def to_contents(self) -> str:
        """Serialize the solution to text."""
        from .write import write_solution
        return write_solution(self)

    def save(self, path: Optional[AnyPath] = None) -> None:
        """
        Save the solution, and any project files it created, through ``fs``.

        Parameters
        ----------
        path : AnyPath, optional
            Where to write the solution.  Defaults to ``filename``.
        """
        path = pathlib.Path(path) if path is not None else self.filename
        for project in self.projects:
            if project.unsaved and project.loaded is not None:
                project.loaded.save(fs=self.fs)
                project.unsaved = False

        logger.debug("Saving solution %s to %s", self.name, path)
        self.fs.write_text(path, self.to_contents())

    @classmethod
    def create_new(
        cls: type[Self],
        directory: AnyPath,
        name: str,
        *,
        version: Optional[SolutionVersion] = None,
        fs: Optional[SupportsFileAccess] = None,
        guid_factory: Optional[GuidFactory] = None,
    ) -> Self:
        """
        Create an empty solution with the default build configurations.

        Nothing is written until ``save()``.
        """
        solution = cls(
            directory=pathlib.Path(directory),
            name=name,
            version=version or SolutionVersion[config.SLNKIT_DEFAULT_VERSION],
            newline=config.SLNKIT_NEWLINE,
            byte_order_mark=True,
            fs=fs or LocalFileSystem(),
            guid_factory=guid_factory or util.new_guid,
        )
        solution.get_or_create_section(SOLUTION_CONFIGURATION_PLATFORMS).properties.extend(
            DEFAULT_CONFIGURATIONS
        )
        solution.get_or_create_section(SOLUTION_PROPERTIES).add_property(
            "HideSolutionNode", "FALSE"
        )
        return solution

    @classmethod
    def from_contents(
        cls: type[Self],
        solution_source: Union[str, bytes],
        directory: AnyPath,
        name: str = "",
        *,
        filename: Optional[pathlib.Path] = None,
        fs: Optional[SupportsFileAccess] = None,
        guid_factory: Optional[GuidFactory] = None,
    ) -> Self:
        """Parse solution text; see ``slnkit.parse.parse_solution``."""
        from .parse import parse_solution
        return parse_solution(
            solution_source,
            directory=directory,
            name=name,
            filename=filename,
            fs=fs,
            guid_factory=guid_factory,
        )

    @classmethod
    def load_from(
        cls: type[Self],
        filename: AnyPath,
        *,
        fs: Optional[SupportsFileAccess] = None,
        guid_factory: Optional[GuidFactory] = None,
    ) -> Self:
        """Load a solution file through ``fs`` (defaults to the local disk)."""
        fs = fs or LocalFileSystem()
        filename = pathlib.Path(filename)
        return cls.from_contents(
            fs.read_text(filename),
            directory=filename.parent,
            name=filename.stem,
            filename=filename,
            fs=fs,
            guid_factory=guid_factory,
        )
