"""
``slnkit.csproj`` - just enough of the C# project (.csproj) file model for
solutions to work with.

Supported: project identity (name, ``ProjectGuid``, ``RootNamespace``,
``AssemblyName``), assembly reference lookup, creating a blank project and
re-identifying a copied template.
"""
from __future__ import annotations

import dataclasses
import functools
import logging
import pathlib
from typing import ClassVar, Optional, Union

import lxml.etree

from . import util
from .filesystem import LocalFileSystem
from .typing import AnyPath, Self, SupportsFileAccess

logger = logging.getLogger(__name__)

MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"
CSHARP_PROJECT_TYPE_GUID = "{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}"

#: Assemblies referenced by a newly created project.
DEFAULT_REFERENCES = (
    "System",
    "System.Core",
    "System.Data",
    "System.Xml",
)


@functools.lru_cache(maxsize=2048)
def strip_xml_namespace(tag: str) -> str:
    """Strip off {{namespace}} from: {{namespace}}tag."""
    return lxml.etree.QName(tag).localname


def parse_xml_contents(contents: Union[bytes, str]) -> lxml.etree.Element:
    """Parse the given XML contents with lxml.etree."""
    if isinstance(contents, str):
        contents = contents.encode("utf-8")
    return lxml.etree.fromstring(contents)


@dataclasses.dataclass
class AssemblyReference:
    """A ``<Reference Include="..."/>`` item."""

    #: The simple assembly name, e.g. "System.Data".
    name: str
    #: The full Include attribute, which may carry version information.
    include: str
    #: The optional HintPath child.
    hint_path: Optional[str] = None

    @classmethod
    def from_xml(cls: type[Self], xml: lxml.etree.Element) -> Self:
        include = xml.attrib.get("Include", "")
        hint_path = None
        for child in xml:
            if isinstance(child.tag, str) and strip_xml_namespace(child.tag) == "HintPath":
                hint_path = child.text
        return cls(
            name=include.split(",")[0].strip(),
            include=include,
            hint_path=hint_path,
        )


@dataclasses.dataclass
class CsProjFile:
    """A C# project file, backed by its lxml document."""

    file_extension: ClassVar[str] = ".csproj"
    #: The root ``<Project>`` element.
    xml: lxml.etree.Element
    #: The project name, by convention the file name without its extension.
    name: str
    #: Where the project is (or will be) saved.
    filename: Optional[pathlib.Path] = None
    #: The project type identifier used in solution files.
    project_type_guid: str = CSHARP_PROJECT_TYPE_GUID

    @property
    def namespace(self) -> str:
        return self.xml.xpath("namespace-uri()")

    def _tag(self, name: str) -> str:
        namespace = self.namespace
        return f"{{{namespace}}}{name}" if namespace else name

    def get_property(self, name: str) -> Optional[str]:
        """Get the first ``PropertyGroup`` value named ``name``."""
        for group in self.xml.iterchildren(self._tag("PropertyGroup")):
            element = group.find(self._tag(name))
            if element is not None:
                return element.text
        return None

    def set_property(self, name: str, value: str) -> None:
        """Set a property, adding it to the first ``PropertyGroup`` if needed."""
        groups = list(self.xml.iterchildren(self._tag("PropertyGroup")))
        for group in groups:
            element = group.find(self._tag(name))
            if element is not None:
                element.text = value
                return

        if groups:
            group = groups[0]
        else:
            group = lxml.etree.Element(self._tag("PropertyGroup"))
            self.xml.insert(0, group)
        lxml.etree.SubElement(group, self._tag(name)).text = value

    @property
    def project_guid(self) -> Optional[str]:
        return self.get_property("ProjectGuid")

    @property
    def root_namespace(self) -> Optional[str]:
        return self.get_property("RootNamespace")

    @property
    def assembly_name(self) -> Optional[str]:
        return self.get_property("AssemblyName")

    @property
    def references(self) -> list[AssemblyReference]:
        return [
            AssemblyReference.from_xml(element)
            for element in self.xml.iter(self._tag("Reference"))
        ]

    def find_reference(self, name: str) -> Optional[AssemblyReference]:
        """Find an assembly reference by its simple name."""
        for reference in self.references:
            if reference.name == name:
                return reference
        return None

    def rename(self, name: str, guid: str) -> None:
        """Give the project a new identity, as when instantiating a template."""
        logger.debug("Renaming project %s -> %s (%s)", self.name, name, guid)
        self.name = name
        self.set_property("ProjectGuid", guid)
        self.set_property("RootNamespace", name)
        self.set_property("AssemblyName", name)

    def to_contents(self, delimiter: str = "\r\n") -> str:
        return util.tree_to_xml_source(self.xml, delimiter=delimiter)

    def save(
        self,
        fs: Optional[SupportsFileAccess] = None,
        path: Optional[AnyPath] = None,
    ) -> None:
        """Save the project to ``path`` (or its own filename) through ``fs``."""
        fs = fs or LocalFileSystem()
        if path is not None:
            self.filename = pathlib.Path(path)
        if self.filename is None:
            raise ValueError(f"No filename set for project {self.name!r}")

        fs.makedirs(self.filename.parent)
        fs.write_text(self.filename, self.to_contents())

    @classmethod
    def create_new(
        cls: type[Self],
        name: str,
        guid: Optional[str] = None,
        filename: Optional[AnyPath] = None,
    ) -> Self:
        """Create a blank C# class library project."""
        project = lxml.etree.Element(
            f"{{{MSBUILD_NAMESPACE}}}Project",
            nsmap={None: MSBUILD_NAMESPACE},
        )
        project.attrib["ToolsVersion"] = "4.0"
        project.attrib["DefaultTargets"] = "Build"

        def add(parent: lxml.etree.Element, tag: str, text: Optional[str] = None,
                **attrib: str) -> lxml.etree.Element:
            element = lxml.etree.SubElement(parent, f"{{{MSBUILD_NAMESPACE}}}{tag}", attrib)
            element.text = text
            return element

        properties = add(project, "PropertyGroup")
        add(properties, "Configuration", "Debug", Condition=" '$(Configuration)' == '' ")
        add(properties, "Platform", "AnyCPU", Condition=" '$(Platform)' == '' ")
        add(properties, "ProjectGuid", guid or util.new_guid())
        add(properties, "OutputType", "Library")
        add(properties, "RootNamespace", name)
        add(properties, "AssemblyName", name)
        add(properties, "TargetFrameworkVersion", "v4.0")

        references = add(project, "ItemGroup")
        for reference in DEFAULT_REFERENCES:
            add(references, "Reference", Include=reference)

        add(project, "Import", Project=r"$(MSBuildToolsPath)\Microsoft.CSharp.targets")
        return cls(
            xml=project,
            name=name,
            filename=pathlib.Path(filename) if filename is not None else None,
        )

    @classmethod
    def from_contents(
        cls: type[Self],
        contents: Union[str, bytes],
        filename: Optional[AnyPath] = None,
        name: Optional[str] = None,
    ) -> Self:
        filename = pathlib.Path(filename) if filename is not None else None
        if name is None:
            name = filename.stem if filename is not None else ""
        return cls(
            xml=parse_xml_contents(contents),
            name=name,
            filename=filename,
        )

    @classmethod
    def load(
        cls: type[Self],
        filename: AnyPath,
        fs: Optional[SupportsFileAccess] = None,
    ) -> Self:
        """
        Load a project file.

        Parameters
        ----------
        filename : AnyPath
        fs : SupportsFileAccess, optional
            File access; defaults to the local disk.

        Returns
        -------
        CsProjFile
        """
        fs = fs or LocalFileSystem()
        return cls.from_contents(fs.read_text(filename), filename=filename)
