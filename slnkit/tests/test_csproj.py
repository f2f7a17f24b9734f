import pathlib

import lxml.etree
import pytest

from ..csproj import (CSHARP_PROJECT_TYPE_GUID, DEFAULT_REFERENCES,
                      MSBUILD_NAMESPACE, CsProjFile)
from ..filesystem import MemoryFileSystem
from .conftest import TEMPLATE_PROJECT


@pytest.fixture
def template() -> CsProjFile:
    return CsProjFile.load(TEMPLATE_PROJECT)


def test_load_template(template: CsProjFile):
    assert template.name == "Project"
    assert template.filename == TEMPLATE_PROJECT
    assert template.project_type_guid == CSHARP_PROJECT_TYPE_GUID
    assert template.namespace == MSBUILD_NAMESPACE
    assert template.project_guid == "{00000000-0000-0000-0000-000000000000}"
    assert template.root_namespace == "TemplateProject"
    assert template.assembly_name == "TemplateProject"
    assert [reference.name for reference in template.references] == [
        *DEFAULT_REFERENCES,
        "FubuCore",
    ]


def test_find_reference(template: CsProjFile):
    fubu = template.find_reference("FubuCore")
    assert fubu.include.startswith("FubuCore, Version=1.0.0.0")
    assert fubu.hint_path == "..\\packages\\FubuCore\\lib\\FubuCore.dll"
    assert template.find_reference("System.Data").hint_path is None
    assert template.find_reference("System.Web") is None


def test_rename(template: CsProjFile):
    template.rename("Lib", guid="{C0000000-0000-4000-8000-000000000001}")
    assert template.name == "Lib"
    assert template.project_guid == "{C0000000-0000-4000-8000-000000000001}"
    assert template.root_namespace == "Lib"
    assert template.assembly_name == "Lib"
    # Everything else is left alone
    assert template.get_property("TargetFrameworkVersion") == "v4.0"
    assert len(template.references) == 5


def test_set_missing_property():
    csproj = CsProjFile.from_contents(
        f'<Project xmlns="{MSBUILD_NAMESPACE}"><ItemGroup /></Project>',
        name="Bare",
    )
    assert csproj.project_guid is None
    csproj.rename("Bare", guid="{C0000000-0000-4000-8000-000000000002}")
    assert csproj.project_guid == "{C0000000-0000-4000-8000-000000000002}"
    group = csproj.xml[0]
    assert lxml.etree.QName(group.tag).localname == "PropertyGroup"


def test_create_new():
    csproj = CsProjFile.create_new("Lib", guid="{C0000000-0000-4000-8000-000000000003}")
    assert csproj.name == "Lib"
    assert csproj.filename is None
    assert csproj.project_guid == "{C0000000-0000-4000-8000-000000000003}"
    assert csproj.root_namespace == "Lib"
    assert [reference.name for reference in csproj.references] == list(DEFAULT_REFERENCES)

    with pytest.raises(ValueError):
        csproj.save(fs=MemoryFileSystem())


def test_create_new_generates_guid():
    first = CsProjFile.create_new("Lib")
    second = CsProjFile.create_new("Lib")
    assert first.project_guid != second.project_guid
    assert first.project_guid.startswith("{") and first.project_guid.endswith("}")


def test_save_and_load():
    fs = MemoryFileSystem()
    csproj = CsProjFile.create_new("Lib")
    csproj.save(fs=fs, path="work/Lib/Lib.csproj")
    assert csproj.filename == pathlib.Path("work/Lib/Lib.csproj")

    contents = fs.read_text("work/Lib/Lib.csproj")
    assert contents.startswith('\ufeff<?xml version="1.0" encoding="utf-8"?>\r\n')
    assert "\r\n  <PropertyGroup>" in contents

    loaded = CsProjFile.load("work/Lib/Lib.csproj", fs=fs)
    assert loaded.name == "Lib"
    assert loaded.project_guid == csproj.project_guid
    assert loaded.to_contents() == contents


def test_save_on_disk(tmp_path, template: CsProjFile):
    template.rename("Lib", guid="{C0000000-0000-4000-8000-000000000004}")
    template.save(path=tmp_path / "Lib.csproj")
    loaded = CsProjFile.load(tmp_path / "Lib.csproj")
    assert loaded.project_guid == "{C0000000-0000-4000-8000-000000000004}"
    assert loaded.find_reference("System.Data") is not None
