from __future__ import annotations

import json
import os
import shutil
import sys
from typing import List

import pytest
from pytest import param

from ..edit import main as edit_main
from ..info import main as info_main
from ..main import COMMANDS, DESCRIPTION
from ..main import main as slnkit_main
from ..solution import Solution
from ..version import SolutionVersion
from . import conftest


@pytest.fixture
def widgets_sln(tmp_path):
    filename = tmp_path / "Widgets.sln"
    shutil.copyfile(conftest.SOLUTION_PATH / "Widgets.sln", filename)
    return filename


def test_info_cli(solution_filename: str, capsys):
    summary = info_main(solution_filename)
    assert summary.version in {version.name for version in SolutionVersion}
    assert f"Version: {summary.version}" in capsys.readouterr().out


def test_info_nested_paths():
    summary = info_main(conftest.SOLUTION_PATH / "NestedSolution.sln")
    paths = {project.name: project.solution_path for project in summary.projects}
    assert paths["deploy"].split(os.sep) == ["tools", "build", "deploy"]
    assert summary.configurations == ["Debug|Any CPU", "Release|Any CPU"]


@pytest.mark.skipif(conftest.APISCHEMA_SKIP, reason="apischema unavailable")
def test_info_json(capsys):
    info_main(conftest.SOLUTION_PATH / "Widgets.sln", use_json=True)
    serialized = json.loads(capsys.readouterr().out)
    assert serialized["version"] == "VS2012"
    assert [project["name"] for project in serialized["projects"]][:2] == [
        "Solution Items",
        "Widgets",
    ]


def test_edit_cli(widgets_sln):
    solution = edit_main(
        widgets_sln,
        add=["Extra"],
        add_template=[["Lib", str(conftest.TEMPLATE_PROJECT)]],
        remove=["Widgets.Docs", "NotThere"],
    )
    assert (widgets_sln.parent / "Extra" / "Extra.csproj").exists()
    assert (widgets_sln.parent / "Lib" / "Lib.csproj").exists()

    reloaded = Solution.load_from(widgets_sln)
    assert reloaded.to_contents() == solution.to_contents()
    names = [project.project_name for project in reloaded.projects]
    assert "Widgets.Docs" not in names
    assert names[-2:] == ["Extra", "Lib"]


def test_edit_cli_set_version(widgets_sln, tmp_path):
    target = tmp_path / "Converted.sln"
    edit_main(widgets_sln, set_version="VS2013", write_to=target)
    converted = Solution.load_from(target)
    assert converted.version is SolutionVersion.VS2013
    assert Solution.load_from(widgets_sln).version is SolutionVersion.VS2012


@pytest.mark.parametrize(
    "args",
    [
        param(
            ["--help"],
            id="top-help",
        ),
        param(
            ["info", "--help"],
            id="info-help",
        ),
        param(
            ["edit", "--help"],
            id="edit-help",
        ),
    ]
)
def test_slnkit_main_help(monkeypatch, args: List[str]):
    monkeypatch.setattr(sys, "argv", ["slnkit", *args])
    try:
        slnkit_main()
    except SystemExit as ex:
        assert ex.code == 0


@pytest.mark.parametrize(
    "args",
    [
        param(
            ["info", "filename"],
            id="info",
        ),
        param(
            ["--log", "DEBUG", "info", "filename"],
            id="info-debug",
        ),
        param(
            ["edit", "filename", "--add", "Extra", "--remove", "Widgets"],
            id="edit",
        ),
        param(
            ["edit", "filename", "--set-version", "VS2008"],
            id="edit-version",
        ),
    ]
)
def test_slnkit_main(monkeypatch, widgets_sln, args: List[str]):
    args = [str(widgets_sln) if arg == "filename" else arg for arg in args]
    monkeypatch.setattr(sys, "argv", ["slnkit", *args])
    slnkit_main()


def test_slnkit_main_parse_error(tmp_path):
    filename = tmp_path / "Broken.sln"
    filename.write_text(
        "\nMicrosoft Visual Studio Solution File, Format Version 11.00\n"
        "# Visual Studio 2010\n"
        'Project("{A}") = "a", "a\\a.csproj", "{B}"\n'
        "Global\nEndGlobal\n"
    )
    with pytest.raises(SystemExit) as ex:
        slnkit_main(["info", str(filename)])
    assert ex.value.code == 1


def test_slnkit_commands():
    assert set(COMMANDS) == {"info", "edit"}
    for name, (build_arg_parser, command_main) in COMMANDS.items():
        assert callable(build_arg_parser)
        assert callable(command_main)
        assert f"$ slnkit {name} --help" in DESCRIPTION
