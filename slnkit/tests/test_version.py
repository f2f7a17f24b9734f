import pytest

from ..version import (KNOWN_GLOBAL_SECTIONS, SolutionVersion,
                       get_global_disposition, get_project_disposition,
                       get_section_rank, is_framing_line)


@pytest.mark.parametrize("version", list(SolutionVersion))
def test_framing_is_detected(version):
    assert SolutionVersion.detect(version.get_framing()) is version


@pytest.mark.parametrize(
    "header, version",
    [
        pytest.param(
            [
                "Microsoft Visual Studio Solution File, Format Version 12.00",
                "# Visual Studio Express 2013 for Web",
            ],
            SolutionVersion.VS2013,
            id="express",
        ),
        pytest.param(
            [
                "Microsoft Visual Studio Solution File, Format Version 11.00",
                "# Visual Studio 2012",
            ],
            None,
            id="mismatch",
        ),
        pytest.param(
            ["# Visual Studio 2010"],
            None,
            id="no-format-line",
        ),
        pytest.param([], None, id="empty"),
    ],
)
def test_detect(header, version):
    assert SolutionVersion.detect(header) is version


def test_oldest():
    assert SolutionVersion.oldest() is SolutionVersion.VS2008
    assert str(SolutionVersion.VS2013) == "VS2013"
    assert SolutionVersion.VS2013.year == "2013"


@pytest.mark.parametrize(
    "line, framing",
    [
        pytest.param("", True, id="blank"),
        pytest.param("# Visual Studio 2010", True, id="product"),
        pytest.param("VisualStudioVersion = 12.0.21005.1", True, id="vs-version"),
        pytest.param("MinimumVisualStudioVersion = 10.0.40219.1", True, id="min-version"),
        pytest.param("# Some other comment", False, id="comment"),
    ],
)
def test_is_framing_line(line, framing):
    assert is_framing_line(line) is framing


def test_section_conventions():
    ranks = [get_section_rank(section.name) for section in KNOWN_GLOBAL_SECTIONS]
    assert ranks == sorted(ranks)
    assert get_section_rank("Unknown") == len(KNOWN_GLOBAL_SECTIONS)
    assert get_global_disposition("ProjectConfigurationPlatforms") == "postSolution"
    assert get_global_disposition("NestedProjects") == "preSolution"
    assert get_global_disposition("Unknown") == "postSolution"
    assert get_project_disposition("ProjectDependencies") == "postProject"
    assert get_project_disposition("Unknown") == "preProject"
