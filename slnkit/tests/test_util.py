import os
import pathlib

import pytest

from .. import util


@pytest.mark.parametrize(
    "first, second, equal",
    [
        pytest.param("{ABC}", "{abc}", True, id="case"),
        pytest.param("{ABC}", "ABC", True, id="braces"),
        pytest.param(" {ABC} ", "{ABC}", True, id="whitespace"),
        pytest.param("{ABC}", "{ABD}", False, id="different"),
    ],
)
def test_guids_equal(first, second, equal):
    assert util.guids_equal(first, second) is equal


def test_new_guid():
    guid = util.new_guid()
    assert len(guid) == 38
    assert guid == guid.upper()
    assert guid[0] == "{" and guid[-1] == "}"
    assert guid != util.new_guid()


def test_windows_paths():
    assert util.to_windows_path(pathlib.PurePath("a") / "b" / "c.csproj") == "a\\b\\c.csproj"
    assert util.relative_windows_path(
        os.path.join("root", "src", "a.csproj"), "root"
    ) == "src\\a.csproj"
    assert util.from_windows_path("root", "src\\a\\a.csproj") == (
        pathlib.Path("root") / "src" / "a" / "a.csproj"
    )


def test_fix_case_insensitive_path(tmp_path):
    (tmp_path / "Lib").mkdir()
    (tmp_path / "Lib" / "Lib.csproj").write_text("")
    assert util.fix_case_insensitive_path(tmp_path / "lib" / "LIB.csproj") == (
        (tmp_path / "Lib" / "Lib.csproj").resolve()
    )
    with pytest.raises(FileNotFoundError):
        util.fix_case_insensitive_path(tmp_path / "Other" / "Other.csproj")
