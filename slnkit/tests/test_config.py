import pytest

from .. import config
from ..config import get_version_name
from ..version import SolutionVersion


@pytest.mark.parametrize(
    "value, name",
    [
        pytest.param("VS2010", "VS2010", id="exact"),
        pytest.param("vs2013", "VS2013", id="lowercase"),
        pytest.param(" VS2008 ", "VS2008", id="whitespace"),
    ],
)
def test_get_version_name(value, name):
    assert get_version_name(value) == name
    assert SolutionVersion[get_version_name(value)].name == name


@pytest.mark.parametrize(
    "value",
    [
        pytest.param("VS2019", id="unsupported"),
        pytest.param("", id="empty"),
        pytest.param("12.00", id="format-version"),
    ],
)
def test_get_version_name_invalid(value):
    with pytest.raises(ValueError, match="SLNKIT_DEFAULT_VERSION") as ex:
        get_version_name(value)
    for version in SolutionVersion:
        assert version.name in str(ex.value)


def test_default_version_is_valid():
    assert config.SLNKIT_DEFAULT_VERSION in SolutionVersion.__members__
