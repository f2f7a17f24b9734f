import itertools
import os
import pathlib

import pytest

from ..filesystem import MemoryFileSystem

TEST_PATH = pathlib.Path(__file__).parent
SOLUTION_PATH = TEST_PATH / "solutions"
TEMPLATE_PROJECT = SOLUTION_PATH / "Project.txt"

try:
    import apischema
except ImportError:
    # apischema is optional for JSON output testing
    apischema = None

APISCHEMA_SKIP = apischema is None

solution_filenames = sorted(str(path) for path in SOLUTION_PATH.glob("*.sln"))


def read_solution_text(filename) -> str:
    # newline="" to keep the line terminators as-is
    with open(filename, "rt", encoding="utf-8", newline="") as fp:
        return fp.read()


def make_guid_factory(prefix: str = "B0000000-0000-4000-8000"):
    """A predictable GUID generator for tests."""
    counter = itertools.count(1)

    def factory() -> str:
        return f"{{{prefix}-{next(counter):012d}}}"

    return factory


@pytest.fixture(params=solution_filenames)
def solution_filename(request):
    if not os.path.exists(request.param):
        pytest.skip(f"File missing: {request.param}")
    return request.param


@pytest.fixture
def guid_factory():
    return make_guid_factory()


@pytest.fixture
def memory_fs():
    return MemoryFileSystem(
        {
            "work/Template.csproj": read_solution_text(TEMPLATE_PROJECT),
        }
    )
