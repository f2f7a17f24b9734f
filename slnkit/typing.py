from __future__ import annotations

import pathlib
from typing import Callable, Union

try:
    from typing import Literal
except ImportError:
    from typing_extensions import Literal

__all__ = ["Self", "Literal"]


try:
    from typing import Protocol, runtime_checkable
except ImportError:
    from typing_extensions import Protocol, runtime_checkable

try:
    from typing import Self
except ImportError:
    from typing_extensions import Self


#: Support both pathlib paths and regular strings with AnyPath:
AnyPath = Union[str, pathlib.Path]
GuidFactory = Callable[[], str]

GlobalDisposition = Literal["preSolution", "postSolution"]
ProjectDisposition = Literal["preProject", "postProject"]


@runtime_checkable
class SupportsFileAccess(Protocol):
    """
    File access capability handed to a solution.

    Solutions and project files never open file handles themselves; all
    reads, writes and copies go through one of these.
    """

    def read_text(self, path: AnyPath) -> str:
        ...

    def write_text(self, path: AnyPath, contents: str) -> None:
        ...

    def copy(self, source: AnyPath, destination: AnyPath) -> None:
        ...

    def exists(self, path: AnyPath) -> bool:
        ...

    def makedirs(self, path: AnyPath) -> None:
        ...
