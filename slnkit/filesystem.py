"""
``slnkit.filesystem`` - file access capabilities handed to solutions.

``LocalFileSystem`` works on disk.  ``MemoryFileSystem`` keeps everything in
a dictionary, which is handy for dry runs and tests.
"""
from __future__ import annotations

import logging
import os
import pathlib
import shutil
from typing import Dict, Optional

from .typing import AnyPath

logger = logging.getLogger(__name__)


class LocalFileSystem:
    """Read and write files on the local disk."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def read_text(self, path: AnyPath) -> str:
        # newline="" keeps CRLF line endings intact for round-tripping.
        with open(path, "rt", encoding=self.encoding, newline="") as fp:
            return fp.read()

    def write_text(self, path: AnyPath, contents: str) -> None:
        logger.debug("Writing %d characters to %s", len(contents), path)
        with open(path, "wt", encoding=self.encoding, newline="") as fp:
            fp.write(contents)

    def copy(self, source: AnyPath, destination: AnyPath) -> None:
        logger.debug("Copying %s to %s", source, destination)
        shutil.copyfile(source, destination)

    def exists(self, path: AnyPath) -> bool:
        return pathlib.Path(path).exists()

    def makedirs(self, path: AnyPath) -> None:
        pathlib.Path(path).mkdir(parents=True, exist_ok=True)


class MemoryFileSystem:
    """
    An in-memory file store keyed by normalized path.

    Parameters
    ----------
    files : dict, optional
        Initial ``{path: contents}``.
    """

    files: Dict[str, str]

    def __init__(self, files: Optional[Dict[AnyPath, str]] = None):
        self.files = {}
        for path, contents in (files or {}).items():
            self.write_text(path, contents)

    @staticmethod
    def _key(path: AnyPath) -> str:
        return os.path.normpath(os.fspath(path))

    def read_text(self, path: AnyPath) -> str:
        try:
            return self.files[self._key(path)]
        except KeyError:
            raise FileNotFoundError(f"No such file: {path}") from None

    def write_text(self, path: AnyPath, contents: str) -> None:
        self.files[self._key(path)] = contents

    def copy(self, source: AnyPath, destination: AnyPath) -> None:
        self.write_text(destination, self.read_text(source))

    def exists(self, path: AnyPath) -> bool:
        key = self._key(path)
        prefix = key.rstrip(os.sep) + os.sep
        return key in self.files or any(fn.startswith(prefix) for fn in self.files)

    def makedirs(self, path: AnyPath) -> None:
        # Directories are implied by the files within them.
        pass
