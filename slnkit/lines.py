"""
``slnkit.lines`` - split solution text into lines, and join them back.

Nothing is interpreted here: every line survives, blank lines included, and
the line terminator convention plus any UTF-8 byte order mark are recorded so
that ``join_lines`` can reproduce the source.
"""
from __future__ import annotations

import dataclasses
import logging
import re
from typing import Sequence, Union

from .exceptions import FormatError

logger = logging.getLogger(__name__)

RE_NEWLINE = re.compile(r"\r\n|\n|\r")
BYTE_ORDER_MARK = "\ufeff"
DEFAULT_NEWLINE = "\r\n"


@dataclasses.dataclass(frozen=True)
class TokenizedText:
    #: The lines, without their terminators.
    lines: tuple[str, ...]
    #: The first line terminator found in the source.
    newline: str = DEFAULT_NEWLINE
    #: The source ended with a line terminator.
    trailing_newline: bool = True
    #: The source started with a UTF-8 byte order mark.
    byte_order_mark: bool = False


def decode(source: Union[str, bytes], encoding: str = "utf-8") -> str:
    """Decode ``source`` to text, raising FormatError if that's not possible."""
    if isinstance(source, str):
        return source

    try:
        return source.decode(encoding)
    except UnicodeDecodeError as ex:
        raise FormatError(
            f"Solution contents are not valid {encoding} text: {ex}"
        ) from ex


def tokenize(source: Union[str, bytes], encoding: str = "utf-8") -> TokenizedText:
    """
    Split raw solution file contents into lines.

    Parameters
    ----------
    source : str or bytes
        The file contents.  Bytes are decoded with ``encoding``.
    encoding : str, optional
        Encoding for byte input.  Defaults to utf-8.

    Returns
    -------
    TokenizedText

    Raises
    ------
    FormatError
        If ``source`` is bytes that cannot be decoded.
    """
    text = decode(source, encoding=encoding)
    byte_order_mark = text.startswith(BYTE_ORDER_MARK)
    if byte_order_mark:
        text = text[len(BYTE_ORDER_MARK):]

    match = RE_NEWLINE.search(text)
    newline = match.group(0) if match is not None else DEFAULT_NEWLINE

    if not text:
        return TokenizedText(
            lines=(),
            newline=newline,
            trailing_newline=False,
            byte_order_mark=byte_order_mark,
        )

    lines = RE_NEWLINE.split(text)
    trailing_newline = lines[-1] == ""
    if trailing_newline:
        lines.pop(-1)

    logger.debug(
        "Tokenized %d lines (newline=%r, trailing newline=%s, BOM=%s)",
        len(lines), newline, trailing_newline, byte_order_mark,
    )
    return TokenizedText(
        lines=tuple(lines),
        newline=newline,
        trailing_newline=trailing_newline,
        byte_order_mark=byte_order_mark,
    )


def join_lines(
    lines: Sequence[str],
    newline: str = DEFAULT_NEWLINE,
    byte_order_mark: bool = False,
) -> str:
    """Join ``lines``, terminating each one (including the last) with ``newline``."""
    prefix = BYTE_ORDER_MARK if byte_order_mark else ""
    return prefix + "".join(f"{line}{newline}" for line in lines)
