"""
Environment-driven defaults for newly created solutions.
"""
import os

from .version import SolutionVersion


def get_version_name(value: str) -> str:
    """
    Validate a SolutionVersion name, as given in ``SLNKIT_DEFAULT_VERSION``.

    Raises
    ------
    ValueError
        If ``value`` is not the name of a supported version.
    """
    name = value.strip().upper()
    if name not in SolutionVersion.__members__:
        allowed = ", ".join(SolutionVersion.__members__)
        raise ValueError(
            f"Unsupported SLNKIT_DEFAULT_VERSION {value!r}; expected one of: {allowed}"
        )
    return name


#: The format version used by ``Solution.create_new`` (a SolutionVersion name).
SLNKIT_DEFAULT_VERSION = get_version_name(
    os.environ.get("SLNKIT_DEFAULT_VERSION", "VS2010")
)

_NEWLINES = {
    "crlf": "\r\n",
    "lf": "\n",
}

#: The line terminator used when writing newly created solutions.
SLNKIT_NEWLINE = _NEWLINES.get(
    os.environ.get("SLNKIT_NEWLINE", "crlf").lower(),
    "\r\n",
)
