"""
`slnkit` is the top-level command for accessing various subcommands.

Try::

"""

import argparse
import importlib
import logging
import sys

import slnkit

from .exceptions import SlnkitError

DESCRIPTION = __doc__


MODULES = ("info", "edit")


def _import_command(module):
    relative_module = f".{module}"
    return importlib.import_module(relative_module, "slnkit")


def _build_commands():
    global DESCRIPTION
    result = {}

    for module in sorted(MODULES):
        mod = _import_command(module)
        result[module] = (mod.build_arg_parser, mod.main)
        DESCRIPTION += f"\n    $ slnkit {module} --help"

    return result


COMMANDS = _build_commands()


def main(args=None):
    # Console entry point in setup.py
    top_parser = argparse.ArgumentParser(
        prog="slnkit",
        description=DESCRIPTION,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    top_parser.add_argument(
        "--version",
        "-V",
        action="version",
        version=slnkit.__version__,
        help="Show the slnkit version number and exit.",
    )

    top_parser.add_argument(
        "--log",
        "-l",
        dest="log_level",
        default="INFO",
        type=str,
        help="Python logging level (e.g. DEBUG, INFO, WARNING)",
    )

    subparsers = top_parser.add_subparsers(help="Possible subcommands")
    for command_name, (build_func, main) in COMMANDS.items():
        sub = subparsers.add_parser(command_name)
        build_func(sub)
        sub.set_defaults(func=main)

    args = top_parser.parse_args(args)
    kwargs = vars(args)
    log_level = kwargs.pop("log_level")

    logger = logging.getLogger("slnkit")
    logger.setLevel(log_level)
    logging.basicConfig()

    if hasattr(args, "func"):
        func = kwargs.pop("func")
        logger.debug("%s(**%r)", func.__name__, kwargs)
        try:
            func(**kwargs)
        except SlnkitError as ex:
            logger.error("%s: %s", type(ex).__name__, ex)
            sys.exit(1)
    else:
        top_parser.print_help()
