#!/usr/bin/env python3
"""
mycat

Concatenate files to standard output, optionally numbering lines,
showing tabs and line ends, and squeezing runs of blank lines.
"""

import argparse
import contextlib
import errno
import logging
import os
import stat
import sys
from dataclasses import dataclass
from typing import BinaryIO, ContextManager, Dict, Iterator, List, Optional, Tuple

from tqdm import tqdm

# Define version
__version__ = "1.0.0"

PROGRAM_NAME = "mycat"
STDIN = "-"
END_OF_OPTIONS = "--"
NUMBER_WIDTH = 6

# Flag character -> Options field
FLAG_FIELDS: Dict[str, str] = {
    "n": "number_lines",
    "b": "number_non_blank",
    "E": "show_ends",
    "T": "show_tabs",
    "s": "squeeze_blanks",
    "P": "show_progress",
}
HELP_FLAG = "h"

FLAG_HELP: Dict[str, str] = {
    "n": "number all output lines",
    "b": "number non-empty output lines (overrides -n)",
    "E": "display $ at the end of each line",
    "T": "display TAB characters as ^I",
    "s": "squeeze multiple adjacent blank lines",
    "P": "show a progress bar over the input files on stderr",
    HELP_FLAG: "display this help and exit",
}


def _level_from_env() -> int:
    level = logging.getLevelName(os.environ.get("MYCAT_LOG_LEVEL", "WARNING").upper())
    if not isinstance(level, int):
        return logging.WARNING
    # Diagnostics are logged at ERROR and must never be filtered out
    return min(level, logging.ERROR)


# Diagnostics keep the plain "mycat: path: reason" form on stderr
logging.basicConfig(
    level=_level_from_env(),
    format="%(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger("mycat")
logger.setLevel(_level_from_env())


class UsageError(Exception):
    """Raised when the command line is invalid or help was requested."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message


class ReadFault(Exception):
    """Raised when reading an input fails partway through."""


@dataclass(frozen=True)
class Options:
    number_lines: bool = False
    number_non_blank: bool = False
    show_ends: bool = False
    show_tabs: bool = False
    squeeze_blanks: bool = False
    show_progress: bool = False


@dataclass
class RunState:
    """Numbering and blank-run state shared by every input of a run."""

    line_number: int = 1
    last_was_blank: bool = False


def parse_arguments(argv: List[str]) -> Tuple[Options, List[str]]:
    """
    Parse the raw argument list into options and input files.

    Raises UsageError when help is requested or a flag is unknown.
    """
    flags: Dict[str, bool] = {}
    files: List[str] = []
    stop_parsing_flags = False

    for arg in argv:
        if not stop_parsing_flags and arg == END_OF_OPTIONS:
            stop_parsing_flags = True
            continue

        if stop_parsing_flags or arg == STDIN or not arg.startswith("-"):
            files.append(arg)
            continue

        for char in arg[1:]:
            if char == HELP_FLAG:
                raise UsageError()
            field = FLAG_FIELDS.get(char)
            if field is None:
                raise UsageError(
                    f"{PROGRAM_NAME}: invalid option -- '{char}'\n"
                    f"Try '{PROGRAM_NAME} -{HELP_FLAG}' for more information."
                )
            flags[field] = True

    # -b overrides -n
    if flags.get("number_non_blank"):
        flags["number_lines"] = False

    return Options(**flags), files


def build_usage_parser() -> argparse.ArgumentParser:
    """Build the parser used to format the help text."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        usage="%(prog)s [OPTION]... [FILE]...",
        description="Concatenate FILE(s) to standard output.",
        epilog="With no FILE, or when FILE is -, read standard input. "
        "-P is an extension to the classic cat flag set.",
        add_help=False,
    )
    for char, text in FLAG_HELP.items():
        parser.add_argument(f"-{char}", action="store_true", help=text)
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="files to concatenate; '--' ends option parsing",
    )
    return parser


def print_usage() -> None:
    build_usage_parser().print_help(file=sys.stderr)


def _report(filename: str, reason: str) -> None:
    logger.error("%s: %s: %s", PROGRAM_NAME, filename, reason)


def check_file_access(filename: str) -> bool:
    """Check that an input exists, is not a directory and is readable."""
    if filename == STDIN:
        return True

    try:
        file_stat = os.stat(filename)
    except OSError as e:
        _report(filename, e.strerror)
        return False
    except ValueError as e:
        # e.g. an embedded NUL byte in the path
        _report(filename, str(e))
        return False

    if stat.S_ISDIR(file_stat.st_mode):
        _report(filename, os.strerror(errno.EISDIR))
        return False

    # os.access reports no errno, so a denial is always EACCES
    if not os.access(filename, os.R_OK):
        _report(filename, os.strerror(errno.EACCES))
        return False

    return True


def transform_line(line: bytes, opts: Options) -> bytes:
    """Apply -T and then -E to a single line without its newline."""
    if opts.show_tabs:
        line = line.replace(b"\t", b"^I")
    if opts.show_ends:
        line += b"$"
    return line


def _read_lines(stream: BinaryIO) -> Iterator[bytes]:
    try:
        for raw in stream:
            yield raw[:-1] if raw.endswith(b"\n") else raw
    except OSError as e:
        raise ReadFault(str(e)) from e


def _open_input(filename: str) -> ContextManager[BinaryIO]:
    # stdin belongs to the process and is left open
    if filename == STDIN:
        return contextlib.nullcontext(sys.stdin.buffer)
    return open(filename, "rb")


def process_file(
    filename: str, opts: Options, state: RunState, output: BinaryIO
) -> bool:
    """
    Copy one input to output, applying numbering, squeezing and markers.

    The counter and blank flag in state carry over from earlier inputs.
    Returns False if the input could not be opened or read.
    """
    try:
        source = _open_input(filename)
    except OSError as e:
        _report(filename, e.strerror)
        return False

    emitted = 0
    squeezed = 0
    with source as stream:
        try:
            for line in _read_lines(stream):
                is_blank = not line

                if opts.squeeze_blanks and is_blank and state.last_was_blank:
                    squeezed += 1
                    continue

                state.last_was_blank = is_blank

                if opts.number_lines or (opts.number_non_blank and not is_blank):
                    output.write(f"{state.line_number:>{NUMBER_WIDTH}} ".encode("ascii"))
                    state.line_number += 1

                output.write(transform_line(line, opts) + b"\n")
                emitted += 1
        except ReadFault as e:
            logger.debug("Read fault on %s after %d lines: %s", filename, emitted, e)
            _report(filename, "Read error")
            return False

    logger.debug("%s: %d lines written, %d squeezed", filename, emitted, squeezed)
    return True


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    try:
        opts, files = parse_arguments(argv)
    except UsageError as e:
        if e.message:
            logger.error("%s", e.message)
        print_usage()
        return 1

    if not files:
        files = [STDIN]

    output = sys.stdout.buffer
    state = RunState()
    had_errors = False

    try:
        for filename in tqdm(
            files,
            desc=PROGRAM_NAME,
            unit="file",
            file=sys.stderr,
            disable=not opts.show_progress,
        ):
            logger.debug("Processing %s", filename)

            if not check_file_access(filename):
                had_errors = True
                continue

            if not process_file(filename, opts, state, output):
                had_errors = True

        output.flush()
    except KeyboardInterrupt:
        logger.debug("Operation cancelled by user.")
        return 130
    except BrokenPipeError:
        # Downstream closed the pipe; silence the flush at interpreter exit
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 1
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("%s: unexpected error: %s", PROGRAM_NAME, str(e))
        if logger.isEnabledFor(logging.DEBUG):
            import traceback  # pylint: disable=import-outside-toplevel

            logger.debug("Traceback: %s", traceback.format_exc())
        return 1

    logger.debug(
        "Done: %d input(s), next line number %d, errors: %s",
        len(files),
        state.line_number,
        "yes" if had_errors else "no",
    )
    return 1 if had_errors else 0


if __name__ == "__main__":
    sys.exit(main())
