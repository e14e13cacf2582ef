from __future__ import annotations

import argparse
import os
import sys
from typing import Sequence

from .cleaning import clean_lines, select_variables
from .config import FileSettings, FilterConfig, OutputOptions, UnsetPredicates, resolve_config
from .errors import CleanPathError, UsageError
from .log import C_COMMENTS, NO_COMMENTS, SH_COMMENTS, configure_logging, logger, verbose
from .normalizer import Identity, PathNormalizer
from .shells import comment_style
from .unset import unset_lines
from .version import __version__

EXIT_FAILURE = 1
EXIT_USAGE = 2

_COMMENT_STYLES = {"sh": SH_COMMENTS, "c": C_COMMENTS, "none": NO_COMMENTS}


class Toggle(argparse.Action):
    """Flip a boolean option each time the flag is seen (``-e -e`` is a no-op)."""

    def __init__(self, option_strings, dest, default=False, **kwargs):
        super().__init__(option_strings, dest, nargs=0, default=default, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, not getattr(namespace, self.dest))


def _delimiter(value: str) -> str:
    if len(value) != 1:
        raise argparse.ArgumentTypeError(f"delimiter must be exactly one character, got {value!r}")
    return value


def _pre_parse_config(argv: Sequence[str]) -> FileSettings:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    known, _ = pre.parse_known_args(argv)
    return resolve_config(known.config)


def _add_common_flags(p: argparse.ArgumentParser, settings: FileSettings) -> None:
    vals = settings.values
    p.add_argument("-h", "-?", action="help", help="Print this help message")
    p.add_argument("--version", action="version", version=f"cleanpath {__version__}")
    p.add_argument("--config", default=None, help="YAML config file (default: $CLEANPATH_CONFIG)")
    p.add_argument("-D", dest="debug", action=Toggle, help="Toggle on/off debugging output (default: off)")
    p.add_argument(
        "-V",
        dest="include_verbose",
        action=Toggle,
        help="Toggle on/off printing verbose output to stdout for inclusion into scripts (default: off)",
    )
    p.add_argument(
        "-I",
        dest="output_unchanged",
        action=Toggle,
        default=vals.get("output_unchanged", False),
        help="Toggle on/off outputting unchanged variables (default: off)",
    )
    p.add_argument(
        "-b", dest="shell", action="store_const", const="bash",
        help='Print bash/sh/dash compatible "export FOO=bar" definitions (default)',
    )
    p.add_argument(
        "-c", dest="shell", action="store_const", const="csh",
        help='Print tcsh/csh compatible "setenv FOO "bar";" definitions',
    )
    p.add_argument("-n", dest="shell", action="store_const", const="none", help='Print plain "FOO=bar"')
    p.add_argument("-v", dest="louder", action="count", default=0, help="Increase verbosity by 1 (repeatable)")
    p.add_argument("-q", dest="quieter", action="count", default=0, help="Decrease verbosity by 1 (repeatable)")
    p.add_argument(
        "--comment-style",
        choices=sorted(_COMMENT_STYLES),
        default=None,
        help="Wrap diagnostics in shell (#) or C (/* */) comments",
    )
    p.set_defaults(shell=vals.get("shell", "bash"))


def _output_options(args: argparse.Namespace, settings: FileSettings) -> OutputOptions:
    return OutputOptions(
        shell=args.shell,
        output_unchanged=args.output_unchanged,
        verbosity=settings.values.get("verbosity", 0) + args.louder - args.quieter,
        debug=args.debug,
        include_verbose=args.include_verbose,
    )


def _setup_diagnostics(out: OutputOptions, comments: tuple[str | None, str | None], style: str | None) -> None:
    if style is not None:
        comments = _COMMENT_STYLES[style]
    configure_logging(
        verbosity=out.verbosity,
        debug_on=out.debug,
        stream=sys.stdout if out.include_verbose else sys.stderr,
        comments=comments,
    )


def _fatal(prog: str, message: str, rc: int = EXIT_FAILURE) -> int:
    logger.critical("[%s] FATAL ERROR: %s", prog, message)
    logger.critical("[%s] PROGRAM MUST TERMINATE. Exiting %d.", prog, rc)
    return rc


def _pass_through_undecodable_bytes() -> None:
    # Non-UTF-8 bytes in os.environ arrive as lone surrogates and must go out as the original bytes.
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(errors="surrogateescape")


def build_parser(settings: FileSettings | None = None) -> argparse.ArgumentParser:
    settings = settings or FileSettings()
    vals = settings.values
    p = argparse.ArgumentParser(
        prog="cleanpath",
        add_help=False,
        description=(
            "Clean up PATH-like environment variables. Prints shell code suitable for "
            "eval (e.g. eval `cleanpath` in bash). By default keeps only the first "
            "occurrence of each directory, and only existing directories the current "
            "user may execute into."
        ),
    )
    p.add_argument("names", nargs="*", metavar="ENV_NAME", help="Variables to clean (default: PATH)")
    _add_common_flags(p, settings)
    p.add_argument("-A", dest="all_paths", action=Toggle, help='Work on all variables whose name ends in "PATH"')
    p.add_argument(
        "-C",
        dest="common_paths",
        action=Toggle,
        help="Work on common variables: PATH, MANPATH, LD_LIBRARY_PATH, PERL5LIB, PYTHONPATH, "
        "RUBYLIB, DLN_LIBRARY_PATH, RUBYLIB_PREFIX, CLASSPATH",
    )
    p.add_argument(
        "-d", "--delimiter",
        dest="delimiter",
        type=_delimiter,
        default=vals.get("delimiter", ":"),
        help="Set the path delimiter (default ':')",
    )
    p.add_argument(
        "-e", dest="check_exists", action=Toggle, default=vals.get("check_exists", True),
        help="Toggle keeping only existing entries (default: on)",
    )
    p.add_argument(
        "-u", dest="only_executable_dirs", action=Toggle, default=vals.get("only_executable_dirs", True),
        help='Toggle keeping only "usable" (executable) directories (default: on)',
    )
    p.add_argument(
        "-r", dest="remove_dupes", action=Toggle, default=vals.get("remove_dupes", True),
        help="Toggle removing duplicate entries (default: on)",
    )
    p.add_argument(
        "-x", dest="dirs_only", action=Toggle, default=vals.get("dirs_only", False),
        help="Toggle allowing only directories, no files (default: off)",
    )
    p.add_argument(
        "-k", dest="discard_empty", action=Toggle, default=vals.get("discard_empty", True),
        help="Toggle discarding empty entries (default: on)",
    )
    p.add_argument(
        "-E", dest="exclude", action="append", default=list(settings.exclude), metavar="STR",
        help="Exclude entries containing STR (repeatable)",
    )
    return p


def _filter_config(args: argparse.Namespace) -> FilterConfig:
    return FilterConfig(
        delimiter=args.delimiter,
        discard_empty=args.discard_empty,
        remove_dupes=args.remove_dupes,
        check_exists=args.check_exists,
        only_executable_dirs=args.only_executable_dirs,
        dirs_only=args.dirs_only,
        exclude_patterns=tuple(args.exclude),
    )


def cmd_cleanpath(argv: Sequence[str]) -> int:
    settings = _pre_parse_config(argv)
    args = build_parser(settings).parse_args(argv)
    out = _output_options(args, settings)
    # Diagnostics only become shell comments when they share stdout with the output.
    _setup_diagnostics(out, SH_COMMENTS if out.include_verbose else NO_COMMENTS, args.comment_style)

    cfg = _filter_config(args)
    verbose(1, 'Set path delimiter to "%s"', cfg.delimiter)
    for pat in cfg.exclude_patterns:
        verbose(1, 'Exclude path members matching "%s"', pat)

    names = select_variables(
        args.names, os.environ, all_paths=args.all_paths, common_paths=args.common_paths
    )
    normalizer = PathNormalizer(cfg, identity=Identity.current())
    for line in clean_lines(
        names, os.environ, normalizer, shell=out.shell, output_unchanged=out.output_unchanged
    ):
        print(line)
    return 0


def build_unsetenvs_parser(settings: FileSettings | None = None) -> argparse.ArgumentParser:
    settings = settings or FileSettings()
    unset = settings.unset
    p = argparse.ArgumentParser(prog="unsetenvs", add_help=False, description="Unset environment variables.")
    _add_common_flags(p, settings)
    for flag, dest, what in (
        ("-m", "name_matches", "name contains"),
        ("-s", "name_starts", "name starts with"),
        ("-e", "name_ends", "name ends with"),
        ("-M", "value_matches", "value contains"),
        ("-S", "value_starts", "value starts with"),
        ("-E", "value_ends", "value ends with"),
    ):
        p.add_argument(
            flag, dest=dest, action="append", default=list(unset.get(dest, ())), metavar="STR",
            help=f"Unset any variable whose {what} STR (repeatable)",
        )
    return p


def cmd_unsetenvs(argv: Sequence[str]) -> int:
    settings = _pre_parse_config(argv)
    args = build_unsetenvs_parser(settings).parse_args(argv)
    out = _output_options(args, settings)
    _setup_diagnostics(out, comment_style(out.shell), args.comment_style)

    preds = UnsetPredicates(
        name_matches=tuple(args.name_matches),
        name_starts=tuple(args.name_starts),
        name_ends=tuple(args.name_ends),
        value_matches=tuple(args.value_matches),
        value_starts=tuple(args.value_starts),
        value_ends=tuple(args.value_ends),
    )
    for kind in ("name_matches", "name_starts", "name_ends", "value_matches", "value_starts", "value_ends"):
        for pat in getattr(preds, kind):
            verbose(1, 'Unset any environment variable whose %s "%s"', kind.replace("_", " "), pat)

    for line in unset_lines(
        list(os.environ.items()), preds, shell=out.shell, output_unchanged=out.output_unchanged
    ):
        print(line)
    return 0


def _run(prog: str, cmd, argv: list[str] | None) -> None:
    argv = argv if argv is not None else sys.argv[1:]
    _pass_through_undecodable_bytes()
    # Until the options are parsed, diagnostics go to stderr unadorned.
    configure_logging()

    try:
        rc = cmd(argv)
    except UsageError as e:
        rc = _fatal(prog, str(e), EXIT_USAGE)
    except CleanPathError as e:
        rc = _fatal(prog, str(e))
    except MemoryError:
        rc = _fatal(prog, "Out of memory.")
    except KeyboardInterrupt:
        rc = 130

    raise SystemExit(rc)


def main(argv: list[str] | None = None) -> None:
    _run("cleanpath", cmd_cleanpath, argv)


def unsetenvs_main(argv: list[str] | None = None) -> None:
    _run("unsetenvs", cmd_unsetenvs, argv)
