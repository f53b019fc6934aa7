from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List

from .assembler import FileAssembler
from .config import ConfigError, Settings, load_config
from .engine import EXIT_EXECUTION_ERROR, EXIT_FAILURE, EXIT_OK, ConcatenationEngine
from .errors import ConcatenationError, FailureCategory
from .fs import LocalFileSystem, close_after_failure, close_stream, copy_stream
from .resolver import DEFAULT_ARTIFACT_SCHEME, UriPartResolver, build_resolver
from .store import LocalRepository


def _resolver_for(settings: Settings) -> UriPartResolver:
    store = LocalRepository(settings.repository) if settings.repository else LocalRepository.default()
    return build_resolver(settings.base_directory, store, artifact_scheme=settings.artifact_scheme)


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    changes = {}
    if args.base_dir:
        changes["base_directory"] = Path(args.base_dir).resolve()
    if args.repository:
        changes["repository"] = Path(args.repository).expanduser().resolve()
    if args.artifact_scheme:
        changes["artifact_scheme"] = args.artifact_scheme
    if getattr(args, "output_dir", None):
        changes["output_directory"] = Path(args.output_dir).resolve()
    return replace(settings, **changes)


def cmd_run(args: argparse.Namespace) -> int:
    try:
        settings = _apply_overrides(load_config(Path(args.config)), args)
    except ConfigError as e:
        print(f"config: {e}", file=sys.stderr)
        return EXIT_FAILURE

    engine = ConcatenationEngine(FileAssembler(_resolver_for(settings)))
    r = engine.run(settings.tasks, settings.output_directory)
    if r.ok:
        print("OK")
        return EXIT_OK
    for e in r.errors:
        print(e, file=sys.stderr)
    return r.exit_code


def _write_resolved(resolver: UriPartResolver, uri: str, out: str | None) -> None:
    src = resolver.resolve(uri)
    try:
        if out:
            dst = LocalFileSystem().open_write(Path(out), append=False)
            try:
                copy_stream(src, dst)
            except BaseException as e:
                close_after_failure(dst, e)
                raise
            close_stream(dst, out)
        else:
            copy_stream(src, sys.stdout.buffer)
            sys.stdout.buffer.flush()
    except BaseException as e:
        close_after_failure(src, e)
        raise
    close_stream(src, uri)


def cmd_resolve(args: argparse.Namespace) -> int:
    settings = _apply_overrides(Settings(base_directory=Path.cwd(), output_directory=None), args)
    try:
        _write_resolved(_resolver_for(settings), args.uri, args.out)
    except ConcatenationError as e:
        print(e, file=sys.stderr)
        if e.category is FailureCategory.EXECUTION_ERROR:
            return EXIT_EXECUTION_ERROR
        return EXIT_FAILURE
    return EXIT_OK


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        settings = load_config(Path(args.config))
    except ConfigError as e:
        print(f"config: {e}", file=sys.stderr)
        return EXIT_FAILURE
    n = len(settings.tasks) if settings.tasks is not None else 0
    print(f"OK ({n} files)")
    return EXIT_OK


def _add_resolution_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--base-dir", help="Directory relative file: parts resolve against.")
    p.add_argument("--repository", help="Local artifact repository root (default: ~/.m2/repository).")
    p.add_argument(
        "--artifact-scheme",
        help=f"URI scheme token for artifact references (default: {DEFAULT_ARTIFACT_SCHEME}).",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="partcat", description="Concatenate resources identified by URI into files.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Build every file listed in a JSON config.")
    p_run.add_argument("config")
    p_run.add_argument("--output-dir", help="Directory files are created relative to.")
    _add_resolution_options(p_run)
    p_run.set_defaults(fn=cmd_run)

    p_res = sub.add_parser("resolve", help="Resolve a single part URI and print its bytes.")
    p_res.add_argument("uri")
    p_res.add_argument("--out", help="Write to this file instead of stdout.")
    _add_resolution_options(p_res)
    p_res.set_defaults(fn=cmd_resolve)

    p_val = sub.add_parser("validate", help="Check a JSON config against the schema.")
    p_val.add_argument("config")
    p_val.set_defaults(fn=cmd_validate)

    return p


def main(argv: List[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="[partcat] %(levelname)s %(name)s: %(message)s")

    return args.fn(args)


if __name__ == "__main__":
    raise SystemExit(main())
