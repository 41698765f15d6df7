from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from gosum_validator.adapters.upstream.factory import create_upstream_client
from gosum_validator.core.config import settings
from gosum_validator.core.errors import ReferenceCacheError
from gosum_validator.core.logging import configure_logging
from gosum_validator.services.reconciler import check_lockfile
from gosum_validator.services.reference_table import (
    build_reference_table,
    dump_reference_table,
    load_reference_table,
)


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _snapshot(args: argparse.Namespace) -> int:
    upstream = create_upstream_client()
    try:
        table = build_reference_table(upstream)
    finally:
        upstream.close()

    dump_reference_table(table, args.output)
    _print({"output": str(args.output), "releases": sorted(table)})
    return 0 if table else 1


def _check(args: argparse.Namespace) -> int:
    try:
        table = load_reference_table(args.versions_file)
    except ReferenceCacheError as exc:
        _print({"error": {"code": exc.code, "message": exc.message}})
        return 2

    reference = table.get(args.release)
    if reference is None:
        _print({"error": {"code": "release_not_found", "message": f"Unknown release: '{args.release}'"}})
        return 2

    diffs = check_lockfile(reference, args.go_version, Path(args.lockfile).read_bytes())
    _print([d.model_dump(by_alias=True) for d in diffs])
    return 1 if diffs else 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="go.sum validator CLI")
    sub = p.add_subparsers(dest="cmd", required=True)

    s_snap = sub.add_parser("snapshot", help="Rebuild the reference table from upstream and save it")
    s_snap.add_argument("--output", type=Path, default=Path(settings.app.versions_file))

    s_check = sub.add_parser("check", help="Compare a local lockfile with a cached release")
    s_check.add_argument("lockfile", help="Path to the go.sum to validate")
    s_check.add_argument("--release", required=True)
    s_check.add_argument("--go-version", required=True)
    s_check.add_argument("--versions-file", type=Path, default=Path(settings.app.versions_file))

    args = p.parse_args(argv)
    configure_logging(settings.log)

    if args.cmd == "snapshot":
        return _snapshot(args)
    if args.cmd == "check":
        return _check(args)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
