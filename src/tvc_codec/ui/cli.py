"""Command-line interface router for tvc-codec."""

from __future__ import annotations

import argparse
import json
import sys
import tomllib
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Final

import structlog
import yaml

from tvc_codec import __version__
from tvc_codec.cells import boc_to_cell
from tvc_codec.config import (
    OUTPUT_FORMATS,
    ConfigLoadError,
    ConfigValidationError,
    load_config,
)
from tvc_codec.errors import CodecError
from tvc_codec.observability import (
    LoggingConfig,
    configure_structlog,
    correlation_scope,
    setup_structured_logging,
    shutdown_logging,
)
from tvc_codec.schema import (
    ContractE0,
    LegacyContract,
    Metadata,
    Version,
    chain_cells,
    contract_from_boc,
    encode_chunks,
)
from tvc_codec.schema.base import CellSerializable

_LOG = structlog.get_logger(__name__)

_RECORD_READERS: Final[dict[str, Callable[[bytes], CellSerializable]]] = {
    "contract": contract_from_boc,
    "metadata": Metadata.from_boc,
    "version": Version.from_boc,
}


class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    def __init__(self, message: str, exit_code: int = 2) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="tvc-codec",
        description=(
            "Pack and inspect compiled contract artifacts stored as bag-of-cells.\n\n"
            "Common workflows:\n"
            "  tvc-codec pack --code code.boc --meta meta.json --out wallet.tvc\n"
            "  tvc-codec inspect wallet.tvc --format yaml\n"
            "  tvc-codec chunks --text 'long description'\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./tvc.toml if present).",
    )
    common.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Report format (overrides output.format).",
    )
    common.add_argument(
        "--log-level",
        default=None,
        help="Log level (overrides observability.log_level).",
    )
    common.add_argument(
        "--log-dir",
        default=None,
        help="Directory for the JSON-lines log file (overrides observability.log_dir).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # pack ----------------------------------------------------------------
    pack_parser = subparsers.add_parser(
        "pack",
        parents=[common],
        help="Wrap a code BoC and build metadata into a contract envelope",
    )
    pack_parser.add_argument("--code", default=None, help="BoC file holding the code root cell")
    pack_parser.add_argument(
        "--meta",
        default=None,
        help="Metadata document (.json, .toml, .yaml) for the tagged envelope",
    )
    pack_parser.add_argument(
        "--legacy",
        action="store_true",
        help="Emit the legacy envelope (code plus chained description) instead",
    )
    pack_parser.add_argument("--desc", default=None, help="Description for the legacy envelope")
    pack_parser.add_argument("--out", required=True, help="Where to write the envelope BoC")
    pack_parser.add_argument(
        "--with-index",
        dest="with_index",
        action="store_true",
        default=None,
        help="Include the cell offset index (overrides boc.with_index).",
    )
    pack_parser.add_argument(
        "--no-crc",
        dest="with_crc32c",
        action="store_false",
        default=None,
        help="Omit the CRC32C trailer (overrides boc.with_crc32c).",
    )
    pack_parser.set_defaults(handler=_cmd_pack)

    # inspect -------------------------------------------------------------
    inspect_parser = subparsers.add_parser(
        "inspect",
        parents=[common],
        help="Decode a BoC file and report its contents",
    )
    inspect_parser.add_argument("path", help="BoC file to decode")
    inspect_parser.add_argument(
        "--as",
        dest="record",
        choices=sorted(_RECORD_READERS),
        default="contract",
        help="Record type stored at the root (default: contract)",
    )
    inspect_parser.add_argument(
        "--hex",
        action="store_true",
        help="Treat the file as hex text rather than raw bytes",
    )
    inspect_parser.set_defaults(handler=_cmd_inspect)

    # chunks --------------------------------------------------------------
    chunks_parser = subparsers.add_parser(
        "chunks",
        parents=[common],
        help="Show how a payload is split into a cell chain",
    )
    source = chunks_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", default=None, help="UTF-8 text payload")
    source.add_argument("--file", default=None, help="File whose bytes are the payload")
    chunks_parser.set_defaults(handler=_cmd_chunks)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show the effective configuration",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        config = _load_effective_config(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code

    handle = setup_structured_logging(LoggingConfig.from_observability(config["observability"]))
    configure_structlog()
    try:
        with correlation_scope(command=namespace.command):
            result = handler(namespace, config)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    except CodecError as exc:
        _LOG.warning("codec_rejected", error_type=type(exc).__name__, error=str(exc))
        raise
    finally:
        shutdown_logging(handle)
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_pack(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    code = boc_to_cell(_read_bytes(args.code)) if args.code is not None else None

    contract: LegacyContract | ContractE0
    if args.legacy:
        if args.meta is not None:
            raise CLIError("--meta cannot be combined with --legacy")
        contract = LegacyContract(code=code, desc=args.desc)
    else:
        if code is None:
            raise CLIError("--code is required for the tagged envelope")
        if args.desc is not None:
            raise CLIError("--desc requires --legacy; put desc into the metadata document")
        meta = Metadata.from_dict(_read_document(args.meta)) if args.meta is not None else None
        contract = ContractE0(code=code, meta=meta)

    boc_settings = config["boc"]
    encoded = contract.to_boc(
        with_crc32c=boc_settings["with_crc32c"],
        with_index=boc_settings["with_index"],
    )
    out_path = Path(args.out)
    try:
        out_path.write_bytes(encoded)
    except OSError as exc:
        raise CLIError(f"unable to write {out_path}: {exc}") from exc

    root_hash = contract.to_cell().repr_hash.hex()
    _LOG.info(
        "contract_packed",
        variant=type(contract).__name__,
        out=out_path.as_posix(),
        bytes=len(encoded),
        root_hash=root_hash,
    )
    _emit(
        {
            "command": "pack",
            "out": out_path.as_posix(),
            "bytes": len(encoded),
            "root_hash": root_hash,
            "contract": contract.to_dict(),
        },
        config,
    )
    return 0


def _cmd_inspect(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    raw = _read_bytes(args.path)
    if args.hex:
        try:
            raw = bytes.fromhex(raw.decode("ascii"))
        except ValueError as exc:
            raise CLIError(f"{args.path} is not hex text: {exc}") from exc

    record = _RECORD_READERS[args.record](raw)
    root_hash = boc_to_cell(raw).repr_hash.hex()
    _LOG.info("artifact_inspected", path=args.path, record=args.record, root_hash=root_hash)
    _emit(
        {
            "command": "inspect",
            "path": args.path,
            "bytes": len(raw),
            "root_hash": root_hash,
            args.record: record.to_dict(),
        },
        config,
    )
    return 0


def _cmd_chunks(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    payload = args.text.encode("utf-8") if args.text is not None else _read_bytes(args.file)

    head = encode_chunks(payload)
    cells = chain_cells(head)
    _LOG.info("payload_chunked", bytes=len(payload), cells=len(cells))
    _emit(
        {
            "command": "chunks",
            "bytes": len(payload),
            "head_hash": head.repr_hash.hex(),
            "cells": [
                {"index": index, "bytes": cell.bit_length // 8, "refs": len(cell.refs)}
                for index, cell in enumerate(cells)
            ],
        },
        config,
    )
    return 0


def _cmd_config(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    _emit({"command": "config", "config_path": args.config_path, "config": config}, config)
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit(payload: Mapping[str, object], config: Mapping[str, Any]) -> None:
    """Write a report to stdout in the configured format."""

    if config["output"]["format"] == "yaml":
        sys.stdout.write(
            yaml.safe_dump(
                dict(payload),
                sort_keys=True,
                default_flow_style=False,
                allow_unicode=True,
            )
        )
        return
    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, object] = {
        "output.format": args.format,
        "observability.log_level": args.log_level,
        "observability.log_dir": args.log_dir,
        "boc.with_index": getattr(args, "with_index", None),
        "boc.with_crc32c": getattr(args, "with_crc32c", None),
    }
    try:
        return load_config(args.config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc)) from exc


def _read_bytes(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except FileNotFoundError as exc:
        raise CLIError(f"file not found: {path}") from exc
    except OSError as exc:
        raise CLIError(f"unable to read {path}: {exc}") from exc


def _read_document(path: str) -> object:
    """Parse a metadata document, choosing the format from the file suffix."""

    raw = _read_bytes(path)
    suffix = Path(path).suffix.lower()
    try:
        text = raw.decode("utf-8")
        if suffix == ".toml":
            return tomllib.loads(text)
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(text)
        return json.loads(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise CLIError(f"unable to parse {path}: {exc}") from exc


__all__ = ["CLIError", "build_parser", "run_cli"]
