"""
Swarm Host CLI - Serve, validate and inspect agent contracts.

Logs go to stderr; when serving, stdout carries the MCP stream.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import yaml

from .config import SwarmConfig, load_config
from .errors import SwarmError
from .host.capability import build_capability
from .host.server import build_host
from .registry.registry import ContractRegistry
from .registry.sources import create_source, load_contract_file
from .tracing import setup_tracing
from .validation.validator import ContractValidator, ValidationResult

logger = logging.getLogger("swarm_host")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swarm-host",
        description="Swarm Host - Expose agent contracts as MCP tools",
    )
    parser.add_argument("--config", help="Path to YAML config (default: $SWARM_HOST_CONFIG or ./swarm-host.yaml)")
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Register capabilities and serve them over stdio")

    validate_parser = subparsers.add_parser("validate", help="Validate contracts")
    validate_parser.add_argument("--file", help="Validate a YAML/JSON contract file instead of the configured source")
    validate_parser.add_argument("--json", action="store_true", help="Print results as JSON")

    list_parser = subparsers.add_parser("list", help="List eligible contracts and their tool names")
    list_parser.add_argument("--json", action="store_true", help="Print results as JSON")

    return parser


async def serve(config: SwarmConfig) -> int:
    host = build_host(config)
    try:
        await host.initialize()
        await host.run_stdio()
    finally:
        await host.close()
    return 0


async def validate(config: SwarmConfig, file: Optional[str], as_json: bool) -> int:
    """Validate every record from a file or the configured source. Exit code 1 on any error."""
    validator = ContractValidator(config.validation)

    if file:
        try:
            records = load_contract_file(Path(file))
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"Cannot read {file}: {e}", file=sys.stderr)
            return 1
    else:
        source = create_source(config.registry)
        try:
            registry = ContractRegistry(source, max_pages=config.registry.max_pages)
            records = await registry.fetch_records()
        finally:
            await source.close()

    results = validator.validate_batch(records)

    if as_json:
        print(json.dumps({key: r.to_dict() for key, r in results.items()}, indent=2))
    else:
        for key, result in results.items():
            print(format_result(key, result))

    invalid = [key for key, r in results.items() if not r.valid]
    print(f"\n{len(results) - len(invalid)}/{len(results)} contract(s) valid", file=sys.stderr)
    return 1 if invalid else 0


def format_result(key: str, result: ValidationResult) -> str:
    lines = [f"{'OK  ' if result.valid else 'FAIL'} {key}"]
    lines.extend(f"  error   {e.path}: {e.message}" for e in result.errors)
    lines.extend(f"  warning {w.path}: {w.message}" for w in result.warnings)
    return "\n".join(lines)


async def list_contracts(config: SwarmConfig, as_json: bool) -> int:
    source = create_source(config.registry)
    try:
        registry = ContractRegistry(source, ContractValidator(config.validation), config.registry.max_pages)
        contracts = await registry.fetch_eligible_contracts()
    finally:
        await source.close()

    rows = []
    for contract in contracts:
        capability = build_capability(contract, config.server.tool_prefix)
        rows.append({
            "agentId": contract.id,
            "name": contract.name,
            "role": contract.role.value,
            "model": contract.model_identifier or config.backend.default_model,
            "tool": capability.tool_name if capability.exposed else None,
        })

    if as_json:
        print(json.dumps(rows, indent=2))
    else:
        for row in rows:
            print(f"{row['agentId']:<16} {row['role']:<11} {row['tool'] or '-':<40} {row['model']}")
    return 0


async def run(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except SwarmError as e:
        configure_logging(args.log_level or "INFO")
        logger.error(e.message)
        return 2

    configure_logging(args.log_level or config.logging.level)
    setup_tracing(config.tracing)

    try:
        if args.command == "serve":
            return await serve(config)
        if args.command == "validate":
            return await validate(config, args.file, args.json)
        if args.command == "list":
            return await list_contracts(config, args.json)
    except SwarmError as e:
        logger.error(e.message)
        return 2

    return 1


def main(argv: Optional[list[str]] = None) -> int:
    """Console script entry point."""
    return asyncio.run(run(argv))


if __name__ == "__main__":
    sys.exit(main())
