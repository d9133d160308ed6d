# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/cli.py

"""
ipfs-embedded Command Line Interface

Thin wrapper around the registry, encoder and dispatcher.
"""

import json
import sys
from pathlib import Path

import click

from ipfs_embedded import __version__
from ipfs_embedded import config as config_module
from ipfs_embedded import encoder
from ipfs_embedded import registry
from ipfs_embedded.dispatcher import create_dispatcher
from ipfs_embedded.errors import (
    ConfigError,
    EncodingError,
    RuntimeUnavailableError,
)
from ipfs_embedded.types import KIND_BOOL, KIND_UINT, Operation


def handle_errors(func):
    """Decorator to turn bridge errors into a message and exit code 1."""
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except EncodingError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        except ConfigError as e:
            click.echo(f"Error: Invalid config: {e}", err=True)
            sys.exit(1)
        except RuntimeUnavailableError as e:
            click.echo(f"Error: Runtime unavailable: {e}", err=True)
            if e.backend:
                click.echo(f"  Backend: {e.backend}", err=True)
            click.echo("  Check --backend value or config", err=True)
            sys.exit(1)
        except FileNotFoundError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    wrapper.__name__ = func.__name__
    wrapper.__doc__ = func.__doc__
    return wrapper


def _coerce(op: Operation, name: str, raw: str):
    param = op.param(name)
    if param is None:
        known = ", ".join(p.name for p in op.params) or "(none)"
        raise click.BadParameter(f"'{name}' is not a parameter of {op.name} (known: {known})")
    if param.kind == KIND_BOOL:
        return click.BOOL.convert(raw, None, None)
    if param.kind == KIND_UINT:
        return click.IntRange(min=0).convert(raw, None, None)
    return raw


def parse_params(op: Operation, pairs: tuple) -> dict:
    """Turn NAME=VALUE pairs into typed keyword arguments for op."""
    params = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected NAME=VALUE, got '{pair}'")
        name, raw = pair.split("=", 1)
        name = name.replace("-", "_")
        params[name] = _coerce(op, name, raw)
    return params


def _load(config_file: Path, backend: str = None, timeout: float = None) -> config_module.EmbeddedConfig:
    cfg = config_module.load_config(config_file)
    if backend:
        cfg.backend = backend
    if timeout is not None:
        cfg.timeout = timeout
    errors, _ = cfg.validate()
    if errors:
        raise ConfigError("; ".join(errors))
    return cfg


def _echo_result(result, output_json: Path) -> None:
    if result.stdout:
        click.echo(result.stdout, nl=not result.stdout.endswith("\n"))
    if result.stderr:
        click.echo(result.stderr, err=True, nl=not result.stderr.endswith("\n"))

    if output_json:
        with open(output_json, "w") as f:
            f.write(result.to_json())
        click.echo(f"result written to: {output_json}", err=True)

    if not result.ok:
        sys.exit(result.returncode)


config_file_option = click.option(
    "--config-file",
    type=click.Path(exists=True, path_type=Path),
    envvar=config_module.CONFIG_ENV,
    help="Config file path (default: /etc/ipfs-embedded/config.toml)",
)

backend_option = click.option(
    "--backend",
    type=click.Choice(config_module.BACKENDS),
    help="Override the runtime backend (default: from config)",
)

timeout_option = click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds to wait for the runtime (subprocess and http backends)",
)


@click.group()
@click.version_option(version=__version__, prog_name="ipfs-embedded")
def cli():
    """Typed bridge to an embedded IPFS runtime."""
    pass


@cli.command()
@click.option("--group", type=click.Choice(registry.GROUPS), help="Only list one group")
@click.option(
    "--output-json",
    type=click.Path(path_type=Path),
    help="Write the operation table as JSON to this file",
)
def ops(group: str, output_json: Path) -> None:
    """
    List supported operations.

    Examples:

        ipfs-embedded ops

        ipfs-embedded ops --group network
    """
    operations = registry.list_operations(group)

    for op in operations:
        params = " ".join(
            f"{p.name}:{p.kind}" if p.required else f"[{p.name}:{p.kind}]"
            for p in op.params
        )
        click.echo(f"{op.name:<18} {op.command:<18} {params}".rstrip())

    if output_json:
        with open(output_json, "w") as f:
            json.dump([op.to_dict() for op in operations], f, indent=2)
        click.echo(f"operations written to: {output_json}", err=True)


@cli.command()
@click.argument("operation", required=True)
@click.argument("params", nargs=-1)
@click.option("--tokens", is_flag=True, help="Print one token per line instead of the command line")
@handle_errors
def encode(operation: str, params: tuple, tokens: bool) -> None:
    """
    Print the command an operation encodes to, without running it.

    Examples:

        ipfs-embedded encode pin_add ipfs_path=/ipfs/Qm... recursive=true

        ipfs-embedded encode get ipfs_path=/ipfs/Qm... compress=yes compression_level=6
    """
    op = registry.get_operation(operation)
    command = registry.encode(op.name, **parse_params(op, params))
    if tokens:
        for token in command.tokens:
            click.echo(token)
    else:
        click.echo(command.line)


@cli.command()
@click.argument("operation", required=True)
@click.argument("params", nargs=-1)
@config_file_option
@backend_option
@timeout_option
@click.option(
    "--output-json",
    type=click.Path(path_type=Path),
    help="Write the full result as JSON to this file",
)
@handle_errors
def run(operation: str, params: tuple, config_file: Path, backend: str, timeout: float, output_json: Path) -> None:
    """
    Run an operation through the configured runtime.

    Exits with the runtime's return code.

    Examples:

        ipfs-embedded run version

        ipfs-embedded run ping peer_id=QmPeer count=3 --backend http
    """
    op = registry.get_operation(operation)
    command = registry.encode(op.name, **parse_params(op, params))
    dispatcher = create_dispatcher(_load(config_file, backend, timeout))
    _echo_result(dispatcher.dispatch(command), output_json)


@cli.command("exec", context_settings={"ignore_unknown_options": True})
@config_file_option
@backend_option
@timeout_option
@click.argument("args", nargs=-1, required=True, type=click.UNPROCESSED)
@handle_errors
def exec_(config_file: Path, backend: str, timeout: float, args: tuple) -> None:
    """
    Pass raw arguments straight to the runtime.

    Examples:

        ipfs-embedded exec swarm peers

        ipfs-embedded exec --backend library -- pin ls -t all
    """
    dispatcher = create_dispatcher(_load(config_file, backend, timeout))
    _echo_result(dispatcher.dispatch(encoder.raw(*args)), None)


@cli.command()
@config_file_option
@click.option(
    "--validate-only",
    is_flag=True,
    help="Only validate config, don't display it",
)
@click.option(
    "--output-json",
    type=click.Path(path_type=Path),
    help="Write config as JSON to this file",
)
def config(config_file: Path, validate_only: bool, output_json: Path) -> None:
    """
    Display and validate ipfs-embedded configuration.

    Examples:

        ipfs-embedded config                    # Display config with validation

        ipfs-embedded config --validate-only    # Just check for errors

        ipfs-embedded config --output-json config.json   # Export as JSON
    """
    try:
        cfg = config_module.load_config(config_file)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except ConfigError as e:
        click.echo(f"Error: Invalid config: {e}", err=True)
        sys.exit(1)

    errors, warnings = cfg.validate()

    if not validate_only:
        click.echo(f"Config file: {cfg.source or '(none, using defaults)'}")
        click.echo()

        click.echo("Runtime:")
        click.echo(f"  backend: {cfg.backend}")
        click.echo(f"  serialize: {cfg.serialize}")
        click.echo(f"  timeout: {cfg.timeout if cfg.timeout is not None else '(none)'}")
        click.echo()

        if cfg.backend == "subprocess":
            click.echo("Subprocess:")
            click.echo(f"  executable: {cfg.subprocess.executable}")
            click.echo(f"  repo_path: {cfg.subprocess.repo_path or '(default)'}")
        elif cfg.backend == "library":
            click.echo("Library:")
            click.echo(f"  path: {cfg.library.path or '(not set)'}")
            click.echo(f"  entry_point: {cfg.library.entry_point}")
        elif cfg.backend == "http":
            click.echo("HTTP:")
            click.echo(f"  api: http://{cfg.http.host}:{cfg.http.port}/api/v0")
            click.echo(f"  auth: {'configured' if cfg.http.auth else '(not set)'}")
        click.echo()

    # Validation results
    if errors:
        click.echo("Errors:", err=True)
        for e in errors:
            click.echo(f"  ✗ {e}", err=True)
    if warnings:
        click.echo("Warnings:")
        for w in warnings:
            click.echo(f"  ⚠ {w}")
    if not errors and not warnings:
        click.echo("✓ Config is valid")

    if output_json:
        output_data = cfg.to_dict()
        output_data.update({
            "errors": errors,
            "warnings": warnings,
            "valid": len(errors) == 0,
        })
        with open(output_json, "w") as f:
            json.dump(output_data, f, indent=2)
        click.echo(f"Config written to: {output_json}")

    sys.exit(1 if errors else 0)
