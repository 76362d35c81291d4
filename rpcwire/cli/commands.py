"""CLI commands for rpcwire.

Top-level commands: encode (print a request document), decode (read a response
document), call (full round trip against an endpoint), and the config group.
"""

from __future__ import annotations

import base64
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from rpcwire import __version__
from rpcwire.client import XmlRpcClient
from rpcwire.config.access import get_config
from rpcwire.config.loader import convert_to_camel, get_config_path, save_config
from rpcwire.config.schema import ClientConfig, Config
from rpcwire.core.decoder import decode
from rpcwire.core.errors import RemoteFault, RpcWireError, find_error
from rpcwire.core.serialization import encode
from rpcwire.core.values import Result
from rpcwire.utils.logging_utils import configure_logging

app = typer.Typer(
    name="rpcwire",
    help=f"rpcwire {__version__} - XML-RPC codec and client",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

EXIT_ERROR = 1
EXIT_FAULT = 2


def parse_value(raw: str) -> Any:
    """Parse CLI input value as JSON if possible; fallback to string."""
    text = raw.strip()
    if text == "":
        return ""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        lowered = text.lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
        return text


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def result_to_json(result: Result) -> str:
    return json.dumps(result.to_python(), default=_json_default, indent=2, ensure_ascii=False)


def _fail(exc: RpcWireError) -> typer.Exit:
    fault = find_error(exc, RemoteFault)
    if fault is not None:
        err_console.print(f"[yellow]Remote fault {fault.fault_code}:[/yellow] {escape(fault.fault_string)}")
        return typer.Exit(EXIT_FAULT)
    err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
    return typer.Exit(EXIT_ERROR)


@app.command("encode")
def encode_command(
    method: str = typer.Argument(..., help="Remote method name"),
    args: Optional[List[str]] = typer.Argument(None, help="Arguments; JSON values or plain strings"),
) -> None:
    """Print the request document for METHOD called with ARGS."""
    try:
        payload = encode(method, *[parse_value(a) for a in args or []])
    except RpcWireError as exc:
        raise _fail(exc)
    typer.echo(payload.decode("utf-8"))


@app.command("decode")
def decode_command(
    source: str = typer.Argument("-", help="Response document path, or '-' for stdin"),
) -> None:
    """Decode a methodResponse document and print the result as JSON."""
    try:
        data = sys.stdin.buffer.read() if source == "-" else Path(source).read_bytes()
    except OSError as exc:
        err_console.print(f"[red]Cannot read {escape(source)}:[/red] {escape(str(exc))}")
        raise typer.Exit(EXIT_ERROR)
    try:
        result = decode(data)
    except RpcWireError as exc:
        raise _fail(exc)
    typer.echo(result_to_json(result))


@app.command("call")
def call_command(
    method: str = typer.Argument(..., help="Remote method name"),
    args: Optional[List[str]] = typer.Argument(None, help="Arguments; JSON values or plain strings"),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", "-e", help="Endpoint URL (overrides config)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Timeout in seconds (overrides config)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Log request/response details to stderr"),
) -> None:
    """Call METHOD on the configured endpoint and print the result as JSON."""
    try:
        config = get_config(config_path=config_path)
    except ValueError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(EXIT_ERROR)
    overrides: dict[str, Any] = {}
    if endpoint is not None:
        overrides["endpoint"] = endpoint
    if timeout is not None:
        overrides["timeout_seconds"] = timeout
    try:
        client_config = ClientConfig.model_validate({**config.client.model_dump(), **overrides})
    except ValidationError as exc:
        err_console.print(f"[red]Invalid option:[/red] {escape(str(exc))}")
        raise typer.Exit(EXIT_ERROR)
    config = config.model_copy(update={"client": client_config})
    configure_logging("DEBUG" if debug else config.logging.level, config.logging.file)

    try:
        with XmlRpcClient.from_config(config) as client:
            result = client.call(method, *[parse_value(a) for a in args or []])
    except RpcWireError as exc:
        raise _fail(exc)
    typer.echo(result_to_json(result))


config_app = typer.Typer(help="Config helpers (show/init)")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Print the effective configuration."""
    try:
        config = get_config(config_path=config_path, force_reload=True)
    except ValueError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(EXIT_ERROR)
    typer.echo(json.dumps(convert_to_camel(config.model_dump()), indent=2, ensure_ascii=False))


@config_app.command("init")
def config_init(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a default config file."""
    path = config_path or get_config_path()
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists:[/yellow] {path}")
        raise typer.Exit(EXIT_ERROR)
    save_config(Config(), path)
    console.print(f"[green]✓[/green] Wrote {path}")
