"""Command line interface for querying a remote management registry."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

import typer

from jmxbridge.adapter import RemoteRegistryAdapter
from jmxbridge.config import load_config
from jmxbridge.errors import InvalidStateError, ManagementError
from jmxbridge.names import ObjectName
from jmxbridge.registry.models import Attribute
from jmxbridge.transports import HttpTransport, get_transport

app = typer.Typer(help="CLI for remote management registries")

_state: dict[str, Any] = {"url": None}


@app.callback()
def main(
    url: Optional[str] = typer.Option(
        None, help="Agent URL; selects the HTTP transport when given"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """jmxbridge CLI entry point."""
    _state["url"] = url
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


def _adapter() -> RemoteRegistryAdapter:
    url = _state["url"]
    if url:
        http_conf = load_config().transport.http
        transport = HttpTransport(
            url=url,
            user=http_conf.user,
            password=http_conf.password,
            timeout=http_conf.timeout,
            max_retries=http_conf.max_retries,
        )
    else:
        transport = get_transport()
    return RemoteRegistryAdapter(transport)


def _echo(value: Any) -> None:
    typer.echo(json.dumps(value, indent=2, default=str, sort_keys=True))


def _fail(error: Exception) -> None:
    typer.secho(f"{type(error).__name__}: {error}", fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _parse_value(raw: str) -> Any:
    """Decode JSON literals, falling back to the raw string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


@app.command("read")
def read(
    mbean: str,
    attributes: Optional[List[str]] = typer.Argument(None),
    path: Optional[str] = typer.Option(
        None, "--path", help="Inner path into a single attribute value"
    ),
) -> None:
    """
    Read attributes of a management object.

    Without attribute names all attributes are read.

    Example:
        jmxbridge read java.lang:type=Memory HeapMemoryUsage
    """
    try:
        adapter = _adapter()
        if path is not None:
            if not attributes or len(attributes) != 1:
                raise InvalidStateError("--path needs exactly one attribute")
            _echo(adapter.get_attribute(mbean, attributes[0], path=path))
            return
        if not attributes:
            _echo(adapter.get_all_attributes(mbean))
        elif len(attributes) == 1:
            _echo(adapter.get_attribute(mbean, attributes[0]))
        else:
            _echo({a.name: a.value for a in adapter.get_attributes(mbean, attributes)})
    except (ManagementError, OSError) as e:
        _fail(e)


@app.command("write")
def write(mbean: str, attribute: str, value: str) -> None:
    """Set an attribute; VALUE is parsed as JSON when possible."""
    try:
        _adapter().set_attribute(mbean, Attribute(name=attribute, value=_parse_value(value)))
    except (ManagementError, OSError) as e:
        _fail(e)
    typer.echo(f"Updated {attribute} on {mbean}")


@app.command("exec")
def exec_operation(
    mbean: str,
    operation: str,
    arguments: Optional[List[str]] = typer.Argument(None),
) -> None:
    """Invoke an operation; ARGUMENTS are parsed as JSON when possible."""
    try:
        params = [_parse_value(arg) for arg in arguments or []]
        _echo(_adapter().invoke(mbean, operation, params))
    except (ManagementError, OSError) as e:
        _fail(e)


@app.command("list")
def list_instances(mbean: Optional[str] = typer.Argument(None)) -> None:
    """List instances and their declared classes."""
    try:
        instances = _adapter().query_instances(mbean)
    except (ManagementError, OSError) as e:
        _fail(e)
    if not instances:
        typer.echo("No instances found")
        return
    for instance in sorted(instances, key=lambda i: str(i.object_name)):
        typer.echo(f"{instance.object_name}\t{instance.class_name}")


@app.command("search")
def search(pattern: Optional[str] = typer.Argument(None)) -> None:
    """Print the names matching PATTERN (everything when omitted)."""
    try:
        names = _adapter().query_names(ObjectName.of(pattern) if pattern else None)
    except (ManagementError, OSError) as e:
        _fail(e)
    for name in sorted(names, key=str):
        typer.echo(str(name))


@app.command("domains")
def domains() -> None:
    """Print the domains in the order the registry reports them."""
    try:
        for domain in _adapter().get_domains():
            typer.echo(domain)
    except (ManagementError, OSError) as e:
        _fail(e)


if __name__ == "__main__":
    app()
