import base64
import json
import typing as t
import xmlrpc.client
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich import print
from rich.console import Console
from rich.table import Table

from rpcbatch.api import client
from rpcbatch.client import Client
from rpcbatch.exceptions import RpcbatchError
from rpcbatch.normalize import is_fault
from rpcbatch.settings import ClientSettings
from rpcbatch.transport import HttpTransport, Transport
from rpcbatch.utils.logging import logging_context, setup_logging

app = typer.Typer(no_args_is_help=True)


def make_transport(settings: ClientSettings) -> Transport:
    return HttpTransport(timeout=settings.timeout)


def make_client(url: str) -> Client:
    settings = ClientSettings.from_env()
    return client(url, transport=make_transport(settings), settings=settings, throw_on_fault=False)


def parse_value(raw: str) -> t.Any:
    """Parse a command line value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_call(raw: str) -> dict[str, t.Any]:
    method, _, params = raw.strip().partition(" ")
    if not method:
        raise typer.BadParameter(message="empty method name", param_hint="--call, -c")
    value = parse_value(params) if params.strip() else []
    return {"methodName": method, "params": value if isinstance(value, list) else [value]}


def _json_default(value: t.Any) -> t.Any:
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, xmlrpc.client.Binary):
        return base64.b64encode(value.data).decode("ascii")
    if isinstance(value, xmlrpc.client.DateTime):
        return value.value
    return repr(value)


def render(value: t.Any) -> str:
    return json.dumps(value, default=_json_default, ensure_ascii=False)


def print_fault(fault: t.Mapping[str, t.Any]) -> None:
    print(f"[red]Fault {fault['faultCode']}: {fault['faultString']}[/red]")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Log requests and responses"),
    ] = False,
):
    """Call XML-RPC servers from the command line."""
    load_dotenv()
    if verbose:
        setup_logging()


@app.command(name="call")
def call_method(
    url: Annotated[str, typer.Argument(help="The XML-RPC endpoint")],
    method: Annotated[str, typer.Argument(help="The remote method, e.g. system.listMethods")],
    args: Annotated[
        t.Optional[list[str]],
        typer.Argument(help="Arguments, parsed as JSON when possible"),
    ] = None,
):
    """Call a single remote method"""
    params = [parse_value(arg) for arg in args or []]
    with logging_context(url=url, method=method), make_client(url) as server:
        try:
            result = server._invoke(method, params)
        except RpcbatchError as exc:
            print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1)
    if is_fault(result):
        print_fault(result)
        raise typer.Exit(code=1)
    Console().print(render(result), highlight=True, soft_wrap=True)


@app.command(name="multicall")
def multicall(
    url: Annotated[str, typer.Argument(help="The XML-RPC endpoint")],
    calls: Annotated[
        list[str],
        typer.Option(
            "-c",
            "--call",
            help="A call as 'METHOD [JSON_ARRAY]', repeat for each call",
        ),
    ],
):
    """Send several calls in one system.multicall request"""
    specs = [parse_call(raw) for raw in calls]
    with logging_context(url=url), make_client(url) as server:
        try:
            results = server.system.multicall(specs)
        except RpcbatchError as exc:
            print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1)
    if is_fault(results):
        print_fault(results)
        raise typer.Exit(code=1)
    table = Table("Index", "Method", "Result", title="Multicall")
    failed = False
    for index, (spec, result) in enumerate(zip(specs, results)):
        if is_fault(result):
            failed = True
            table.add_row(
                str(index),
                spec["methodName"],
                f"[red]Fault {result['faultCode']}: {result['faultString']}[/red]",
            )
        else:
            table.add_row(str(index), spec["methodName"], render(result))
    Console().print(table)
    if failed:
        raise typer.Exit(code=1)


@app.command(name="methods")
def list_methods(
    url: Annotated[str, typer.Argument(help="The XML-RPC endpoint")],
):
    """List the methods exposed by the server"""
    with logging_context(url=url), make_client(url) as server:
        try:
            methods = server.system.listMethods()
        except RpcbatchError as exc:
            print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1)
    if is_fault(methods):
        print_fault(methods)
        raise typer.Exit(code=1)
    if not isinstance(methods, list):
        methods = [methods]
    for name in methods:
        print(name)
