"""
In-memory XML-RPC server answering through ``httpx.MockTransport``.
"""

import typing as t
import xmlrpc.client

import httpx

SERVER_URL = "http://rpc.test/RPC2"
MULTICALL_METHODS = ("system.multicall", "system.multiCall")


class FakeXmlRpcServer:
    """
    Emulate an XML-RPC endpoint, including ``system.multicall``.

    Registered functions receive the decoded params. Raising
    ``xmlrpc.client.Fault`` produces a fault response; any other exception
    becomes fault code ``1``.
    """

    def __init__(self) -> None:
        self.methods: dict[str, t.Callable[..., t.Any]] = {}
        self.requests: list[tuple[str, tuple[t.Any, ...]]] = []
        self.register(name="system.listMethods", func=lambda: sorted(self.methods))

    def register(self, *, name: str, func: t.Callable[..., t.Any]) -> None:
        self.methods[name] = func

    def dispatch(self, *, method: str, params: t.Sequence[t.Any]) -> t.Any:
        func = self.methods.get(method)
        if func is None:
            raise xmlrpc.client.Fault(-32601, f"method {method} not found")
        try:
            return func(*params)
        except xmlrpc.client.Fault:
            raise
        except Exception as exc:
            raise xmlrpc.client.Fault(1, str(exc)) from exc

    def multicall(self, *, calls: list[dict[str, t.Any]]) -> list[t.Any]:
        results: list[t.Any] = []
        for call in calls:
            try:
                results.append(
                    [self.dispatch(method=call["methodName"], params=call.get("params", []))]
                )
            except xmlrpc.client.Fault as fault:
                results.append({"faultCode": fault.faultCode, "faultString": fault.faultString})
        return results

    def handle(self, request: httpx.Request) -> httpx.Response:
        params, method = xmlrpc.client.loads(request.read(), use_builtin_types=False)
        self.requests.append((method, params))
        try:
            if method in MULTICALL_METHODS:
                result = self.multicall(calls=params[0])
            else:
                result = self.dispatch(method=method, params=params)
            body = xmlrpc.client.dumps((result,), methodresponse=True, allow_none=True)
        except xmlrpc.client.Fault as fault:
            body = xmlrpc.client.dumps(fault, methodresponse=True)
        return httpx.Response(
            status_code=200,
            content=body.encode("utf-8"),
            headers={"Content-Type": "text/xml"},
        )

    def http_client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))


def make_server() -> FakeXmlRpcServer:
    """
    Build a server with a few arithmetic and echo methods.

    Returns
    -------
    FakeXmlRpcServer
        Server exposing ``add``, ``echo``, ``ident``, ``math.mul``, ``math.pair``,
        ``fail`` and ``system.listMethods``.
    """
    server = FakeXmlRpcServer()
    server.register(name="add", func=lambda a, b: a + b)
    server.register(name="echo", func=lambda *args: list(args))
    server.register(name="ident", func=lambda value: value)
    server.register(name="math.mul", func=lambda a, b: a * b)
    server.register(name="math.pair", func=lambda a, b: [a, b])

    def fail(code: int = 7, message: str = "bad") -> t.NoReturn:
        raise xmlrpc.client.Fault(code, message)

    server.register(name="fail", func=fail)
    return server
