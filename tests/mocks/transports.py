import typing as t
import xmlrpc.client

from rpcbatch.exceptions import TransportError


def response(value: t.Any) -> bytes:
    """Serialize ``value`` as an XML-RPC method response."""
    return xmlrpc.client.dumps((value,), methodresponse=True, allow_none=True).encode("utf-8")


def fault_response(code: int, message: str) -> bytes:
    return xmlrpc.client.dumps(xmlrpc.client.Fault(code, message), methodresponse=True).encode(
        "utf-8"
    )


class RecordingTransport:
    """Transport replaying canned responses and recording every request."""

    def __init__(self, *responses: bytes) -> None:
        self.responses = list(responses)
        self.posts: list[tuple[str, bytes]] = []

    def post(self, url: str, request: bytes) -> bytes:
        self.posts.append((url, request))
        if not self.responses:
            raise AssertionError("unexpected request")
        return self.responses.pop(0)

    def sent(self, index: int = -1) -> tuple[tuple[t.Any, ...], str]:
        """Decode a recorded request into ``(params, method_name)``."""
        return xmlrpc.client.loads(self.posts[index][1], use_builtin_types=False)


class FailingTransport:
    def __init__(self) -> None:
        self.posts: list[tuple[str, bytes]] = []

    def post(self, url: str, request: bytes) -> bytes:
        self.posts.append((url, request))
        raise TransportError(f"Could not access {url}", url=url)
