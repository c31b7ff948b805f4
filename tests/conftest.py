import pytest

from rpcbatch.client import Client
from rpcbatch.transport import HttpTransport
from tests.mocks.server import SERVER_URL, FakeXmlRpcServer, make_server


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("THROW_ON_FAULT", "AUTO_DECODE", "TIMEOUT", "ENCODING"):
        monkeypatch.delenv(f"RPCBATCH_{name}", raising=False)


@pytest.fixture
def server() -> FakeXmlRpcServer:
    """Fake XML-RPC server with arithmetic and echo methods."""
    return make_server()


@pytest.fixture
def rpc(server: FakeXmlRpcServer) -> Client:
    """Root client talking to the fake server over ``httpx.MockTransport``."""
    return Client(SERVER_URL, transport=HttpTransport(client=server.http_client()))
