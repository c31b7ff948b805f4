from .api import client as client
from .call import Call as Call
from .client import Client as Client
from .codec import XmlRpcCodec as XmlRpcCodec
from .exceptions import (
    CallAlreadyBound as CallAlreadyBound,
    CallNotBound as CallNotBound,
    ConfigurationError as ConfigurationError,
    DecodingError as DecodingError,
    EncodingError as EncodingError,
    InvalidArgument as InvalidArgument,
    RemoteFault as RemoteFault,
    RpcbatchError as RpcbatchError,
    TransportError as TransportError,
)
from .multicall import MultiCall as MultiCall
from .normalize import is_fault as is_fault
from .transport import HttpTransport as HttpTransport

__all__ = [
    "client",
    "Client",
    "MultiCall",
    "Call",
    "is_fault",
    "XmlRpcCodec",
    "HttpTransport",
    "RpcbatchError",
    "InvalidArgument",
    "RemoteFault",
    "EncodingError",
    "DecodingError",
    "TransportError",
    "ConfigurationError",
    "CallAlreadyBound",
    "CallNotBound",
]
