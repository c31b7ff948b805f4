"""
Batch several calls into one system.multicall request.

Usage: python examples/multicall_example.py https://example.com/RPC2
"""

import sys

import rpcbatch
from rpcbatch.utils.logging import setup_logging


def main(url: str) -> None:
    setup_logging()
    with rpcbatch.client(url, throw_on_fault=True) as server:
        with server.system.multicall():
            methods = server.system.listMethods()
            signature = server.system.methodSignature("system.listMethods")

        print(methods.value)
        print(signature.value)

        results = server.system.multicall(
            [
                {"methodName": "system.methodHelp", "params": ["system.listMethods"]},
                {"methodName": "system.methodHelp", "params": ["system.multicall"]},
            ]
        )
        for text in results:
            print(text)


if __name__ == "__main__":
    main(sys.argv[1])
