"""
EVO API Client Package.

Layers, leaves first:
- transport: authenticated GET / multipart POST, classified failures
- envelope: {status, message, data} unwrapping into typed payloads
- client: generic call() and the twelve API operations
"""

from evocli.api.client import EvoClient
from evocli.api.session import ClientSession, build_session

__all__ = [
    "ClientSession",
    "EvoClient",
    "build_session",
]
