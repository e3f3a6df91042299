"""
=============================================================================
REQUEST HANDLERS
=============================================================================

A handler takes an HTTPRequest and returns an HTTPResponse:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       HANDLER TYPES                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  FUNCTION HANDLERS (stateless)                                      │
    │  ┌────────────────────────────────────────────────────────────────┐ │
    │  │ basic.root        GET /                                        │ │
    │  │ basic.user_agent  GET /user-agent                              │ │
    │  └────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  CLASS HANDLERS (configured once, register .handle)                 │
    │  ┌────────────────────────────────────────────────────────────────┐ │
    │  │ EchoHandler       GET /echo/*text         (compression level)  │ │
    │  │ FileHandler       ANY /files/*filename    (root directory)     │ │
    │  └────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Handlers report failures as responses (400/404/500). Anything they raise
is turned into a 500 by the server.
"""

from .basic import root, user_agent
from .echo import EchoHandler
from .files import FileHandler

__all__ = [
    "root",
    "user_agent",
    "EchoHandler",
    "FileHandler",
]
