"""Typed async client for Replicate predictions.

WHY: Replicate runs models as asynchronous prediction jobs. This package
gives applications a small, typed surface for them: create, poll, cancel,
and list, bound to one model version per client.

HOW: Two layers: a JSON transport over httpx (api.transport) and the
prediction client with its list iterator (api.client, api.pagination).
A thin argparse CLI sits on top for use from the terminal.

RULES:
- The library never retries, backs off or polls on its own
- Status values are always validated against the Status enum
"""

__version__ = "0.1.0"
