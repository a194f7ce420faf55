"""Event relay — real-time fan-out of domain events to WebSocket clients.

Producers POST an event envelope to /broadcast; every client connected
to /ws receives a copy. Best-effort, at-most-once, no persistence.
"""

__version__ = "0.1.0"
