"""Relay exceptions.

Learn: Only faults inside the relay itself are exceptions. "Nobody is
listening" is a normal outcome (receivers=0), and a client vanishing
mid-send just ends that client's session.
"""


class RelayError(Exception):
    """Base class for relay faults."""


class BusClosedError(RelayError):
    """Raised when publishing to or subscribing on a closed fan-out bus."""


class DuplicateConnectionError(RelayError):
    """Raised when registering a connection id that is already live."""
