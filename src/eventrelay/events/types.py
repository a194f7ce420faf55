"""Event type constants.

Learn: Centralizing event names as constants prevents typos and makes
the vocabulary discoverable. The relay itself does not enforce it —
producers may publish new names and they are relayed as-is, only
flagged in the log as unknown.
"""

# ─── Relay-generated ─────────────────────────────────────

CONNECTED = "connected"

# ─── Bookings ────────────────────────────────────────────

BOOKING_CREATED = "booking_created"
BOOKING_UPDATED = "booking_updated"
BOOKING_DELETED = "booking_deleted"

# ─── Blocked times ───────────────────────────────────────

BLOCKED_TIME_CREATED = "blocked_time_created"
BLOCKED_TIME_DELETED = "blocked_time_deleted"

# ─── Services + categories ───────────────────────────────

SERVICE_CREATED = "service_created"
SERVICE_UPDATED = "service_updated"
SERVICE_DELETED = "service_deleted"
CATEGORY_CREATED = "category_created"
CATEGORY_UPDATED = "category_updated"
CATEGORY_DELETED = "category_deleted"

# Everything a producer is expected to publish
KNOWN_EVENTS = frozenset({
    BOOKING_CREATED,
    BOOKING_UPDATED,
    BOOKING_DELETED,
    BLOCKED_TIME_CREATED,
    BLOCKED_TIME_DELETED,
    SERVICE_CREATED,
    SERVICE_UPDATED,
    SERVICE_DELETED,
    CATEGORY_CREATED,
    CATEGORY_UPDATED,
    CATEGORY_DELETED,
})
