"""
Application Constants

This module contains all magic strings and numbers used throughout the application.
Centralizing constants makes the codebase more maintainable and easier to update.
"""

# ============================================================================
# Swipe Constants
# ============================================================================

TARGET_TYPE_DEVELOPER = "developer"
TARGET_TYPE_TOOL = "tool"

MAX_TARGET_ID_LENGTH = 255

# ============================================================================
# Messaging Constants
# ============================================================================

MAX_MESSAGE_LENGTH = 5000

# ============================================================================
# Realtime Channel Constants
# ============================================================================

REALTIME_PATH = "/ws"

# Connections that failed authentication are bound here; nothing is ever relayed in it
EMPTY_ROOM = 0

FRAME_CHAT_MESSAGE = "chat_message"
FRAME_TYPING_START = "typing_start"
FRAME_TYPING_STOP = "typing_stop"

# Sent by the server once the connection is bound to its room; never relayed
FRAME_CONNECTION_ACK = "connection_ack"

RELAYED_FRAME_TYPES = frozenset([
    FRAME_CHAT_MESSAGE,
    FRAME_TYPING_START,
    FRAME_TYPING_STOP,
])

SERVER_TIMESTAMP_FIELD = "serverTimestamp"

# ============================================================================
# Timing Constants (in seconds)
# ============================================================================

# Rate limiting
RATE_LIMIT_WINDOW_SECONDS = 60

# Rate limiter cleanup
RATE_LIMITER_CLEANUP_INTERVAL_HOURS = 24
RATE_LIMITER_INACTIVE_USER_THRESHOLD_HOURS = 24

# A peer that cannot take a frame within this time is evicted
REALTIME_SEND_TIMEOUT_SECONDS = 10
