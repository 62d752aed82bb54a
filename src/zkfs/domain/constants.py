from __future__ import annotations

"""
Domain Constants.

Application-wide defaults for connectivity, payload limits and ACL policy.
"""

from typing import Tuple

# -----------------------------------------------------------------------------
# CONNECTIVITY
# -----------------------------------------------------------------------------

DEFAULT_ADDRESS = "localhost:2181/"
DEFAULT_TIMEOUT_SECONDS = 10.0

# -----------------------------------------------------------------------------
# PAYLOAD LIMITS
# -----------------------------------------------------------------------------

# Server-side default of jute.maxbuffer
DEFAULT_MAX_PAYLOAD_BYTES = 0xFFFFF

# -----------------------------------------------------------------------------
# ACL POLICY
# -----------------------------------------------------------------------------

DEFAULT_ACL_POLICY = "open"
ACL_POLICIES: Tuple[str, ...] = ("open", "read-only", "creator")

# Version sentinel meaning "match any version"
ANY_VERSION = -1
