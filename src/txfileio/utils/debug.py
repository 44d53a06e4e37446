"""Debug utility for txfileio.

Provides a single debug() function that can be toggled via the
TXFILEIO_DEBUG environment variable. Used for per-file chatter in the
filesystem operations, where structured logs would be too noisy.

Usage:
    from txfileio.utils.debug import debug

    debug(f"Copied {source} -> {target}")

Environment:
    TXFILEIO_DEBUG: Set to '1', 'true', 'yes' (case-insensitive) to enable
                    debug output. Any other value or unset disables it.
"""

import os
import sys
from typing import Any

# Determine if debug mode is enabled at module import time
_DEBUG_ENABLED = os.environ.get("TXFILEIO_DEBUG", "").lower() in (
    "1",
    "true",
    "yes",
)


def debug(msg: Any) -> None:
    """Print debug message if TXFILEIO_DEBUG is enabled.

    Args:
        msg: Message to print. Will be converted to string.

    Note:
        The environment variable is read at module import time. Changing it
        afterwards has no effect unless the module is reloaded.
    """
    if _DEBUG_ENABLED:
        print(f"[DEBUG] {msg}", file=sys.stdout)
