"""Core constants for txfileio.

This module defines defaults used throughout the package:
- Rollback tolerance applied to timestamp comparisons
- Copy buffer size
- Environment variable names for configuration
"""

# ============================================================================
# Transactions
# ============================================================================

#: Milliseconds subtracted from "now" when an undo action is registered.
#: Absorbs filesystem timestamp resolution and clock skew.
DEFAULT_ROLLBACK_TOLERANCE_MS: int = 50

# ============================================================================
# Copy
# ============================================================================

#: Default chunk size (bytes) for buffered copies
DEFAULT_BUFFER_SIZE: int = 64 * 1024

# ============================================================================
# Environment
# ============================================================================

ENV_DEBUG: str = "TXFILEIO_DEBUG"
ENV_ROLLBACK_TOLERANCE_MS: str = "TXFILEIO_ROLLBACK_TOLERANCE_MS"
ENV_BUFFER_SIZE: str = "TXFILEIO_BUFFER_SIZE"
