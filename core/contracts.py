# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Foundation - Core enums shared across layers
# PURPOSE: Loader states, export formats, catalog outcomes
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: LoaderState, ExportFormat, CatalogOutcome, UNTITLED, MAX_REVISIONS
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the logo history layer.

These enums and constants cross every boundary:
- Store (PostgreSQL / in-memory)
- Remote catalog API (HTTP)
- Python (session services, routes)
"""

from enum import Enum


# Placeholder name given to logos saved without one
UNTITLED = "Untitled"

# Revisions allowed per original logo (enforced by the store, reflected here)
MAX_REVISIONS = 3

# Industry filter value that matches everything
ALL_INDUSTRIES = "all"


# ============================================================================
# STATUS ENUMS
# ============================================================================

class LoaderState(str, Enum):
    """
    Per-card image loader lifecycle.

    State transitions:
        IDLE -> LOADING -> LOADED
                        -> ERROR
    """
    IDLE = "idle"            # Mounted, not yet visible
    LOADING = "loading"      # Visible, fetch in flight
    LOADED = "loaded"        # Payload available
    ERROR = "error"          # Fetch failed or payload absent (no retry)

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions)."""
        return self in (LoaderState.LOADED, LoaderState.ERROR)

    def can_transition_to(self, target: "LoaderState") -> bool:
        """Check whether IDLE/LOADING/terminal ordering allows the move."""
        if self == LoaderState.IDLE:
            return target == LoaderState.LOADING
        if self == LoaderState.LOADING:
            return target in (LoaderState.LOADED, LoaderState.ERROR)
        return False


class ExportFormat(str, Enum):
    """Archive formats offered by bulk download."""
    PNG = "png"
    JPG = "jpg"
    SVG = "svg"


class CatalogOutcome(str, Enum):
    """Result of an add-to-catalog call."""
    ADDED = "added"          # Newly added, code issued
    CONFLICT = "conflict"    # Already in catalog, existing code returned
    FAILED = "failed"        # Any other failure
