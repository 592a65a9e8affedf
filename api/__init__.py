# ============================================================================
# API MODULE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - FastAPI routes
# PURPOSE: HTTP API for the logo history view
# CREATED: 14 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for logo history sync.
"""

from .history_routes import router, set_history_services
from .schemas import (
    HistoryResponse,
    LogoCard,
    RenameRequest,
    SelectionResponse,
)

__all__ = [
    "router",
    "set_history_services",
    "HistoryResponse",
    "LogoCard",
    "RenameRequest",
    "SelectionResponse",
]
