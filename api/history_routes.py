# ============================================================================
# HISTORY ROUTES
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - Logo history HTTP endpoints
# PURPOSE: Paging, selection, mutations, catalog and export over HTTP
# CREATED: 14 OCT 2026
# ============================================================================
"""
History Routes

Endpoints (all scoped to the X-Owner-Id header):
- GET    /api/v1/history                         - Fetch a page
- POST   /api/v1/history/selection/page          - Select the current page
- POST   /api/v1/history/selection/all           - Select all filtered (full scan)
- POST   /api/v1/history/selection/{logo_id}     - Toggle one logo
- DELETE /api/v1/history/selection               - Clear the selection
- GET    /api/v1/history/export?format=png       - ZIP of the selection
- DELETE /api/v1/logos/{logo_id}                 - Delete and re-fetch
- POST   /api/v1/logos/bulk-delete               - Delete the selection
- PATCH  /api/v1/logos/{logo_id}                 - Rename
- POST   /api/v1/logos/{logo_id}/catalog         - Add to catalog
- GET    /api/v1/logos/{logo_id}/image           - Card image through the cache
"""

import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query
from fastapi.responses import Response

from core.config import get_defaults
from core.contracts import ExportFormat
from core.errors import (
    HistoryFetchError,
    InvalidLogoNameError,
    LogoNotFoundError,
    RepositoryError,
)
from core.models.history import OwnerUsage
from api.schemas import (
    BulkDeleteResponse,
    CatalogAddResponse,
    HistoryResponse,
    ImageResponse,
    RenameRequest,
    RenameResponse,
    SelectionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["history"])


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

_registry = None


def set_history_services(registry):
    """Called by main.py at startup to inject the session registry."""
    global _registry
    _registry = registry


def _get_session(owner_id: str):
    """Get the owner's session, raising 503 if not initialized."""
    if _registry is None:
        raise HTTPException(503, "History services not initialized")
    if not owner_id or not owner_id.strip():
        raise HTTPException(401, "X-Owner-Id header required")
    return _registry.get(owner_id.strip())


def _history_response(session, page=None, catalog=None, usage: Optional[OwnerUsage] = None):
    return HistoryResponse.from_page(
        page if page is not None else session.state.page,
        session.selection.ids(),
        catalog=catalog,
        window=get_defaults().pagination.page_window,
        can_create_original=usage.can_create_original if usage else None,
    )


# ============================================================================
# HISTORY
# ============================================================================

@router.get("/history", response_model=HistoryResponse)
async def get_history(
    page: Optional[int] = Query(None, ge=1),
    search: Optional[str] = Query(None, max_length=200),
    industry: Optional[str] = Query(None, max_length=100),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    x_owner_id: str = Header(...),
    x_logos_created: Optional[int] = Header(None, ge=0),
    x_logos_limit: Optional[int] = Header(None, ge=0),
):
    """
    Fetch one page of the owner's history.

    Changing search, industry or page size starts again at page 1. A
    request superseded by a newer one for the same owner answers with
    whatever the newer one committed.
    """
    session = _get_session(x_owner_id)

    try:
        result = await session.show(
            page=page, search_term=search, industry=industry, page_size=page_size,
        )
    except HistoryFetchError as e:
        logger.error(f"GET /history failed: {e}")
        raise HTTPException(502, f"Failed to load history: {e}")

    catalog = await session.sync_catalog()

    usage = None
    if x_logos_created is not None and x_logos_limit is not None:
        usage = OwnerUsage(logos_created=x_logos_created, logos_limit=x_logos_limit)

    return _history_response(session, result, catalog, usage)


# ============================================================================
# SELECTION
# ============================================================================

@router.post("/history/selection/page", response_model=SelectionResponse)
async def select_page(x_owner_id: str = Header(...)):
    """Add the current page's displayed logos to the selection."""
    session = _get_session(x_owner_id)
    session.select_current_page()
    ids = session.selection.ids()
    return SelectionResponse(selected=ids, count=len(ids))


@router.post("/history/selection/all", response_model=SelectionResponse)
async def select_all(x_owner_id: str = Header(...)):
    """
    Replace the selection with every logo matching the current filters.

    Scans the owner's whole history.
    """
    session = _get_session(x_owner_id)
    try:
        ids = await session.select_all_filtered()
    except RepositoryError as e:
        logger.error(f"Logo store request failed: {e}")
        raise HTTPException(502, str(e))
    return SelectionResponse(selected=ids, count=len(ids))


@router.post("/history/selection/{logo_id}", response_model=SelectionResponse)
async def toggle_selection(logo_id: str, x_owner_id: str = Header(...)):
    """Select or deselect one logo."""
    session = _get_session(x_owner_id)
    session.selection.toggle(logo_id)
    ids = session.selection.ids()
    return SelectionResponse(selected=ids, count=len(ids))


@router.delete("/history/selection", response_model=SelectionResponse)
async def clear_selection(x_owner_id: str = Header(...)):
    """Deselect everything."""
    session = _get_session(x_owner_id)
    session.clear_selection()
    return SelectionResponse()


# ============================================================================
# EXPORT
# ============================================================================

@router.get("/history/export")
async def export_selection(
    format: ExportFormat = Query(ExportFormat.PNG),
    x_owner_id: str = Header(...),
):
    """ZIP of the selected logos. Logos that fail to convert are left out."""
    session = _get_session(x_owner_id)
    try:
        archive = await session.export_selection(format)
    except ValueError as e:
        raise HTTPException(400, str(e))

    return Response(
        content=archive.content,
        media_type=archive.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{archive.filename}"',
            "X-Export-Included": str(len(archive.included)),
            "X-Export-Skipped": str(len(archive.skipped)),
        },
    )


# ============================================================================
# MUTATIONS
# ============================================================================

@router.delete("/logos/{logo_id}", response_model=HistoryResponse)
async def delete_logo(logo_id: str, x_owner_id: str = Header(...)):
    """Delete a logo (and its revisions) and return the re-fetched page."""
    session = _get_session(x_owner_id)
    try:
        page = await session.delete_logo(logo_id)
    except LogoNotFoundError as e:
        raise HTTPException(404, str(e))
    except (RepositoryError, HistoryFetchError) as e:
        logger.error(f"Logo store request failed: {e}")
        raise HTTPException(502, str(e))

    return _history_response(session, page)


@router.post("/logos/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete(x_owner_id: str = Header(...)):
    """Delete every selected logo; individual failures are reported, not raised."""
    session = _get_session(x_owner_id)
    try:
        result = await session.bulk_delete()
    except HistoryFetchError as e:
        logger.error(f"Logo store request failed: {e}")
        raise HTTPException(502, str(e))

    return BulkDeleteResponse(
        deleted=result.deleted,
        failed=result.failed,
        history=_history_response(session, result.page),
    )


@router.patch("/logos/{logo_id}", response_model=RenameResponse)
async def rename_logo(logo_id: str, request: RenameRequest, x_owner_id: str = Header(...)):
    """Rename a logo."""
    session = _get_session(x_owner_id)
    try:
        logo = await session.rename_logo(logo_id, request.name)
    except InvalidLogoNameError as e:
        raise HTTPException(400, str(e))
    except LogoNotFoundError as e:
        raise HTTPException(404, str(e))
    except RepositoryError as e:
        logger.error(f"Logo store request failed: {e}")
        raise HTTPException(502, str(e))

    return RenameResponse(id=logo.id, name=logo.name)


# ============================================================================
# CATALOG + IMAGES
# ============================================================================

@router.post("/logos/{logo_id}/catalog", response_model=CatalogAddResponse)
async def add_to_catalog(logo_id: str, x_owner_id: str = Header(...)):
    """
    Add a logo to the catalog.

    Already-catalogued logos answer with their existing code. Other
    failures answer with outcome "failed" and the previous catalog state.
    """
    session = _get_session(x_owner_id)
    try:
        result = await session.add_to_catalog(logo_id)
    except LogoNotFoundError as e:
        raise HTTPException(404, str(e))
    except RepositoryError as e:
        logger.error(f"Logo store request failed: {e}")
        raise HTTPException(502, str(e))

    return CatalogAddResponse(
        logo_id=logo_id,
        outcome=result.outcome,
        catalog_code=result.catalog_code,
        error=result.error,
        catalog=session.catalog.ui_state(logo_id).model_copy(),
    )


@router.get("/logos/{logo_id}/image", response_model=ImageResponse)
async def get_logo_image(logo_id: str, x_owner_id: str = Header(...)):
    """
    A card's image, loaded once per card and cached for the session.

    A failed load is not retried while the card stays on the committed
    page.
    """
    session = _get_session(x_owner_id)
    image = await session.load_image(logo_id)
    loader = session.loaders.get(logo_id)
    state = loader.state if loader is not None else None

    if image is None:
        detail = loader.error if loader is not None else None
        raise HTTPException(404, detail or "Image not available")

    return ImageResponse(logo_id=logo_id, state=state, image_data_uri=image)
