# ============================================================================
# CATALOG HTTP CLIENT
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Infrastructure - Async HTTP client for the catalog backend
# PURPOSE: Catalog status checks, add-to-catalog, raster to SVG conversion
# CREATED: 14 OCT 2026
# ============================================================================
"""
Catalog HTTP Client

Async httpx client for the catalog API and the SVG conversion endpoint.

Endpoints:
- PUT  /api/catalog         {logoKeyId}             -> {isInCatalog, catalogLogo}
- POST /api/catalog         {logoKeyId, imageDataUri, parameters, originalCompanyName}
                            200 -> {catalogLogo: {catalog_code}}
                            409 -> {catalogCode}   (already in catalog)
- POST /api/convert-to-svg  multipart: image file + options JSON -> {svg}

_request returns (status_code, body_dict) and maps transport failures to
502/504, so callers only ever branch on status codes.
"""

import json
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from core.config import get_defaults
from core.contracts import CatalogOutcome
from core.errors import CatalogError, SvgConversionError
from core.models.catalog import CatalogAddResult, CatalogStatus
from core.models.logo import LogoParameters

logger = logging.getLogger(__name__)

CONFLICT = 409


class CatalogClient:
    """Async HTTP client for the catalog API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        defaults = get_defaults().catalog
        self._base_url = (base_url or defaults.catalog_api_url).rstrip("/")
        self._timeout = httpx.Timeout(timeout or defaults.request_timeout_seconds)
        self._headers = headers or {}
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            headers=self._headers,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Tuple[int, Dict[str, Any]]:
        """
        Make a request to the catalog backend.

        Returns (status_code, response_body_dict).
        On connection failure, returns (502, error_dict).
        """
        url = f"{self._base_url}{path}"

        try:
            async with self._client() as client:
                resp = await client.request(
                    method, url, json=json_body, files=files, data=data,
                )

            try:
                body = resp.json()
            except ValueError:
                body = {"error": resp.text}
            if not isinstance(body, dict):
                body = {"data": body}

            if resp.status_code >= 500:
                logger.error(f"Catalog backend error {resp.status_code}: {path} -> {body}")

            return resp.status_code, body

        except httpx.ConnectError as e:
            logger.error(f"Cannot reach catalog backend at {url}: {e}")
            return 502, {"error": "Catalog backend unreachable", "detail": str(e)}
        except httpx.TimeoutException as e:
            logger.error(f"Catalog backend timeout: {url}: {e}")
            return 504, {"error": "Catalog backend timeout", "detail": str(e)}
        except httpx.HTTPError as e:
            logger.exception(f"Unexpected HTTP error calling catalog backend: {e}")
            return 502, {"error": "Catalog request failed", "detail": str(e)}

    # ------------------------------------------------------------------
    # STATUS
    # ------------------------------------------------------------------

    async def check_in_catalog(self, logo_id: str) -> CatalogStatus:
        """
        PUT /api/catalog

        Raises:
            CatalogError: Any non-200 response.
        """
        status, body = await self._request(
            "PUT", "/api/catalog", json_body={"logoKeyId": logo_id},
        )
        if status != 200:
            raise CatalogError(
                body.get("error") or f"Catalog check failed ({status})",
                status_code=status,
            )

        catalog_logo = body.get("catalogLogo") or {}
        return CatalogStatus(
            is_in_catalog=bool(body.get("isInCatalog")),
            catalog_code=catalog_logo.get("catalog_code"),
        )

    # ------------------------------------------------------------------
    # ADD
    # ------------------------------------------------------------------

    async def add_to_catalog(
        self,
        logo_id: str,
        image_data_uri: str,
        parameters: LogoParameters,
        company_name: Optional[str],
    ) -> CatalogAddResult:
        """
        POST /api/catalog

        A 409 means the logo is already catalogued; the body carries its code.
        """
        status, body = await self._request(
            "POST",
            "/api/catalog",
            json_body={
                "logoKeyId": logo_id,
                "imageDataUri": image_data_uri,
                "parameters": parameters.to_store(),
                "originalCompanyName": company_name or "Unknown Company",
            },
        )

        if status == 200:
            code = (body.get("catalogLogo") or {}).get("catalog_code")
            return CatalogAddResult(outcome=CatalogOutcome.ADDED, catalog_code=code)
        if status == CONFLICT:
            return CatalogAddResult(
                outcome=CatalogOutcome.CONFLICT, catalog_code=body.get("catalogCode"),
            )

        error = body.get("error") or body.get("detail") or f"HTTP {status}"
        logger.warning(f"Add to catalog failed for {logo_id}: {error}")
        return CatalogAddResult(outcome=CatalogOutcome.FAILED, error=str(error))

    # ------------------------------------------------------------------
    # SVG
    # ------------------------------------------------------------------

    async def convert_to_svg(self, image_bytes: bytes, options: Dict[str, Any]) -> str:
        """
        POST /api/convert-to-svg

        Raises:
            SvgConversionError: Non-200 response or no <svg> in the result.
        """
        status, body = await self._request(
            "POST",
            "/api/convert-to-svg",
            files={"image": ("logo.png", image_bytes, "image/png")},
            data={"options": json.dumps(options)},
        )
        if status != 200:
            raise SvgConversionError(
                f"SVG conversion failed ({status}): {body.get('error', '')}".strip()
            )

        svg = body.get("svg")
        if not isinstance(svg, str) or "<svg" not in svg:
            raise SvgConversionError("SVG conversion returned no SVG document")
        return svg
