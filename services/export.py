# ============================================================================
# BULK EXPORT
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Service - ZIP download of selected logos
# PURPOSE: Fetch, transcode and bundle selected logos with per-item isolation
# CREATED: 14 OCT 2026
# ============================================================================
"""
Bulk Export

For each selected id:
    store.fetch_full_logo -> decode data URI -> PNG | JPG | SVG bytes
    -> add "<safe-name>.<ext>" to the archive

Any per-item failure (missing logo, bad image data, Pillow error, SVG
conversion error) is logged and the item skipped. The archive is built
from whatever succeeded.

JPG is produced with Pillow: the image is flattened onto the configured
background (JPEG has no alpha) and saved at the configured quality. SVG
goes through the catalog backend's conversion endpoint.
"""

import base64
import binascii
import io
import re
import time
import zipfile
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Union

from PIL import Image

from core.config import ExportDefaults, get_defaults
from core.contracts import UNTITLED, ExportFormat
from core.logging import get_logger, log_checkpoint, log_context
from infrastructure.catalog_client import CatalogClient
from repositories.base import LogoStore

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def _clean(text: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("", text.strip())
    cleaned = _WHITESPACE.sub("-", cleaned)
    return _HYPHENS.sub("-", cleaned).strip("-").lower()


def safe_filename(
    name: Optional[str],
    fallback: Optional[str] = None,
    default: Optional[str] = None,
) -> str:
    """
    Filesystem-safe base name from a logo name.

    Blank names and the placeholder name use the fallback, cleaned by the
    same rules. When neither yields anything the configured default
    filename is used.

        "Acme Corp. (v2)" -> "acme-corp-v2"
    """
    if name is not None and name.strip() == UNTITLED:
        name = None
    for candidate in (name, fallback):
        if candidate and candidate.strip():
            cleaned = _clean(candidate)
            if cleaned:
                return cleaned
    return default or get_defaults().export.fallback_filename


def _unique_entry(base: str, ext: str, taken: Set[str]) -> str:
    """First of base.ext, base-2.ext, ... not already in the archive."""
    entry = f"{base}.{ext}"
    n = 1
    while entry in taken:
        n += 1
        entry = f"{base}-{n}.{ext}"
    taken.add(entry)
    return entry


def decode_data_uri(data_uri: str) -> bytes:
    """
    Raw bytes of a base64 data URI ("data:image/png;base64,....").

    Raises:
        ValueError: Not base64 data.
    """
    _, sep, payload = data_uri.partition(",")
    if not sep:
        payload = data_uri
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid image data: {e}") from e


def png_to_jpeg(image_bytes: bytes, quality: int = 90, background: str = "#FFFFFF") -> bytes:
    """Flatten onto background and encode as JPEG."""
    with Image.open(io.BytesIO(image_bytes)) as source:
        rgba = source.convert("RGBA")
    canvas = Image.new("RGB", rgba.size, background)
    canvas.paste(rgba, (0, 0), rgba)

    out = io.BytesIO()
    canvas.save(out, format="JPEG", quality=quality)
    return out.getvalue()


@dataclass
class ExportArchive:
    """A finished bulk download."""
    filename: str
    content: bytes
    included: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    media_type: str = "application/zip"


class ExportService:
    """Builds ZIP archives of an owner's logos."""

    def __init__(
        self,
        store: LogoStore,
        client: Optional[CatalogClient] = None,
        defaults: Optional[ExportDefaults] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.client = client
        self.defaults = defaults or get_defaults().export
        self._clock = clock

    async def _render(self, image_bytes: bytes, export_format: ExportFormat) -> bytes:
        if export_format == ExportFormat.PNG:
            return image_bytes
        if export_format == ExportFormat.JPG:
            return png_to_jpeg(
                image_bytes,
                quality=self.defaults.jpeg_quality,
                background=self.defaults.jpeg_background,
            )
        if self.client is None:
            raise ValueError("SVG export requires a catalog client")
        svg = await self.client.convert_to_svg(image_bytes, dict(self.defaults.svg_options))
        return svg.encode("utf-8")

    async def build_archive(
        self,
        logo_ids: List[str],
        export_format: Union[ExportFormat, str],
        owner_id: str,
    ) -> ExportArchive:
        """
        Bundle the given logos, skipping any that fail.

        Raises:
            ValueError: No ids given.
        """
        export_format = ExportFormat(export_format)
        if not logo_ids:
            raise ValueError("No logos selected")

        ext = export_format.value
        archive = ExportArchive(
            filename=self.defaults.archive_name(ext, int(self._clock() * 1000)),
            content=b"",
        )
        taken: Set[str] = set()
        buffer = io.BytesIO()

        with log_context(owner_id=owner_id, operation="export"):
            with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
                for logo_id in logo_ids:
                    try:
                        logo = await self.store.fetch_full_logo(logo_id, owner_id)
                        if logo is None:
                            raise ValueError("logo not found")
                        data = await self._render(decode_data_uri(logo.image_data_uri), export_format)
                    except Exception as e:
                        logger.warning(f"Export skipped {logo_id}: {e}")
                        archive.skipped.append(logo_id)
                        continue

                    base = safe_filename(
                        logo.name,
                        f"logo-{logo.company_name or 'untitled'}",
                        default=self.defaults.fallback_filename,
                    )
                    zf.writestr(_unique_entry(base, ext, taken), data)
                    archive.included.append(logo_id)

            log_checkpoint("export_completed", {
                "format": ext,
                "included": len(archive.included),
                "skipped": len(archive.skipped),
            }, logger=logger)

        archive.content = buffer.getvalue()
        return archive
