"""
Layout Service Client
=====================
Slide operations, versions, downloads and element commands against the
Layout Service, which owns presentation documents and rendering.

No call raises on failure; check `response.success` and `response.error`.

Usage:
    client = LayoutServiceClient(settings.LAYOUT_SERVICE_URL)

    result = await client.add_slide(presentation_id, "C1-text", position=2)
    if not result.success:
        logger.warning(result.error.message)

    url = client.get_download_url(presentation_id, DownloadFormat.PDF)
"""

from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

from app.services.service_client import BuilderServiceClient, ServiceResponse


class DownloadFormat(str, Enum):
    PDF = "pdf"
    PPTX = "pptx"


class PresentationVersion(str, Enum):
    STRAWMAN = "strawman"
    REFINED = "refined"
    FINAL = "final"


def _drop_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


class LayoutServiceClient(BuilderServiceClient):
    service_name = "layout-service"

    def _error_message(self, body: Dict[str, Any], status_code: int) -> str:
        detail = body.get("detail")
        if isinstance(detail, str) and detail:
            return detail
        return f"Request failed with status {status_code}"

    @staticmethod
    def _presentation_path(presentation_id: str) -> str:
        return f"/api/presentations/{quote(presentation_id, safe='')}"

    # ============================================
    # Slides
    # ============================================

    async def add_slide(
        self,
        presentation_id: str,
        layout: str,
        position: Optional[int] = None,
        content: Optional[Dict[str, Any]] = None,
        background_color: Optional[str] = None,
        background_image: Optional[str] = None,
    ) -> ServiceResponse:
        payload = _drop_none({
            "layout": layout,
            "position": position,
            "content": content or {},
            "background_color": background_color,
            "background_image": background_image,
        })
        return await self.request(
            "POST", f"{self._presentation_path(presentation_id)}/slides", "add_slide", json=payload
        )

    async def delete_slide(self, presentation_id: str, slide_index: int) -> ServiceResponse:
        return await self.request(
            "DELETE", f"{self._presentation_path(presentation_id)}/slides/{slide_index}", "delete_slide"
        )

    async def duplicate_slide(self, presentation_id: str, slide_index: int,
                              insert_after: bool = True) -> ServiceResponse:
        return await self.request(
            "POST",
            f"{self._presentation_path(presentation_id)}/slides/{slide_index}/duplicate",
            "duplicate_slide",
            json={"insert_after": insert_after},
        )

    async def reorder_slides(self, presentation_id: str, from_index: int, to_index: int) -> ServiceResponse:
        return await self.request(
            "PUT",
            f"{self._presentation_path(presentation_id)}/slides/reorder",
            "reorder_slides",
            json={"from_index": from_index, "to_index": to_index},
        )

    async def change_slide_layout(
        self,
        presentation_id: str,
        slide_index: int,
        new_layout: str,
        preserve_content: bool = True,
        content_mapping: Optional[Dict[str, str]] = None,
    ) -> ServiceResponse:
        payload = _drop_none({
            "new_layout": new_layout,
            "preserve_content": preserve_content,
            "content_mapping": content_mapping,
        })
        return await self.request(
            "PUT",
            f"{self._presentation_path(presentation_id)}/slides/{slide_index}/layout",
            "change_slide_layout",
            json=payload,
        )

    # ============================================
    # Element commands
    # ============================================

    async def send_element_command(
        self,
        presentation_id: str,
        action: str,
        params: Dict[str, Any],
        slide_index: Optional[int] = None,
    ) -> ServiceResponse:
        """Apply an element command (insertImage, deleteElement, bringToFront, ...)"""
        payload = _drop_none({"action": action, "params": params, "slide_index": slide_index})
        return await self.request(
            "POST", f"{self._presentation_path(presentation_id)}/commands", f"command:{action}", json=payload
        )

    # ============================================
    # Versions
    # ============================================

    async def list_versions(self, presentation_id: str) -> ServiceResponse:
        return await self.request("GET", f"{self._presentation_path(presentation_id)}/versions", "list_versions")

    async def restore_version(self, presentation_id: str, version_id: str) -> ServiceResponse:
        return await self.request(
            "POST",
            f"{self._presentation_path(presentation_id)}/restore/{quote(version_id, safe='')}",
            "restore_version",
        )

    # ============================================
    # URLs
    # ============================================

    def get_presentation_viewer_url(self, presentation_id: str) -> str:
        return f"{self.base_url}/p/{quote(presentation_id, safe='')}"

    def get_download_url(
        self,
        presentation_id: str,
        file_format: DownloadFormat,
        version: Optional[PresentationVersion] = None,
    ) -> str:
        url = f"{self.base_url}{self._presentation_path(presentation_id)}/download/{DownloadFormat(file_format).value}"
        if version is not None:
            url += "?" + urlencode({"version": PresentationVersion(version).value})
        return url
