"""
Elementor Client
================
Elementor generates element content (charts, diagrams, images, text, hero
slides) and injects it into the presentation on its own. A successful call
only tells the caller to refresh its view.

Failures come back as values (`success=False` with an error code), never as
exceptions.

Usage:
    client = ElementorClient(settings.ELEMENTOR_URL)
    result = await client.generate_chart(ChartRequest(...))
    result = await client.request_for_command("generateImage", params)
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel

from app.schemas.builder import (
    ChartRequest,
    DiagramRequest,
    HeroRequest,
    ImageRequest,
    InfographicRequest,
    SlideBackgroundRequest,
    SlideHeroRequest,
    TableRequest,
    TextRequest,
)
from app.services.service_client import BuilderServiceClient, ServiceResponse


# Command name -> Elementor endpoint
ELEMENTOR_ENDPOINTS: Dict[str, str] = {
    "generateImage": "/api/generate/image",
    "generateChartData": "/api/generate/chart",
    "generateInfographic": "/api/generate/infographic",
    "generateDiagram": "/api/generate/diagram",
    "generateTableData": "/api/generate/table",
    "generateText": "/api/generate/text",
    "generateHero": "/api/generate/hero",
    "generateHeroSlide": "/api/generate/hero",
    "generateSlideHero": "/api/generate/hero",
    "setSlideBackground": "/api/slide/background",
}

_SLIDE_HERO_COMMANDS = frozenset(["generateHeroSlide", "generateSlideHero"])

LAYOUT_HERO_TYPES: Dict[str, str] = {
    "H1-generated": "title_with_image",
    "H1-structured": "title",
    "H2-section": "section",
    "H3-closing": "closing",
}


def map_layout_to_hero_type(layout: str) -> str:
    return LAYOUT_HERO_TYPES.get(layout, "title")


def get_elementor_endpoint(action: str) -> Optional[str]:
    return ELEMENTOR_ENDPOINTS.get(action)


def _payload(request: BaseModel) -> Dict[str, Any]:
    return request.model_dump(exclude_none=True)


class ElementorClient(BuilderServiceClient):
    service_name = "elementor"

    def _error_message(self, body: Dict[str, Any], status_code: int) -> str:
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return f"Request failed with status {status_code}"

    async def _post(self, endpoint: str, payload: Dict[str, Any], operation: str) -> ServiceResponse:
        return await self.request("POST", endpoint, operation, json=payload)

    async def generate_chart(self, request: ChartRequest) -> ServiceResponse:
        return await self._post("/api/generate/chart", _payload(request), "generate_chart")

    async def generate_diagram(self, request: DiagramRequest) -> ServiceResponse:
        return await self._post("/api/generate/diagram", _payload(request), "generate_diagram")

    async def generate_image(self, request: ImageRequest) -> ServiceResponse:
        return await self._post("/api/generate/image", _payload(request), "generate_image")

    async def generate_infographic(self, request: InfographicRequest) -> ServiceResponse:
        return await self._post("/api/generate/infographic", _payload(request), "generate_infographic")

    async def generate_table(self, request: TableRequest) -> ServiceResponse:
        return await self._post("/api/generate/table", _payload(request), "generate_table")

    async def generate_text(self, request: TextRequest) -> ServiceResponse:
        return await self._post("/api/generate/text", _payload(request), "generate_text")

    async def generate_hero(self, request: HeroRequest) -> ServiceResponse:
        return await self._post("/api/generate/hero", _payload(request), "generate_hero")

    async def generate_slide_hero(self, request: SlideHeroRequest) -> ServiceResponse:
        """Hero generation driven by the slide layout instead of an explicit hero type"""
        hero = HeroRequest(
            context=request.context,
            prompt=request.prompt,
            hero_type=map_layout_to_hero_type(request.layout),
            visual_style=request.visual_style,
        )
        return await self.generate_hero(hero)

    async def set_slide_background(self, request: SlideBackgroundRequest) -> ServiceResponse:
        return await self._post("/api/slide/background", _payload(request), "set_slide_background")

    async def request_for_command(self, action: str, params: Dict[str, Any]) -> ServiceResponse:
        """Forward a builder command's params to its Elementor endpoint as-is"""
        endpoint = get_elementor_endpoint(action)
        if endpoint is None:
            return ServiceResponse.failure("UNKNOWN_COMMAND", f"No Elementor endpoint for '{action}'")

        payload = dict(params)
        if action in _SLIDE_HERO_COMMANDS and "layout" in payload and "hero_type" not in payload:
            payload["hero_type"] = map_layout_to_hero_type(payload.pop("layout"))

        return await self._post(endpoint, payload, f"command:{action}")
