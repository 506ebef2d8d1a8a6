"""
Text Labs Client
================
Text Labs generates slide elements (text boxes, metrics, tables, charts,
images, infographics, diagrams) inside a canvas session. It is served by the
same deployment as Elementor unless TEXTLABS_URL says otherwise.

API:
    POST /api/canvas/session       create a canvas session
    POST /api/chat/message         generate element(s) for a prompt
    POST /api/infographic/generate infographic from a reference image (multipart)
    GET  /health

Unlike the Layout Service and Elementor clients, failures raise TextLabsError.

The module also holds the pure helpers that turn a generation form into an
API payload and a generated element into Layout Service insertion params.
"""

import json
import time
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

import httpx
from bs4 import BeautifulSoup
from pydantic import BaseModel, ValidationError

from app.core.exceptions import ServiceTimeoutError, TextLabsError
from app.core.logging_config import logger
from app.schemas.builder import InsertionInstruction, PaddingConfig, PositionConfig, TextLabsForm

ModelT = TypeVar("ModelT", bound=BaseModel)


# ============================================
# Response models
# ============================================

class TextLabsSession(BaseModel):
    session_id: str
    status: Optional[str] = None


class TextLabsElement(BaseModel):
    component_type: str
    html: Optional[str] = None
    image_url: Optional[str] = None
    image_data_url: Optional[str] = None


class TextLabsResponse(BaseModel):
    element: Optional[TextLabsElement] = None
    elements: Optional[List[TextLabsElement]] = None
    error: Optional[str] = None
    message: Optional[str] = None

    def all_elements(self) -> List[TextLabsElement]:
        if self.elements:
            return list(self.elements)
        return [self.element] if self.element else []


# ============================================
# Payload key mapping (camelCase -> snake_case)
# ============================================

CONFIG_KEY_MAP: Dict[str, str] = {
    "textboxConfig": "textbox_config",
    "metricsConfig": "metrics_config",
    "tableConfig": "table_config",
    "chartConfig": "chart_config",
    "imageConfig": "image_config",
    "iconLabelConfig": "icon_label_config",
    "shapeConfig": "shape_config",
    "infographicConfig": "infographic_config",
    "codeDisplayConfig": "code_display_config",
    "kanbanConfig": "kanban_config",
    "ganttConfig": "gantt_config",
    "chevronConfig": "chevron_config",
    "ideaBoardConfig": "idea_board_config",
    "cloudArchitectureConfig": "cloud_architecture_config",
    "logicalArchitectureConfig": "logical_architecture_config",
    "dataArchitectureConfig": "data_architecture_config",
    "positionConfig": "position_config",
    "paddingConfig": "padding_config",
    "componentType": "component_type",
    "zIndex": "z_index",
    "textOnlyMode": "text_only_mode",
}

# Component-specific config attached when advanced settings were modified
_ADVANCED_CONFIG_KEYS: Dict[str, Tuple[str, str]] = {
    "TEXT_BOX": ("textboxConfig", "textbox_config"),
    "METRICS": ("metricsConfig", "metrics_config"),
    "TABLE": ("tableConfig", "table_config"),
    "CHART": ("chartConfig", "chart_config"),
    "ICON_LABEL": ("iconLabelConfig", "icon_label_config"),
    "SHAPE": ("shapeConfig", "shape_config"),
    "INFOGRAPHIC": ("infographicConfig", "infographic_config"),
    # Diagram subtypes all read the form's diagram config
    "CODE_DISPLAY": ("codeDisplayConfig", "diagram_config"),
    "KANBAN_BOARD": ("kanbanConfig", "diagram_config"),
    "GANTT_CHART": ("ganttConfig", "diagram_config"),
    "CHEVRON_MATURITY": ("chevronConfig", "diagram_config"),
    "IDEA_BOARD": ("ideaBoardConfig", "diagram_config"),
    "CLOUD_ARCHITECTURE": ("cloudArchitectureConfig", "diagram_config"),
    "LOGICAL_ARCHITECTURE": ("logicalArchitectureConfig", "diagram_config"),
    "DATA_ARCHITECTURE": ("dataArchitectureConfig", "diagram_config"),
}

DIAGRAM_SUBTYPES = frozenset([
    "CODE_DISPLAY", "KANBAN_BOARD", "GANTT_CHART", "CHEVRON_MATURITY",
    "IDEA_BOARD", "CLOUD_ARCHITECTURE", "LOGICAL_ARCHITECTURE", "DATA_ARCHITECTURE",
])


# ============================================
# Canvas insertion
# ============================================

INSERTION_METHOD_MAP: Dict[str, str] = {
    "TEXT_BOX": "insertElement",
    "METRICS": "insertElement",
    "TABLE": "insertElement",
    "SHAPE": "insertElement",
    "ICON_LABEL": "insertElement",
    "CHART": "insertChart",
    "IMAGE": "insertImage",
    "INFOGRAPHIC": "insertImage",
    "DIAGRAM": "insertDiagram",
    **{subtype: "insertDiagram" for subtype in DIAGRAM_SUBTYPES},
}

# Grid units on the 32x18 slide grid
TEXT_LABS_ELEMENT_DEFAULTS: Dict[str, Dict[str, int]] = {
    "TEXT_BOX": {"width": 10, "height": 6, "z_index": 50},
    "METRICS": {"width": 8, "height": 5, "z_index": 90},
    "TABLE": {"width": 16, "height": 8, "z_index": 50},
    "CHART": {"width": 16, "height": 12, "z_index": 50},
    "IMAGE": {"width": 12, "height": 7, "z_index": 75},
    "ICON_LABEL": {"width": 2, "height": 2, "z_index": 90},
    "SHAPE": {"width": 3, "height": 3, "z_index": 10},
    "INFOGRAPHIC": {"width": 16, "height": 9, "z_index": 50},
    "DIAGRAM": {"width": 30, "height": 14, "z_index": 50},
}

DEFAULT_START_COL = 2
DEFAULT_START_ROW = 4


def get_insertion_method(component_type: str) -> str:
    return INSERTION_METHOD_MAP.get(component_type, "insertElement")


def get_default_size(component_type: str) -> Dict[str, int]:
    return TEXT_LABS_ELEMENT_DEFAULTS.get(component_type, TEXT_LABS_ELEMENT_DEFAULTS["TEXT_BOX"])


def is_diagram_subtype(component_type: str) -> bool:
    return component_type in DIAGRAM_SUBTYPES


def extract_body_content(html: str) -> str:
    """
    Reduce a full HTML document to what the Layout Service can embed:
    the head's <script> tags followed by the body's inner HTML.
    Fragments are returned unchanged.
    """
    if "<!DOCTYPE" not in html and "<html" not in html:
        return html

    soup = BeautifulSoup(html, "html.parser")
    head_scripts = soup.head.find_all("script") if soup.head else []
    body_content = soup.body.decode_contents() if soup.body else ""
    script_tags = "\n".join(str(script) for script in head_scripts)
    return script_tags + "\n" + body_content


def build_insertion_params(
    component_type: str,
    element: TextLabsElement,
    position_config: Optional[PositionConfig] = None,
    padding_config: Optional[PaddingConfig] = None,
    z_index: Optional[int] = None,
    slide_index: Optional[int] = None,
    timestamp_ms: Optional[int] = None,
) -> InsertionInstruction:
    """Turn a generated element into the Layout Service command that places it on the grid"""
    method = get_insertion_method(component_type)
    base_type = "DIAGRAM" if is_diagram_subtype(component_type) else component_type
    defaults = get_default_size(base_type)

    position = position_config or PositionConfig()
    start_col = position.start_col if position.start_col is not None else DEFAULT_START_COL
    start_row = position.start_row if position.start_row is not None else DEFAULT_START_ROW
    width = position.position_width if position.position_width is not None else defaults["width"]
    height = position.position_height if position.position_height is not None else defaults["height"]

    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    params: Dict[str, Any] = {
        "elementId": f"{base_type.lower()}_{timestamp_ms}",
        "slideIndex": slide_index if slide_index is not None else 0,
        "gridRow": f"{start_row}/{start_row + height}",
        "gridColumn": f"{start_col}/{start_col + width}",
        "positionWidth": width,
        "positionHeight": height,
        "zIndex": z_index if z_index is not None else defaults["z_index"],
        "draggable": True,
        "resizable": True,
        "skipAutoSize": True,
    }

    if padding_config is not None:
        params["style"] = {
            "padding_top": padding_config.top,
            "padding_right": padding_config.right,
            "padding_bottom": padding_config.bottom,
            "padding_left": padding_config.left,
        }

    if method == "insertChart":
        params["chartHtml"] = extract_body_content(element.html or "")
    elif method == "insertImage":
        params["imageUrl"] = element.image_url or ""
        params["src"] = element.image_url or ""
    elif method == "insertDiagram":
        params["htmlContent"] = extract_body_content(element.html or "")
    else:
        params["content"] = element.html or ""

    # Plain elements are placed through the text box command
    command = "insertTextBox" if method == "insertElement" else method
    return InsertionInstruction(command=command, method=method, params=params)


def build_api_payload(session_id: str, form: TextLabsForm) -> Dict[str, Any]:
    """
    Map a generation form to send_message() arguments.

    Component configs are only sent when the user touched the advanced
    settings; IMAGE always sends its config because its placement lives there.
    """
    options: Dict[str, Any] = {
        "componentType": form.component_type,
        "textOnlyMode": not form.advanced_modified,
        "count": form.count,
        "layout": form.layout,
        "zIndex": form.z_index,
    }

    if form.position_config is not None:
        options["positionConfig"] = form.position_config.model_dump(exclude_none=True)

    if form.padding_config is not None and form.padding_config.has_padding():
        options["paddingConfig"] = form.padding_config.model_dump()

    if form.component_type == "IMAGE":
        options["imageConfig"] = form.image_config

    if form.advanced_modified:
        config_keys = _ADVANCED_CONFIG_KEYS.get(form.component_type)
        if config_keys is not None:
            option_key, form_field = config_keys
            options[option_key] = getattr(form, form_field)
        if form.component_type == "TEXT_BOX":
            options["itemsPerInstance"] = form.items_per_instance

    return {"session_id": session_id, "message": form.prompt, "options": options}


def to_request_payload(session_id: str, message: str, options: Dict[str, Any]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"session_id": session_id, "message": message}
    for key, value in options.items():
        if value is None:
            continue
        payload[CONFIG_KEY_MAP.get(key, key)] = value
    return payload


# ============================================
# Client
# ============================================

class TextLabsClient:
    service_name = "textlabs"

    def __init__(self, base_url: str, timeout: float = 60.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, operation: str, timeout: Optional[float] = None, **kwargs) -> httpx.Response:
        start = time.perf_counter()
        request_kwargs = dict(kwargs)
        if timeout is not None:
            request_kwargs["timeout"] = timeout
        try:
            response = await self._client.post(path, **request_kwargs)
        except httpx.TimeoutException:
            logger.log_service_call(self.service_name, operation, False,
                                    (time.perf_counter() - start) * 1000, error_code="TIMEOUT")
            raise ServiceTimeoutError(self.service_name, timeout or self._client.timeout.read or 0)
        except httpx.HTTPError as e:
            logger.log_service_call(self.service_name, operation, False,
                                    (time.perf_counter() - start) * 1000, error_code="NETWORK_ERROR")
            raise TextLabsError(str(e) or "Network request failed", code="NETWORK_ERROR") from e

        logger.log_service_call(
            self.service_name, operation, response.is_success, (time.perf_counter() - start) * 1000,
            error_code=None if response.is_success else f"HTTP_{response.status_code}",
        )
        return response

    @staticmethod
    def _raise_for_error(response: httpx.Response, fallback: str) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("error") if isinstance(body, dict) else None
        raise TextLabsError(str(message) if message else fallback, status=response.status_code)

    def _parse(self, response: httpx.Response, model: Type[ModelT]) -> ModelT:
        """Decode a success body; HTML error pages and wrong shapes become TextLabsError"""
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(
                f"[TextLabs] Unreadable {model.__name__} body "
                f"({response.headers.get('content-type', 'unknown')}): {e}"
            )
            raise TextLabsError(
                "Invalid response from Text Labs", code="INVALID_RESPONSE", status=response.status_code
            ) from e

    async def create_session(self) -> TextLabsSession:
        response = await self._post("/api/canvas/session", "create_session")
        if not response.is_success:
            raise TextLabsError(f"Session creation failed: {response.status_code}", status=response.status_code)
        return self._parse(response, TextLabsSession)

    async def create_session_id(self) -> str:
        """Session factory for SessionGuard"""
        session = await self.create_session()
        return session.session_id

    async def health_check(self) -> bool:
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError:
            return False
        return response.is_success

    async def send_message(
        self,
        session_id: str,
        message: str,
        options: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> TextLabsResponse:
        payload = to_request_payload(session_id, message, options)
        response = await self._post("/api/chat/message", "send_message", timeout=timeout, json=payload)
        self._raise_for_error(response, f"API error: {response.status_code}")
        return self._parse(response, TextLabsResponse)

    async def generate_infographic(
        self,
        session_id: str,
        message: str,
        reference_image: bytes,
        filename: str = "reference.png",
        content_type: str = "application/octet-stream",
        config: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> TextLabsResponse:
        data = {"session_id": session_id, "message": message}
        if config:
            data["infographic_config"] = json.dumps(config)
        files = {"reference_image": (filename, reference_image, content_type)}

        response = await self._post(
            "/api/infographic/generate", "generate_infographic", timeout=timeout, data=data, files=files
        )
        self._raise_for_error(response, f"Infographic upload failed: {response.status_code}")
        return self._parse(response, TextLabsResponse)
