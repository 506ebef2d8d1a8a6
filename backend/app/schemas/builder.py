"""Request and response models for builder endpoints and the Elementor API"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


# ============================================
# Element commands
# ============================================

class ElementCommandRequest(BaseModel):
    action: str = Field(..., min_length=1, max_length=100)
    params: Dict[str, Any] = {}
    slide_index: Optional[int] = Field(None, ge=0)


class ElementCommandResult(BaseModel):
    action: str
    destination: str
    success: bool
    # Elementor injects content server-side; the viewer only needs a reload
    refresh_required: bool = False
    data: Dict[str, Any] = {}
    error: Optional[Dict[str, str]] = None


class CommandClassification(BaseModel):
    action: str
    destination: str
    is_elementor: bool


# ============================================
# Elementor
# ============================================

class ElementorContext(BaseModel):
    presentation_id: str
    presentation_title: str
    slide_id: str
    slide_index: int
    slide_title: Optional[str] = None


class ElementorPosition(BaseModel):
    grid_row: str
    grid_column: str


class ElementorBaseRequest(BaseModel):
    element_id: str
    context: ElementorContext
    position: ElementorPosition
    prompt: str


class ChartRequest(ElementorBaseRequest):
    chart_type: Optional[str] = None
    theme: Optional[str] = None
    data_format: Optional[str] = None
    use_synthetic: Optional[bool] = None
    palette: Optional[str] = None


class DiagramRequest(ElementorBaseRequest):
    diagram_type: Optional[str] = None
    style: Optional[str] = None
    primary_color: Optional[str] = None
    direction: Optional[str] = None
    theme: Optional[str] = None


class ImageRequest(ElementorBaseRequest):
    style: Optional[str] = None
    aspect_ratio: Optional[str] = None
    quality: Optional[str] = None
    remove_background: Optional[bool] = None
    negative_prompt: Optional[str] = None


class InfographicRequest(ElementorBaseRequest):
    infographic_type: Optional[str] = None
    item_count: Optional[int] = None
    color_scheme: Optional[str] = None
    icon_style: Optional[str] = None
    include_descriptions: Optional[bool] = None


class TableRequest(ElementorBaseRequest):
    rows: Optional[int] = None
    columns: Optional[int] = None
    has_header: Optional[bool] = None
    table_style: Optional[str] = None


class TextRequest(ElementorBaseRequest):
    format: Optional[str] = None
    tone: Optional[str] = None
    bullet_style: Optional[str] = None
    include_emoji: Optional[bool] = None
    max_length: Optional[int] = None


HeroType = Literal["title", "title_with_image", "section", "closing"]


class HeroRequest(BaseModel):
    context: ElementorContext
    prompt: str
    hero_type: HeroType
    visual_style: Optional[str] = None


class SlideHeroRequest(BaseModel):
    context: ElementorContext
    prompt: str
    layout: str  # H1-generated, H1-structured, H2-section, H3-closing
    visual_style: Optional[str] = None


class SlideBackgroundRequest(BaseModel):
    context: ElementorContext
    background_color: Optional[str] = None
    gradient: Optional[str] = None
    opacity: Optional[float] = Field(None, ge=0, le=1)


# ============================================
# Slide operations (Layout Service)
# ============================================

class AddSlideRequest(BaseModel):
    layout: str
    position: Optional[int] = Field(None, ge=0)
    content: Optional[Dict[str, Any]] = None
    background_color: Optional[str] = None
    background_image: Optional[str] = None


class DuplicateSlideRequest(BaseModel):
    insert_after: bool = True


class ReorderSlidesRequest(BaseModel):
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class ChangeLayoutRequest(BaseModel):
    new_layout: str
    preserve_content: bool = True
    content_mapping: Optional[Dict[str, str]] = None


class PresentationLinks(BaseModel):
    viewer_url: str
    downloads: Dict[str, str]


# ============================================
# Text Labs
# ============================================

class PositionConfig(BaseModel):
    start_col: Optional[int] = Field(None, ge=1, le=32)
    start_row: Optional[int] = Field(None, ge=1, le=18)
    position_width: Optional[int] = Field(None, ge=1, le=32)
    position_height: Optional[int] = Field(None, ge=1, le=18)
    auto_position: bool = False


class PaddingConfig(BaseModel):
    top: int = Field(0, ge=0, le=60)
    right: int = Field(0, ge=0, le=60)
    bottom: int = Field(0, ge=0, le=60)
    left: int = Field(0, ge=0, le=60)

    def has_padding(self) -> bool:
        return any(side > 0 for side in (self.top, self.right, self.bottom, self.left))


class TextLabsForm(BaseModel):
    """What the generation panel submits"""
    component_type: str
    prompt: str = Field(..., min_length=1)
    count: Optional[int] = Field(None, ge=1)
    layout: Optional[Literal["horizontal", "vertical", "grid"]] = None
    advanced_modified: bool = False
    z_index: Optional[int] = None
    position_config: Optional[PositionConfig] = None
    padding_config: Optional[PaddingConfig] = None
    items_per_instance: Optional[int] = None
    slide_index: int = Field(0, ge=0)

    textbox_config: Optional[Dict[str, Any]] = None
    metrics_config: Optional[Dict[str, Any]] = None
    table_config: Optional[Dict[str, Any]] = None
    chart_config: Optional[Dict[str, Any]] = None
    image_config: Optional[Dict[str, Any]] = None
    icon_label_config: Optional[Dict[str, Any]] = None
    shape_config: Optional[Dict[str, Any]] = None
    infographic_config: Optional[Dict[str, Any]] = None
    diagram_config: Optional[Dict[str, Any]] = None


class TextLabsSessionStatus(BaseModel):
    state: str
    session_id: Optional[str] = None
    error: Optional[str] = None


class InsertionInstruction(BaseModel):
    command: str
    method: str
    params: Dict[str, Any]


class GenerationResult(BaseModel):
    session_id: str
    component_type: str
    elements: int
    insertions: List[ElementCommandResult]
