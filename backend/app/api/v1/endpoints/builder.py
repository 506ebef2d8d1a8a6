"""
Builder API endpoints

Element commands, slide operations and Text Labs generation for a
presentation open in the builder. Presentation documents live in the
Layout Service; this API routes and authorizes, it does not render.
"""
import json
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import LayoutServiceError, ValidationError
from app.core.logging_config import logger
from app.core.rate_limiter import generation_rate_limit
from app.models.user import User
from app.modules.auth.dependencies import get_approved_user
from app.modules.builder.command_router import get_command_type, is_elementor_command
from app.modules.builder.dependencies import (
    get_dispatcher,
    get_generator,
    get_layout_service,
    get_session_guards,
    session_guard_key,
)
from app.modules.builder.element_dispatcher import ElementCommandDispatcher
from app.modules.builder.generation import ReferenceImage, TextLabsGenerator
from app.modules.builder.session_guard import SessionGuardRegistry, SessionState
from app.schemas.builder import (
    AddSlideRequest,
    ChangeLayoutRequest,
    CommandClassification,
    DuplicateSlideRequest,
    ElementCommandRequest,
    ElementCommandResult,
    GenerationResult,
    PresentationLinks,
    ReorderSlidesRequest,
    TextLabsForm,
    TextLabsSessionStatus,
)
from app.services.layout_service_client import DownloadFormat, LayoutServiceClient, PresentationVersion
from app.services.service_client import ServiceResponse

router = APIRouter()

MAX_REFERENCE_IMAGE_SIZE = 10 * 1024 * 1024


def _checked(response: ServiceResponse) -> ServiceResponse:
    """Slide operations surface Layout Service failures as 502 errors"""
    if not response.success:
        error = response.error
        raise LayoutServiceError(
            error.message if error else "Layout Service request failed",
            code=error.code if error else "LAYOUT_SERVICE_ERROR",
        )
    return response


def _status(guard) -> TextLabsSessionStatus:
    if guard is None:
        return TextLabsSessionStatus(state=SessionState.IDLE.value)
    return TextLabsSessionStatus(
        state=guard.state.value,
        session_id=guard.session_id,
        error=guard.error.message if guard.error else None,
    )


# ============================================
# Element commands
# ============================================

@router.get("/commands/{action}", response_model=CommandClassification)
async def classify_command(action: str):
    """Which service executes a command"""
    return CommandClassification(
        action=action,
        destination=get_command_type(action).value,
        is_elementor=is_elementor_command(action),
    )


@router.post("/presentations/{presentation_id}/commands", response_model=ElementCommandResult)
async def send_command(
    presentation_id: str,
    command: ElementCommandRequest,
    current_user: User = Depends(get_approved_user),
    dispatcher: ElementCommandDispatcher = Depends(get_dispatcher)
):
    """
    Route an element command to the Layout Service or Elementor.

    Unknown commands are not an HTTP error: the result carries
    success=false and error.code UNKNOWN_COMMAND.
    """
    return await dispatcher.dispatch(
        presentation_id, command.action, command.params, slide_index=command.slide_index
    )


# ============================================
# Slides
# ============================================

@router.post("/presentations/{presentation_id}/slides", response_model=ServiceResponse)
async def add_slide(
    presentation_id: str,
    slide: AddSlideRequest,
    current_user: User = Depends(get_approved_user),
    layout_service: LayoutServiceClient = Depends(get_layout_service)
):
    return _checked(await layout_service.add_slide(
        presentation_id,
        slide.layout,
        position=slide.position,
        content=slide.content,
        background_color=slide.background_color,
        background_image=slide.background_image,
    ))


@router.delete("/presentations/{presentation_id}/slides/{slide_index}", response_model=ServiceResponse)
async def delete_slide(
    presentation_id: str,
    slide_index: int,
    current_user: User = Depends(get_approved_user),
    layout_service: LayoutServiceClient = Depends(get_layout_service)
):
    return _checked(await layout_service.delete_slide(presentation_id, slide_index))


@router.post("/presentations/{presentation_id}/slides/{slide_index}/duplicate", response_model=ServiceResponse)
async def duplicate_slide(
    presentation_id: str,
    slide_index: int,
    body: DuplicateSlideRequest = DuplicateSlideRequest(),
    current_user: User = Depends(get_approved_user),
    layout_service: LayoutServiceClient = Depends(get_layout_service)
):
    return _checked(await layout_service.duplicate_slide(
        presentation_id, slide_index, insert_after=body.insert_after
    ))


@router.put("/presentations/{presentation_id}/slides/reorder", response_model=ServiceResponse)
async def reorder_slides(
    presentation_id: str,
    body: ReorderSlidesRequest,
    current_user: User = Depends(get_approved_user),
    layout_service: LayoutServiceClient = Depends(get_layout_service)
):
    return _checked(await layout_service.reorder_slides(presentation_id, body.from_index, body.to_index))


@router.put("/presentations/{presentation_id}/slides/{slide_index}/layout", response_model=ServiceResponse)
async def change_slide_layout(
    presentation_id: str,
    slide_index: int,
    body: ChangeLayoutRequest,
    current_user: User = Depends(get_approved_user),
    layout_service: LayoutServiceClient = Depends(get_layout_service)
):
    return _checked(await layout_service.change_slide_layout(
        presentation_id,
        slide_index,
        body.new_layout,
        preserve_content=body.preserve_content,
        content_mapping=body.content_mapping,
    ))


# ============================================
# Versions and links
# ============================================

@router.get("/presentations/{presentation_id}/versions", response_model=ServiceResponse)
async def list_versions(
    presentation_id: str,
    current_user: User = Depends(get_approved_user),
    layout_service: LayoutServiceClient = Depends(get_layout_service)
):
    return _checked(await layout_service.list_versions(presentation_id))


@router.post("/presentations/{presentation_id}/versions/{version_id}/restore", response_model=ServiceResponse)
async def restore_version(
    presentation_id: str,
    version_id: str,
    current_user: User = Depends(get_approved_user),
    layout_service: LayoutServiceClient = Depends(get_layout_service)
):
    return _checked(await layout_service.restore_version(presentation_id, version_id))


@router.get("/presentations/{presentation_id}/links", response_model=PresentationLinks)
async def get_presentation_links(
    presentation_id: str,
    version: Optional[PresentationVersion] = None,
    current_user: User = Depends(get_approved_user),
    layout_service: LayoutServiceClient = Depends(get_layout_service)
):
    """Viewer URL plus one download URL per export format"""
    return PresentationLinks(
        viewer_url=layout_service.get_presentation_viewer_url(presentation_id),
        downloads={
            fmt.value: layout_service.get_download_url(presentation_id, fmt, version)
            for fmt in DownloadFormat
        },
    )


# ============================================
# Text Labs
# ============================================

@router.get("/presentations/{presentation_id}/textlabs/session", response_model=TextLabsSessionStatus)
async def get_textlabs_session(
    presentation_id: str,
    current_user: User = Depends(get_approved_user),
    guards: SessionGuardRegistry = Depends(get_session_guards)
):
    return _status(guards.peek(session_guard_key(current_user.id, presentation_id)))


@router.post("/presentations/{presentation_id}/textlabs/session", response_model=TextLabsSessionStatus)
async def ensure_textlabs_session(
    presentation_id: str,
    current_user: User = Depends(get_approved_user),
    guards: SessionGuardRegistry = Depends(get_session_guards)
):
    """Create the canvas session if needed; concurrent calls share one creation"""
    guard = guards.get(session_guard_key(current_user.id, presentation_id))
    await guard.ensure_session()
    return _status(guard)


@router.delete("/presentations/{presentation_id}/textlabs/session", response_model=TextLabsSessionStatus)
async def reset_textlabs_session(
    presentation_id: str,
    current_user: User = Depends(get_approved_user),
    guards: SessionGuardRegistry = Depends(get_session_guards)
):
    """Forget the session, e.g. when the user switches presentations"""
    key = session_guard_key(current_user.id, presentation_id)
    if guards.peek(key) is not None:
        await guards.discard(key)
        logger.info(f"[TextLabs] Session reset for {presentation_id}")
    return _status(None)


@router.post("/presentations/{presentation_id}/textlabs/generate", response_model=GenerationResult)
@generation_rate_limit()
async def generate_elements(
    request: Request,
    presentation_id: str,
    form: TextLabsForm,
    current_user: User = Depends(get_approved_user),
    guards: SessionGuardRegistry = Depends(get_session_guards),
    generator: TextLabsGenerator = Depends(get_generator)
):
    """Generate elements from the panel form and insert them into the slide"""
    guard = guards.get(session_guard_key(current_user.id, presentation_id))
    return await generator.generate(guard, presentation_id, form)


@router.post("/presentations/{presentation_id}/textlabs/infographic", response_model=GenerationResult)
@generation_rate_limit()
async def generate_infographic(
    request: Request,
    presentation_id: str,
    form: str = Form(..., description="TextLabsForm as JSON"),
    reference_image: UploadFile = File(...),
    current_user: User = Depends(get_approved_user),
    guards: SessionGuardRegistry = Depends(get_session_guards),
    generator: TextLabsGenerator = Depends(get_generator)
):
    """Infographic generation guided by an uploaded reference image (multipart)"""
    try:
        parsed = TextLabsForm.model_validate(json.loads(form))
    except (ValueError, PydanticValidationError) as e:
        raise ValidationError(f"Invalid form: {e}", field="form")

    if parsed.component_type != "INFOGRAPHIC":
        raise ValidationError("Reference images are only supported for INFOGRAPHIC", field="component_type")

    content = await reference_image.read()
    if not content:
        raise ValidationError("Reference image is empty", field="reference_image")
    if len(content) > MAX_REFERENCE_IMAGE_SIZE:
        raise ValidationError("Reference image exceeds 10 MB", field="reference_image")

    guard = guards.get(session_guard_key(current_user.id, presentation_id))
    return await generator.generate(
        guard,
        presentation_id,
        parsed,
        reference_image=ReferenceImage(
            content=content,
            filename=reference_image.filename or "reference.png",
            content_type=reference_image.content_type or "application/octet-stream",
        ),
    )
