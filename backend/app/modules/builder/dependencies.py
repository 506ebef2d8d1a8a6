"""
FastAPI dependencies for the builder collaborators.

All of them are constructed once in the application lifespan and stored on
app.state; tests replace them through dependency_overrides.
"""

from fastapi import Request

from app.modules.builder.element_dispatcher import ElementCommandDispatcher
from app.modules.builder.generation import TextLabsGenerator
from app.modules.builder.session_guard import SessionGuardRegistry
from app.services.layout_service_client import LayoutServiceClient
from app.services.textlabs_client import TextLabsClient


def get_layout_service(request: Request) -> LayoutServiceClient:
    return request.app.state.layout_service


def get_textlabs(request: Request) -> TextLabsClient:
    return request.app.state.textlabs


def get_session_guards(request: Request) -> SessionGuardRegistry:
    return request.app.state.session_guards


def get_dispatcher(request: Request) -> ElementCommandDispatcher:
    return request.app.state.dispatcher


def get_generator(request: Request) -> TextLabsGenerator:
    return request.app.state.generator


def session_guard_key(user_id: str, presentation_id: str) -> str:
    return f"{user_id}:{presentation_id}"
