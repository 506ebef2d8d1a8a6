"""
Routes builder element commands to the service that executes them.
"""

from typing import Any, Dict, Optional

from app.core.logging_config import logger
from app.modules.builder.command_router import CommandDestination, get_command_type
from app.schemas.builder import ElementCommandResult
from app.services.elementor_client import ElementorClient
from app.services.layout_service_client import LayoutServiceClient
from app.services.service_client import ServiceResponse


class ElementCommandDispatcher:

    def __init__(self, layout_service: LayoutServiceClient, elementor: ElementorClient):
        self.layout_service = layout_service
        self.elementor = elementor

    async def dispatch(
        self,
        presentation_id: str,
        action: str,
        params: Optional[Dict[str, Any]] = None,
        slide_index: Optional[int] = None,
    ) -> ElementCommandResult:
        params = params or {}
        destination = get_command_type(action)

        if destination is CommandDestination.LAYOUT_SERVICE:
            response = await self.layout_service.send_element_command(
                presentation_id, action, params, slide_index=slide_index
            )
            return _result(action, destination, response, refresh_required=False)

        if destination is CommandDestination.ELEMENTOR:
            response = await self.elementor.request_for_command(action, params)
            return _result(action, destination, response, refresh_required=response.success)

        logger.warning(f"[Builder] Unknown command '{action}' for presentation {presentation_id}, dropped")
        return ElementCommandResult(
            action=action,
            destination=destination.value,
            success=False,
            error={"code": "UNKNOWN_COMMAND", "message": f"Unknown command: {action}"},
        )


def _result(action: str, destination: CommandDestination, response: ServiceResponse,
            refresh_required: bool) -> ElementCommandResult:
    return ElementCommandResult(
        action=action,
        destination=destination.value,
        success=response.success,
        refresh_required=refresh_required,
        data=response.data,
        error=response.error.model_dump() if response.error else None,
    )
