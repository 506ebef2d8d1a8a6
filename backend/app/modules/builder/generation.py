"""
Text Labs generation flow

    ensure session -> send prompt -> insert every returned element through
    the Layout Service

The session comes from the presentation's SessionGuard, so concurrent
generations for one presentation share a single canvas session.
"""

import time
from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import TextLabsError
from app.core.logging_config import logger
from app.modules.builder.element_dispatcher import ElementCommandDispatcher
from app.modules.builder.session_guard import SessionGuard
from app.schemas.builder import GenerationResult, TextLabsForm
from app.services.textlabs_client import (
    TextLabsClient,
    TextLabsResponse,
    build_api_payload,
    build_insertion_params,
)


@dataclass
class ReferenceImage:
    content: bytes
    filename: str
    content_type: str


class TextLabsGenerator:

    def __init__(self, textlabs: TextLabsClient, dispatcher: ElementCommandDispatcher,
                 message_timeout: Optional[float] = 30.0):
        self.textlabs = textlabs
        self.dispatcher = dispatcher
        self.message_timeout = message_timeout

    async def _request_elements(self, session_id: str, form: TextLabsForm,
                                reference_image: Optional[ReferenceImage]) -> TextLabsResponse:
        if form.component_type == "INFOGRAPHIC" and reference_image is not None:
            return await self.textlabs.generate_infographic(
                session_id,
                form.prompt,
                reference_image.content,
                filename=reference_image.filename,
                content_type=reference_image.content_type,
                config=form.infographic_config,
                timeout=self.message_timeout,
            )

        payload = build_api_payload(session_id, form)
        return await self.textlabs.send_message(
            payload["session_id"], payload["message"], payload["options"], timeout=self.message_timeout
        )

    async def generate(
        self,
        guard: SessionGuard,
        presentation_id: str,
        form: TextLabsForm,
        reference_image: Optional[ReferenceImage] = None,
    ) -> GenerationResult:
        session_id = await guard.ensure_session()
        response = await self._request_elements(session_id, form, reference_image)

        if response.error:
            raise TextLabsError(response.error)

        elements = response.all_elements()
        if not elements:
            raise TextLabsError("No elements returned from API", code="NO_ELEMENTS")

        base_timestamp = int(time.time() * 1000)
        insertions = []
        for offset, element in enumerate(elements):
            instruction = build_insertion_params(
                element.component_type,
                element,
                position_config=form.position_config,
                padding_config=form.padding_config,
                z_index=form.z_index,
                slide_index=form.slide_index,
                # Distinct element ids when several elements arrive together
                timestamp_ms=base_timestamp + offset,
            )
            insertions.append(await self.dispatcher.dispatch(
                presentation_id, instruction.command, instruction.params, slide_index=form.slide_index
            ))

        logger.info(f"[TextLabs] Generated {len(elements)} {form.component_type} element(s) for {presentation_id}")
        return GenerationResult(
            session_id=session_id,
            component_type=form.component_type,
            elements=len(elements),
            insertions=insertions,
        )
