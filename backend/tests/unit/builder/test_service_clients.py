"""
Unit Tests for the Layout Service and Elementor clients

External services are replaced with httpx.MockTransport.
"""
import json

import httpx
import pytest

from app.schemas.builder import ElementorContext, SlideHeroRequest
from app.services.elementor_client import ElementorClient, map_layout_to_hero_type
from app.services.layout_service_client import DownloadFormat, LayoutServiceClient, PresentationVersion


class Recorder:
    """MockTransport handler that records requests and replays one response"""

    def __init__(self, status_code: int = 200, body=None, exc: Exception = None):
        self.requests = []
        self.status_code = status_code
        self.body = body if body is not None else {'success': True}
        self.exc = exc

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)


@pytest.fixture
async def layout_recorder():
    recorder = Recorder()
    client = LayoutServiceClient('http://layout.test/', transport=httpx.MockTransport(recorder))
    yield client, recorder
    await client.close()


@pytest.fixture
async def elementor_recorder():
    recorder = Recorder()
    client = ElementorClient('http://elementor.test', transport=httpx.MockTransport(recorder))
    yield client, recorder
    await client.close()


class TestLayoutServiceSlides:

    @pytest.mark.asyncio
    async def test_add_slide(self, layout_recorder):
        client, recorder = layout_recorder
        recorder.body = {'success': True, 'slide_index': 2}

        result = await client.add_slide('pres-1', 'C1-text', position=2)

        assert result.success is True
        assert result.data['slide_index'] == 2
        assert recorder.last.method == 'POST'
        assert recorder.last.url.path == '/api/presentations/pres-1/slides'
        assert recorder.last_json() == {'layout': 'C1-text', 'position': 2, 'content': {}}

    @pytest.mark.asyncio
    async def test_delete_duplicate_reorder_and_layout(self, layout_recorder):
        client, recorder = layout_recorder

        await client.delete_slide('pres-1', 3)
        assert (recorder.last.method, recorder.last.url.path) == ('DELETE', '/api/presentations/pres-1/slides/3')

        await client.duplicate_slide('pres-1', 1, insert_after=False)
        assert recorder.last.url.path == '/api/presentations/pres-1/slides/1/duplicate'
        assert recorder.last_json() == {'insert_after': False}

        await client.reorder_slides('pres-1', 0, 4)
        assert recorder.last.method == 'PUT'
        assert recorder.last_json() == {'from_index': 0, 'to_index': 4}

        await client.change_slide_layout('pres-1', 2, 'C3-chart')
        assert recorder.last.url.path == '/api/presentations/pres-1/slides/2/layout'
        assert recorder.last_json() == {'new_layout': 'C3-chart', 'preserve_content': True}

    @pytest.mark.asyncio
    async def test_element_command(self, layout_recorder):
        client, recorder = layout_recorder

        await client.send_element_command('pres-1', 'bringToFront', {'elementId': 'img_1'}, slide_index=0)

        assert recorder.last.url.path == '/api/presentations/pres-1/commands'
        assert recorder.last_json() == {'action': 'bringToFront', 'params': {'elementId': 'img_1'}, 'slide_index': 0}

    @pytest.mark.asyncio
    async def test_versions(self, layout_recorder):
        client, recorder = layout_recorder

        await client.list_versions('pres-1')
        assert (recorder.last.method, recorder.last.url.path) == ('GET', '/api/presentations/pres-1/versions')

        await client.restore_version('pres-1', 'v-7')
        assert (recorder.last.method, recorder.last.url.path) == ('POST', '/api/presentations/pres-1/restore/v-7')


class TestLayoutServiceErrors:
    """Failures are returned as values, never raised"""

    @pytest.mark.asyncio
    async def test_http_error_uses_detail(self, layout_recorder):
        client, recorder = layout_recorder
        recorder.status_code = 404
        recorder.body = {'detail': 'Presentation not found'}

        result = await client.delete_slide('missing', 0)

        assert result.success is False
        assert result.error.code == 'HTTP_404'
        assert result.error.message == 'Presentation not found'

    @pytest.mark.asyncio
    async def test_http_error_without_detail(self, layout_recorder):
        client, recorder = layout_recorder
        recorder.status_code = 500
        recorder.body = {}

        result = await client.list_versions('pres-1')

        assert result.error.code == 'HTTP_500'
        assert result.error.message == 'Request failed with status 500'

    @pytest.mark.asyncio
    async def test_network_error(self, layout_recorder):
        client, recorder = layout_recorder
        recorder.exc = httpx.ConnectError('connection refused')

        result = await client.add_slide('pres-1', 'C1-text')

        assert result.success is False
        assert result.error.code == 'NETWORK_ERROR'

    @pytest.mark.asyncio
    async def test_body_reported_failure(self, layout_recorder):
        client, recorder = layout_recorder
        recorder.body = {'success': False, 'error': {'code': 'ELEMENT_NOT_FOUND', 'message': 'No such element'}}

        result = await client.send_element_command('pres-1', 'deleteElement', {'elementId': 'x'})

        assert result.success is False
        assert result.error.code == 'ELEMENT_NOT_FOUND'


class TestLayoutServiceUrls:

    def test_viewer_url(self):
        client = LayoutServiceClient('http://layout.test/')
        assert client.get_presentation_viewer_url('pres-1') == 'http://layout.test/p/pres-1'

    def test_download_urls(self):
        client = LayoutServiceClient('http://layout.test')

        assert client.get_download_url('pres-1', DownloadFormat.PPTX) == \
            'http://layout.test/api/presentations/pres-1/download/pptx'
        assert client.get_download_url('pres-1', DownloadFormat.PDF, PresentationVersion.FINAL) == \
            'http://layout.test/api/presentations/pres-1/download/pdf?version=final'


class TestElementorClient:

    @pytest.mark.parametrize('layout,hero_type', [
        ('H1-generated', 'title_with_image'),
        ('H1-structured', 'title'),
        ('H2-section', 'section'),
        ('H3-closing', 'closing'),
        ('C1-text', 'title'),
    ])
    def test_layout_to_hero_type(self, layout, hero_type):
        assert map_layout_to_hero_type(layout) == hero_type

    @pytest.mark.asyncio
    async def test_generate_slide_hero_maps_layout(self, elementor_recorder):
        client, recorder = elementor_recorder
        context = ElementorContext(
            presentation_id='pres-1', presentation_title='Deck', slide_id='s1', slide_index=0
        )

        await client.generate_slide_hero(SlideHeroRequest(context=context, prompt='Launch', layout='H3-closing'))

        body = recorder.last_json()
        assert recorder.last.url.path == '/api/generate/hero'
        assert body['hero_type'] == 'closing'
        assert 'layout' not in body
        assert 'visual_style' not in body

    @pytest.mark.asyncio
    async def test_request_for_command_uses_endpoint_table(self, elementor_recorder):
        client, recorder = elementor_recorder

        result = await client.request_for_command('generateChartData', {'prompt': 'Revenue by quarter'})

        assert result.success is True
        assert recorder.last.url.path == '/api/generate/chart'
        assert recorder.last_json() == {'prompt': 'Revenue by quarter'}

    @pytest.mark.asyncio
    async def test_slide_hero_command_converts_layout(self, elementor_recorder):
        client, recorder = elementor_recorder

        await client.request_for_command('generateSlideHero', {'layout': 'H2-section', 'prompt': 'Part two'})

        assert recorder.last_json() == {'hero_type': 'section', 'prompt': 'Part two'}

    @pytest.mark.asyncio
    async def test_command_without_endpoint(self, elementor_recorder):
        client, recorder = elementor_recorder

        result = await client.request_for_command('insertImage', {})

        assert result.success is False
        assert result.error.code == 'UNKNOWN_COMMAND'
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_error_message_from_body(self, elementor_recorder):
        client, recorder = elementor_recorder
        recorder.status_code = 422
        recorder.body = {'error': {'code': 'BAD_PROMPT', 'message': 'Prompt is too short'}}

        result = await client.request_for_command('generateText', {'prompt': ''})

        assert result.error.code == 'HTTP_422'
        assert result.error.message == 'Prompt is too short'
