"""
Unit Tests for Text Labs helpers and client
"""
import json

import httpx
import pytest

from app.core.exceptions import ServiceTimeoutError, TextLabsError
from app.schemas.builder import PaddingConfig, PositionConfig, TextLabsForm
from app.services.textlabs_client import (
    TextLabsClient,
    TextLabsElement,
    TextLabsResponse,
    build_api_payload,
    build_insertion_params,
    extract_body_content,
    get_default_size,
    get_insertion_method,
    to_request_payload,
)


class TestInsertionMethod:

    @pytest.mark.parametrize('component_type,method', [
        ('TEXT_BOX', 'insertElement'),
        ('METRICS', 'insertElement'),
        ('CHART', 'insertChart'),
        ('IMAGE', 'insertImage'),
        ('INFOGRAPHIC', 'insertImage'),
        ('DIAGRAM', 'insertDiagram'),
        ('GANTT_CHART', 'insertDiagram'),
        ('SOMETHING_NEW', 'insertElement'),
    ])
    def test_method_per_component(self, component_type, method):
        assert get_insertion_method(component_type) == method

    def test_default_size_falls_back_to_text_box(self):
        assert get_default_size('CHART') == {'width': 16, 'height': 12, 'z_index': 50}
        assert get_default_size('UNKNOWN') == get_default_size('TEXT_BOX')


class TestExtractBodyContent:

    def test_fragment_is_unchanged(self):
        html = '<div class="chart">42</div>'
        assert extract_body_content(html) == html

    def test_full_document_keeps_head_scripts_and_body(self):
        html = (
            '<!DOCTYPE html><html><head>'
            '<script src="https://cdn.example.com/chart.js"></script>'
            '<style>body { margin: 0 }</style>'
            '</head><body><canvas id="c"></canvas></body></html>'
        )

        result = extract_body_content(html)

        assert '<script src="https://cdn.example.com/chart.js"></script>' in result
        assert '<canvas id="c"></canvas>' in result
        assert '<style>' not in result
        assert '<body>' not in result


class TestBuildInsertionParams:

    def test_chart_defaults(self):
        element = TextLabsElement(component_type='CHART', html='<div>chart</div>')

        instruction = build_insertion_params('CHART', element, timestamp_ms=1000)

        assert instruction.command == 'insertChart'
        params = instruction.params
        assert params['elementId'] == 'chart_1000'
        assert params['gridRow'] == '4/16'
        assert params['gridColumn'] == '2/18'
        assert params['zIndex'] == 50
        assert params['slideIndex'] == 0
        assert params['chartHtml'] == '<div>chart</div>'
        assert 'style' not in params

    def test_text_box_with_position_and_padding(self):
        element = TextLabsElement(component_type='TEXT_BOX', html='<p>Hello</p>')

        instruction = build_insertion_params(
            'TEXT_BOX',
            element,
            position_config=PositionConfig(start_col=5, start_row=2, position_width=8),
            padding_config=PaddingConfig(top=10, left=4),
            z_index=120,
            slide_index=3,
            timestamp_ms=42,
        )

        assert instruction.command == 'insertTextBox'
        assert instruction.method == 'insertElement'
        params = instruction.params
        assert params['gridColumn'] == '5/13'
        assert params['gridRow'] == '2/8'
        assert params['zIndex'] == 120
        assert params['slideIndex'] == 3
        assert params['content'] == '<p>Hello</p>'
        assert params['style'] == {'padding_top': 10, 'padding_right': 0, 'padding_bottom': 0, 'padding_left': 4}

    def test_image_uses_url(self):
        element = TextLabsElement(component_type='IMAGE', image_url='https://img.example.com/a.png')

        params = build_insertion_params('IMAGE', element, timestamp_ms=7).params

        assert params['imageUrl'] == 'https://img.example.com/a.png'
        assert params['src'] == 'https://img.example.com/a.png'
        assert params['zIndex'] == 75

    def test_diagram_subtype_uses_diagram_defaults(self):
        element = TextLabsElement(component_type='KANBAN_BOARD', html='<div>board</div>')

        instruction = build_insertion_params('KANBAN_BOARD', element, timestamp_ms=9)

        assert instruction.command == 'insertDiagram'
        assert instruction.params['elementId'] == 'diagram_9'
        assert instruction.params['gridColumn'] == '2/32'
        assert instruction.params['htmlContent'] == '<div>board</div>'


class TestBuildApiPayload:

    def test_simple_mode_omits_component_config(self):
        form = TextLabsForm(component_type='TEXT_BOX', prompt='Three key benefits', textbox_config={'tone': 'bold'})

        payload = build_api_payload('s-1', form)

        assert payload['session_id'] == 's-1'
        assert payload['message'] == 'Three key benefits'
        assert payload['options']['textOnlyMode'] is True
        assert 'textboxConfig' not in payload['options']

    def test_advanced_mode_sends_component_config(self):
        form = TextLabsForm(
            component_type='TEXT_BOX',
            prompt='Three key benefits',
            advanced_modified=True,
            textbox_config={'tone': 'bold'},
            items_per_instance=3,
        )

        options = build_api_payload('s-1', form)['options']

        assert options['textOnlyMode'] is False
        assert options['textboxConfig'] == {'tone': 'bold'}
        assert options['itemsPerInstance'] == 3

    def test_diagram_subtype_reads_diagram_config(self):
        form = TextLabsForm(
            component_type='GANTT_CHART', prompt='Roadmap', advanced_modified=True, diagram_config={'weeks': 12}
        )

        assert build_api_payload('s-1', form)['options']['ganttConfig'] == {'weeks': 12}

    def test_image_always_sends_image_config(self):
        form = TextLabsForm(component_type='IMAGE', prompt='A lighthouse', image_config={'style': 'photo'})

        assert build_api_payload('s-1', form)['options']['imageConfig'] == {'style': 'photo'}

    def test_padding_only_when_set(self):
        without = TextLabsForm(component_type='TABLE', prompt='t', padding_config=PaddingConfig())
        with_padding = TextLabsForm(component_type='TABLE', prompt='t', padding_config=PaddingConfig(top=8))

        assert 'paddingConfig' not in build_api_payload('s', without)['options']
        assert build_api_payload('s', with_padding)['options']['paddingConfig']['top'] == 8

    def test_request_payload_maps_keys_and_drops_none(self):
        payload = to_request_payload('s-1', 'hi', {
            'componentType': 'CHART',
            'zIndex': None,
            'positionConfig': {'start_col': 2},
            'count': 2,
        })

        assert payload == {
            'session_id': 's-1',
            'message': 'hi',
            'component_type': 'CHART',
            'position_config': {'start_col': 2},
            'count': 2,
        }


class TestTextLabsResponse:

    def test_all_elements_prefers_list(self):
        single = TextLabsElement(component_type='CHART', html='a')
        many = [TextLabsElement(component_type='CHART', html='b'), TextLabsElement(component_type='CHART', html='c')]

        assert TextLabsResponse(element=single).all_elements() == [single]
        assert TextLabsResponse(element=single, elements=many).all_elements() == many
        assert TextLabsResponse().all_elements() == []


class TestTextLabsClient:

    @pytest.mark.asyncio
    async def test_create_session_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == '/api/canvas/session'
            return httpx.Response(200, json={'session_id': 'canvas-1', 'status': 'ready'})

        client = TextLabsClient('http://textlabs.test', transport=httpx.MockTransport(handler))
        assert await client.create_session_id() == 'canvas-1'
        await client.close()

    @pytest.mark.asyncio
    async def test_create_session_failure_raises(self):
        client = TextLabsClient(
            'http://textlabs.test', transport=httpx.MockTransport(lambda r: httpx.Response(503, json={}))
        )
        with pytest.raises(TextLabsError, match='503'):
            await client.create_session()
        await client.close()

    @pytest.mark.asyncio
    async def test_send_message_posts_snake_case_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen['body'] = json.loads(request.content)
            return httpx.Response(200, json={'element': {'component_type': 'METRICS', 'html': '<b>42%</b>'}})

        client = TextLabsClient('http://textlabs.test', transport=httpx.MockTransport(handler))
        response = await client.send_message('canvas-1', 'Growth', {'componentType': 'METRICS', 'textOnlyMode': True})
        await client.close()

        assert seen['body'] == {
            'session_id': 'canvas-1', 'message': 'Growth', 'component_type': 'METRICS', 'text_only_mode': True
        }
        assert response.all_elements()[0].html == '<b>42%</b>'

    @pytest.mark.asyncio
    async def test_send_message_error_uses_body_message(self):
        client = TextLabsClient(
            'http://textlabs.test',
            transport=httpx.MockTransport(lambda r: httpx.Response(500, json={'error': 'Model overloaded'})),
        )
        with pytest.raises(TextLabsError) as exc_info:
            await client.send_message('canvas-1', 'x', {})
        await client.close()

        assert exc_info.value.message == 'Model overloaded'
        assert exc_info.value.details['status'] == 500

    @pytest.mark.asyncio
    async def test_html_success_body_raises_invalid_response(self):
        client = TextLabsClient(
            'http://textlabs.test',
            transport=httpx.MockTransport(lambda r: httpx.Response(
                200, text='<html>gateway</html>', headers={'content-type': 'text/html'}
            )),
        )
        with pytest.raises(TextLabsError) as exc_info:
            await client.send_message('canvas-1', 'x', {})
        with pytest.raises(TextLabsError, match='Invalid response'):
            await client.generate_infographic('canvas-1', 'x', b'png')
        await client.close()

        assert exc_info.value.code == 'INVALID_RESPONSE'
        assert exc_info.value.details == {'service': 'textlabs', 'status': 200}

    @pytest.mark.asyncio
    @pytest.mark.parametrize('body', [
        {'element': {'html': '<b>no type</b>'}},
        [1, 2, 3],
    ])
    async def test_wrong_shape_raises_invalid_response(self, body):
        client = TextLabsClient(
            'http://textlabs.test', transport=httpx.MockTransport(lambda r: httpx.Response(200, json=body))
        )
        with pytest.raises(TextLabsError) as exc_info:
            await client.send_message('canvas-1', 'x', {})
        await client.close()

        assert exc_info.value.code == 'INVALID_RESPONSE'

    @pytest.mark.asyncio
    async def test_session_without_id_raises_invalid_response(self):
        client = TextLabsClient(
            'http://textlabs.test', transport=httpx.MockTransport(lambda r: httpx.Response(200, json={}))
        )
        with pytest.raises(TextLabsError) as exc_info:
            await client.create_session()
        await client.close()

        assert exc_info.value.code == 'INVALID_RESPONSE'

    @pytest.mark.asyncio
    async def test_timeout_raises_service_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout('slow', request=request)

        client = TextLabsClient('http://textlabs.test', transport=httpx.MockTransport(handler))
        with pytest.raises(ServiceTimeoutError):
            await client.send_message('canvas-1', 'x', {}, timeout=30)
        await client.close()

    @pytest.mark.asyncio
    async def test_generate_infographic_is_multipart(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen['content_type'] = request.headers['content-type']
            seen['body'] = request.content
            return httpx.Response(200, json={'element': {'component_type': 'INFOGRAPHIC', 'image_url': 'u'}})

        client = TextLabsClient('http://textlabs.test', transport=httpx.MockTransport(handler))
        await client.generate_infographic(
            'canvas-1', 'Funnel', b'\x89PNG-bytes', filename='ref.png', content_type='image/png',
            config={'style': 'flat'},
        )
        await client.close()

        assert seen['content_type'].startswith('multipart/form-data')
        assert b'name="reference_image"; filename="ref.png"' in seen['body']
        assert b'\x89PNG-bytes' in seen['body']
        assert b'{"style": "flat"}' in seen['body']

    @pytest.mark.asyncio
    async def test_health_check_never_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('down', request=request)

        client = TextLabsClient('http://textlabs.test', transport=httpx.MockTransport(handler))
        assert await client.health_check() is False
        await client.close()
