import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from core.detection_client import DetectionServiceClient
from core.exceptions import DetectionServiceError


async def _handler(request):
    name = request.match_info['name']
    body = await request.json()
    request.app['calls'].append((name, dict(request.headers), body))

    if name == 'echo':
        return web.json_response({'echo': body})
    if name == 'error-envelope':
        return web.json_response({'error': 'model crashed'}, status=500)
    if name == 'bad-status':
        return web.json_response({'ok': False}, status=503)
    if name == 'not-json':
        return web.Response(text='<html>oops</html>')
    if name == 'list':
        return web.json_response([1, 2, 3])
    if name == 'slow':
        await asyncio.sleep(1)
        return web.json_response({})
    return web.json_response({'result': {'category': body.get('category')}, 'modelUsed': 'Remote'})


def _run_against_server(scenario):
    async def runner():
        app = web.Application()
        app['calls'] = []
        app.router.add_post('/functions/v1/{name}', _handler)
        server = TestServer(app)
        await server.start_server()
        try:
            return await scenario(str(server.make_url('')), app['calls'])
        finally:
            await server.close()

    return asyncio.run(runner())


def test_function_url_strips_trailing_slash():
    client = DetectionServiceClient("http://svc.local/")
    assert client.function_url('ai-threat-detection') == "http://svc.local/functions/v1/ai-threat-detection"


def test_invoke_sends_auth_headers():
    async def scenario(url, calls):
        client = DetectionServiceClient(url, api_key='secret')
        data = await client.invoke('echo', {'x': 1})
        return data, calls

    data, calls = _run_against_server(scenario)
    assert data == {'echo': {'x': 1}}
    name, headers, _ = calls[0]
    assert name == 'echo'
    assert headers['Authorization'] == 'Bearer secret'
    assert headers['apikey'] == 'secret'


def test_detect_wrappers_post_expected_bodies():
    async def scenario(url, calls):
        client = DetectionServiceClient(url)
        advanced = await client.detect_advanced({'a': 1}, 'ddos_attacks')
        await client.detect_threats([{'sourceIP': '1.1.1.1'}], 'batch')
        return advanced, calls

    advanced, calls = _run_against_server(scenario)
    assert advanced['result'] == {'category': 'ddos_attacks'}
    assert calls[0][0] == 'ai-advanced-detection'
    assert calls[0][2] == {'simulationData': {'a': 1}, 'category': 'ddos_attacks'}
    assert calls[1][0] == 'ai-threat-detection'
    assert calls[1][2] == {'networkData': [{'sourceIP': '1.1.1.1'}], 'analysisType': 'batch'}
    assert 'Authorization' not in calls[0][1]


@pytest.mark.parametrize("name,message", [
    ('error-envelope', 'model crashed'),
    ('bad-status', 'HTTP 503'),
    ('not-json', 'invalid JSON'),
    ('list', 'unexpected payload'),
])
def test_invoke_failures_raise(name, message):
    async def scenario(url, calls):
        with pytest.raises(DetectionServiceError) as excinfo:
            await DetectionServiceClient(url).invoke(name, {})
        return str(excinfo.value)

    assert message in _run_against_server(scenario)


def test_invoke_timeout():
    async def scenario(url, calls):
        with pytest.raises(DetectionServiceError) as excinfo:
            await DetectionServiceClient(url, timeout=0.1).invoke('slow', {})
        return str(excinfo.value)

    assert 'Timeout' in _run_against_server(scenario)


def test_invoke_connection_refused(offline_client):
    with pytest.raises(DetectionServiceError) as excinfo:
        asyncio.run(offline_client.invoke('ai-threat-detection', {}))
    assert excinfo.value.status_code == 502


def test_ping_unreachable_service(offline_client):
    assert offline_client.ping() is False
