"""Tests for the server's download and upload endpoints."""

import pytest
from fastapi.testclient import TestClient
from starlette.requests import ClientDisconnect, Request

from common.chunk import Chunk
from common.constants import DEFAULT_SEGMENT_SIZE
from common.exceptions import BandwidthTestError
from server.config import ServerConfig
from server.main import create_app
from server.routes import transfer_routes
from server.routes.transfer_routes import stream_download

CHUNK_SIZE = 1024


def test_root_endpoint(api):
    """Test health check endpoint."""
    response = api.get('/')
    assert response.status_code == 200
    assert response.json()['status'] == 'running'


def test_health_reports_segment_size(api):
    response = api.get('/health')
    assert response.status_code == 200
    assert response.json() == {'status': 'healthy', 'segment_size': CHUNK_SIZE}


def test_default_app_uses_default_segment_size():
    app = create_app()
    assert app.state.chunk.size == DEFAULT_SEGMENT_SIZE


def test_responses_carry_request_id(api):
    response = api.get('/down?s=1')
    assert response.headers['X-Request-ID']


def test_request_log_line(api, caplog):
    with caplog.at_level('INFO', logger='server'):
        response = api.get('/down', params={'s': 'bad'})

    request_id = response.headers['X-Request-ID']
    assert f'[{request_id}] GET /down from ' in caplog.text
    assert '-> 400' in caplog.text


class TestDownload:
    """GET /down returns exactly the requested number of bytes."""

    @pytest.mark.parametrize('size,expected', [
        ('1', 1),
        ('1000', 1000),
        ('1k', CHUNK_SIZE),
        ('1025', CHUNK_SIZE + 1),
        ('3k', 3 * CHUNK_SIZE),
        ('10K', 10_000),
        ('1m', 1024 * 1024),
        ('0', 0),
    ])
    def test_download_exact_size(self, api, size, expected):
        response = api.get('/down', params={'s': size})

        assert response.status_code == 200
        assert len(response.content) == expected
        assert response.content == b'1' * expected
        assert response.headers['content-type'] == 'application/octet-stream'
        assert response.headers['content-length'] == str(expected)

    @pytest.mark.parametrize('size', ['10x', '-5', '1.5k', '10kb', ''])
    def test_download_malformed_size(self, api, size):
        """Malformed sizes are client errors and no filler is sent."""
        response = api.get('/down', params={'s': size})

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_FORMAT'
        assert b'1' * 8 not in response.content

    def test_download_missing_size(self, api):
        response = api.get('/down')

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_FORMAT'

    def test_download_overflowing_size(self, api):
        response = api.get('/down', params={'s': '99999999999G'})
        assert response.status_code == 400

    def test_download_internal_error(self, api, monkeypatch):
        """Parser failures other than a bad format map to 500."""
        def failing_parse(size):
            raise BandwidthTestError('size table unavailable')

        monkeypatch.setattr(transfer_routes, 'parse_byte_count', failing_parse)

        response = api.get('/down', params={'s': '1k'})

        assert response.status_code == 500
        assert response.json() == {'detail': 'size table unavailable', 'code': 'INTERNAL_ERROR'}

    def test_download_smaller_than_chunk(self):
        api = TestClient(create_app(ServerConfig(chunk_size=64 * 1024)))
        response = api.get('/down?s=100')

        assert response.status_code == 200
        assert len(response.content) == 100


class TestStreamDownload:
    """The download generator itself."""

    def test_segments_compose_requested_total(self):
        chunk = Chunk(CHUNK_SIZE)
        total = 5 * CHUNK_SIZE + 17

        lengths = [len(s) for s in stream_download(chunk, total, 'test')]

        assert lengths == [CHUNK_SIZE] * 5 + [17]

    def test_exact_multiple_has_no_empty_tail(self):
        chunk = Chunk(CHUNK_SIZE)
        lengths = [len(s) for s in stream_download(chunk, 4 * CHUNK_SIZE, 'test')]
        assert lengths == [CHUNK_SIZE] * 4

    def test_early_close_logs_partial_count(self, caplog):
        chunk = Chunk(CHUNK_SIZE)
        stream = stream_download(chunk, 10 * CHUNK_SIZE, '10.0.0.1:5000')

        next(stream)
        next(stream)
        with caplog.at_level('WARNING', logger='server'):
            stream.close()

        assert f'aborted after {CHUNK_SIZE} of {10 * CHUNK_SIZE} bytes' in caplog.text

    def test_completion_logs_sent_bytes(self, caplog):
        chunk = Chunk(CHUNK_SIZE)
        with caplog.at_level('INFO', logger='server'):
            list(stream_download(chunk, 2 * CHUNK_SIZE + 1, '10.0.0.1:5000'))

        assert f'Sent {2 * CHUNK_SIZE + 1} bytes to 10.0.0.1:5000' in caplog.text


class TestUpload:
    """POST /up consumes the body and reports its size."""

    @pytest.mark.parametrize('size', [
        0,
        1,
        CHUNK_SIZE - 1,
        CHUNK_SIZE,
        CHUNK_SIZE + 1,
        4 * CHUNK_SIZE,
        7 * CHUNK_SIZE + 13,
    ])
    def test_upload_counts_every_byte(self, api, size):
        response = api.post(
            '/up',
            content=b'1' * size,
            headers={'Content-Type': 'application/octet-stream'}
        )

        assert response.status_code == 200
        data = response.json()
        assert data['bytes_received'] == size
        assert data['elapsed_seconds'] >= 0

    def test_upload_streamed_body(self, api):
        """A chunked (generator) body is counted the same way."""
        def body():
            for _ in range(5):
                yield b'x' * CHUNK_SIZE

        response = api.post('/up', content=body())

        assert response.status_code == 200
        assert response.json()['bytes_received'] == 5 * CHUNK_SIZE

    def test_upload_ignores_content(self, api):
        body = b'\x00\xffanything at all'
        response = api.post('/up', content=body)

        assert response.status_code == 200
        assert response.json()['bytes_received'] == len(body)

    @pytest.mark.parametrize('method', ['GET', 'PUT', 'PATCH', 'DELETE'])
    def test_upload_requires_post(self, api, method):
        """Other methods are client errors, not 405s."""
        response = api.request(method, '/up')

        assert response.status_code == 400
        data = response.json()
        assert data['code'] == 'UNSUPPORTED_METHOD'
        assert 'POST' in data['detail']

    def test_upload_client_disconnect(self, api, monkeypatch):
        """A body that stops before end-of-stream is a read abort."""
        async def broken_stream(self):
            yield b'1' * 10
            raise ClientDisconnect()

        monkeypatch.setattr(Request, 'stream', broken_stream)

        response = api.post('/up', content=b'1' * 100)

        assert response.status_code == 500
        data = response.json()
        assert data['code'] == 'READ_ABORTED'
        assert 'aborted after 10 bytes' in data['detail']
