"""Shared pytest fixtures for all tests."""

import pytest
from fastapi.testclient import TestClient

from client.config import TestConfig
from client.transfer_client import TransferClient
from server.config import ServerConfig
from server.main import create_app


CHUNK_SIZE = 1024


@pytest.fixture
def chunk_size():
    """Small segment size so multi-chunk transfers stay fast."""
    return CHUNK_SIZE


@pytest.fixture
def server_app(chunk_size):
    """
    Create a server application with a small chunk.

    Args:
        chunk_size: Segment size fixture

    Returns:
        FastAPI application
    """
    return create_app(ServerConfig(listen_address='127.0.0.1:8080', chunk_size=chunk_size))


@pytest.fixture
def api(server_app):
    """Create FastAPI test client."""
    return TestClient(server_app)


@pytest.fixture
def test_config(chunk_size):
    """Client configuration matching the test server."""
    return TestConfig(
        host='testserver',
        port=80,
        get_size='10k',
        post_size='10k',
        chunk_size=chunk_size,
    )


@pytest.fixture
def client_with_server(test_config, server_app):
    """
    TransferClient whose session talks to the in-process server app.

    Returns:
        TransferClient instance
    """
    client = TransferClient(test_config)
    client.session.close()
    client.session = TestClient(server_app)
    yield client
    client.close()
