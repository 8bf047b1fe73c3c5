"""
Tests for the adapter factory
"""
import os
import pytest
from unittest.mock import patch

from game_rpc.adapters.adapter_factory import AdapterFactory, AdapterType
from game_rpc.adapters.adapter_interface import ClientAdapterInterface, ServerAdapterInterface
from game_rpc.adapters.socket.client import SocketRpcClient
from game_rpc.adapters.socket.server import SocketRpcServer
from game_rpc.config import EndpointType
from game_rpc.errors import ConfigurationError


class TestCreateClient:
    """Test client adapter creation"""

    def test_tcp_client(self):
        client = AdapterFactory.create_client(AdapterType.TCP, {"endpoint": "localhost:7777", "timeout_ms": 250})
        assert isinstance(client, SocketRpcClient)
        assert isinstance(client, ClientAdapterInterface)
        assert client.endpoint == "localhost:7777"
        assert client.timeout_ms == 250
        assert client.config.endpoint.type == EndpointType.TCP

    def test_unix_client(self):
        client = AdapterFactory.create_client("UNIX", {"socket_path": "/tmp/ksa.sock"})
        assert client.endpoint == "/tmp/ksa.sock"
        assert client.timeout_ms == 5000

    def test_tcp_client_from_env(self):
        """Test the address falls back to KSA_RPC_ENDPOINT"""
        with patch.dict(os.environ, {"KSA_RPC_ENDPOINT": "10.0.0.5:9000"}):
            client = AdapterFactory.create_client(AdapterType.TCP)
            assert client.endpoint == "10.0.0.5:9000"

    def test_unix_client_without_path(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError, match="KSA_RPC_SOCKET"):
                AdapterFactory.create_client(AdapterType.UNIX)

    def test_invalid_type(self):
        with pytest.raises(ConfigurationError, match="Invalid adapter type"):
            AdapterFactory.create_client("zeromq", {"endpoint": "localhost:7777"})


class TestCreateServer:
    """Test server adapter creation"""

    def test_tcp_server_defaults(self):
        server = AdapterFactory.create_server(AdapterType.TCP)
        assert isinstance(server, SocketRpcServer)
        assert isinstance(server, ServerAdapterInterface)
        assert server.endpoint == "127.0.0.1:0"

    def test_tcp_server_port(self):
        server = AdapterFactory.create_server(AdapterType.TCP, {"host": "0.0.0.0", "port": 7777})
        assert server.endpoint == "0.0.0.0:7777"

    def test_unix_server(self):
        server = AdapterFactory.create_server(AdapterType.UNIX, {"socket_path": "/tmp/ksa.sock"})
        assert server.endpoint == "/tmp/ksa.sock"

    def test_unix_server_requires_path(self):
        with pytest.raises(ConfigurationError, match="socket_path"):
            AdapterFactory.create_server(AdapterType.UNIX)

    def test_invalid_type(self):
        with pytest.raises(ConfigurationError):
            AdapterFactory.create_server("http")
