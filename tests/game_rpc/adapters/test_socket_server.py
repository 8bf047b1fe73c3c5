"""
Tests for the reference socket server
"""

import asyncio
import json
import os
import shutil
import socket
import tempfile

import pytest

from game_rpc.adapters.socket.server import SocketRpcServer, encode_response, fail, ok
from game_rpc.errors import ConfigurationError

unix_only = pytest.mark.skipif(not hasattr(socket, "AF_UNIX"), reason="Unix domain sockets not available")


async def send_line(server: SocketRpcServer, line: bytes) -> dict:
    """Send one raw request line and decode the reply"""
    endpoint = server.endpoint_config
    if endpoint.path:
        reader, writer = await asyncio.open_unix_connection(endpoint.path)
    else:
        reader, writer = await asyncio.open_connection(endpoint.host, endpoint.port)
    writer.write(line)
    await writer.drain()
    reply = await reader.readline()
    writer.close()
    await writer.wait_closed()
    return json.loads(reply)


def exchange(server: SocketRpcServer, line: bytes) -> dict:
    async def scenario():
        async with server:
            return await send_line(server, line)

    return asyncio.run(scenario())


@pytest.fixture
def socket_dir():
    """Short temporary directory, Unix socket paths are length limited"""
    path = tempfile.mkdtemp(prefix="grpc")
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def server():
    """Server with a few game actions registered"""
    server = SocketRpcServer.tcp()
    server.register_action("list_craft", lambda params: [{"id": 1, "name": "Craft A"}])
    server.register_action("ignite", lambda params: None)
    return server


class TestResponses:
    """Test wire responses for valid and invalid requests"""

    def test_dispatch(self, server):
        assert exchange(server, b'{"action":"list_craft"}\n') == {
            "success": True,
            "data": [{"id": 1, "name": "Craft A"}],
        }

    def test_none_result_omits_data(self, server):
        assert exchange(server, b'{"action":"ignite"}\n') == {"success": True}

    def test_params_passed_to_handler(self, server):
        server.register_action("select_craft", lambda params: params["id"])
        assert exchange(server, b'{"action":"select_craft","params":{"id":7}}\n')["data"] == 7

    def test_missing_params_is_empty_dict(self, server):
        seen = []
        server.register_action("record", lambda params: seen.append(params))
        exchange(server, b'{"action":"record"}\n')
        assert seen == [{}]

    def test_async_handler(self, server):
        async def slow_echo(params):
            await asyncio.sleep(0.01)
            return params

        server.register_action("echo", slow_echo)
        assert exchange(server, b'{"action":"echo","params":{"a":1}}\n')["data"] == {"a": 1}

    def test_bom_prefixed_request(self, server):
        assert exchange(server, b'\xef\xbb\xbf{"action":"ignite"}\r\n') == {"success": True}

    def test_invalid_json(self, server):
        response = exchange(server, b"{not json\n")
        assert response["success"] is False
        assert response["error"].startswith("Invalid JSON: ")

    def test_missing_action(self, server):
        assert exchange(server, b'{"params":{}}\n') == {
            "success": False,
            "error": "Invalid request: missing action",
        }

    def test_unknown_action(self, server):
        assert exchange(server, b'{"action":"warp_drive"}\n') == {
            "success": False,
            "error": "Unknown action: warp_drive",
        }

    def test_handler_exception(self, server):
        def explode(params):
            raise KeyError("id")

        server.register_action("explode", explode)
        assert exchange(server, b'{"action":"explode"}\n') == {
            "success": False,
            "error": "Internal error: 'id'",
        }

    def test_unserializable_result(self, server):
        server.register_action("bad", lambda params: object())
        response = exchange(server, b'{"action":"bad"}\n')
        assert response["success"] is False
        assert response["error"].startswith("Internal error: ")

    def test_deeply_nested_request(self, server):
        """Test JSON too deep to parse is answered, not dropped"""
        line = b'{"action":"list_craft","params":{"x":' + b"[" * 100000 + b"]" * 100000 + b"}}\n"
        response = exchange(server, line)
        assert response["success"] is False
        assert response["error"].startswith("Invalid JSON: ")


class TestLifecycle:
    """Test start, stop and registration"""

    def test_ephemeral_port_is_reported(self, server):
        async def scenario():
            async with server:
                assert server.is_running
                return server.endpoint_config.port

        port = asyncio.run(scenario())
        assert port > 0
        assert not server.is_running

    def test_double_start(self, server):
        async def scenario():
            async with server:
                with pytest.raises(RuntimeError, match="already running"):
                    await server.start()

        asyncio.run(scenario())

    def test_replace_handler(self, server):
        server.register_action("list_craft", lambda params: [])
        assert exchange(server, b'{"action":"list_craft"}\n')["data"] == []

    def test_stop_without_start(self, server):
        asyncio.run(server.stop())

    def test_stop_cancels_in_flight_requests(self, server):
        """Test stop() does not leave handlers running"""
        events = []

        async def hang(params):
            events.append("started")
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                events.append("cancelled")
                raise

        server.register_action("hang", hang)

        async def scenario():
            await server.start()
            endpoint = server.endpoint_config
            reader, writer = await asyncio.open_connection(endpoint.host, endpoint.port)
            writer.write(b'{"action":"hang"}\n')
            await writer.drain()
            while not events:
                await asyncio.sleep(0.01)
            await asyncio.wait_for(server.stop(), 2.0)
            reply = await reader.read()
            writer.close()
            return reply

        assert asyncio.run(scenario()) == b""
        assert events == ["started", "cancelled"]

    @unix_only
    def test_unix_socket_lifecycle(self, socket_dir):
        """Test a stale socket file is replaced and removed on stop"""
        path = os.path.join(socket_dir, "game.sock")
        stale = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        stale.bind(path)
        stale.close()
        server = SocketRpcServer.unix(path)
        server.register_action("ignite", lambda params: None)

        assert exchange(server, b'{"action":"ignite"}\n') == {"success": True}
        assert server.endpoint == path
        assert not os.path.exists(path)

    @unix_only
    def test_regular_file_at_socket_path_is_kept(self, socket_dir):
        """Test a mistyped path never deletes an ordinary file"""
        path = os.path.join(socket_dir, "notes.txt")
        with open(path, "w") as f:
            f.write("flight plan")
        server = SocketRpcServer.unix(path)

        with pytest.raises(ConfigurationError, match="not a Unix socket"):
            asyncio.run(server.start())

        assert not server.is_running
        with open(path) as f:
            assert f.read() == "flight plan"


def test_response_helpers():
    assert ok() == {"success": True}
    assert ok(0) == {"success": True, "data": 0}
    assert fail("nope") == {"success": False, "error": "nope"}
    assert encode_response(ok("Fusée")) == '{"success":true,"data":"Fusée"}\n'.encode("utf-8")
