"""
Command line client for the game RPC server.

    game-rpc list_craft
    game-rpc --socket /tmp/ksa.sock select_craft --params '{"id": 1}'

The endpoint comes from --endpoint/--socket, or from KSA_RPC_SOCKET /
KSA_RPC_ENDPOINT when neither is given.
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from game_rpc.adapters.socket.client import SocketRpcClient
from game_rpc.config import ClientConfig, EndpointConfig, TIMEOUT_ENV, timeout_from_env
from game_rpc.errors import GameRpcError, ConfigurationError
from game_rpc.telemetry.metrics import setup_metrics
from game_rpc.telemetry.tracer import setup_tracer

logger = logging.getLogger(__name__)

SERVICE_NAME = "game-rpc-cli"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="game-rpc",
        description="Invoke an action on the running game server",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--endpoint", help="TCP endpoint as host:port")
    target.add_argument("--socket", dest="socket_path", help="Unix domain socket path")
    parser.add_argument("--timeout", type=int, default=None, metavar="MS",
                        help=f"Call timeout in milliseconds (default: ${TIMEOUT_ENV} or 5000)")
    parser.add_argument("--params", default=None, help="Action parameters as a JSON object")
    parser.add_argument("--otlp-endpoint", default=None,
                        help="Export traces and metrics to this OTLP receiver")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("action", help="Action name, e.g. list_craft")
    return parser


def parse_params(text: Optional[str]) -> Optional[dict]:
    """Decode the --params argument

    Raises:
        ConfigurationError: If the text is not a JSON object
    """
    if text is None:
        return None
    try:
        params = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"--params is not valid JSON: {e}")
    if not isinstance(params, dict):
        raise ConfigurationError("--params must be a JSON object")
    return params


def build_client(args: argparse.Namespace) -> SocketRpcClient:
    """Resolve the client from arguments, then the environment"""
    if args.socket_path:
        endpoint = EndpointConfig.unix(args.socket_path)
    elif args.endpoint:
        endpoint = EndpointConfig.parse_tcp(args.endpoint)
    else:
        endpoint = EndpointConfig.from_env()

    timeout_ms = args.timeout if args.timeout is not None else timeout_from_env()
    return SocketRpcClient.from_config(ClientConfig(endpoint=endpoint, timeout_ms=timeout_ms))


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line client

    Returns:
        Process exit code, 0 on success
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    if args.otlp_endpoint:
        setup_tracer(SERVICE_NAME, args.otlp_endpoint)
        setup_metrics(SERVICE_NAME, args.otlp_endpoint)

    try:
        params = parse_params(args.params)
        client = build_client(args)
        logger.debug(f"Calling '{args.action}' on {client.endpoint}")
        result = client.call_sync(args.action, params)
    except GameRpcError as e:
        print(f"Error ({type(e).__name__}): {e}", file=sys.stderr)
        return e.exit_code

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
