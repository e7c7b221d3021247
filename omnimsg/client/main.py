"""
Messenger Main Entry Point

Parses the command line, loads configuration, opens the broadcast endpoint
and runs either a one-shot send or an interactive chat session.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from omnimsg import __version__
from omnimsg.client.chat_client import ChatClient
from omnimsg.client.network.endpoint import BroadcastEndpoint, open_broadcast_endpoint
from omnimsg.client.ui.display_manager import DisplayManager
from omnimsg.client.ui.input_handler import create_line_reader
from omnimsg.shared.codec import encode_packet
from omnimsg.shared.config import ClientConfig, ConfigurationLoader
from omnimsg.shared.constants import (
    DEFAULT_BROADCAST_ADDRESS,
    DEFAULT_NICKNAME,
    DEFAULT_PORT,
    INPUT_MODES,
    RECEIVE_STRATEGIES,
    WAIT_STRATEGIES,
)
from omnimsg.shared.exceptions import (
    ConfigurationError,
    EndpointError,
    InputHandlingError,
    SendError,
    UnsupportedPlatformError,
)
from omnimsg.shared.logging_config import configure_from_env, get_logger
from omnimsg.shared.utils import program_name


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Omni Messenger (omnimsg) - minimal serverless LAN chat",
    )
    parser.add_argument("-n", "--nick", dest="nickname",
                        help=f"nickname (default: {DEFAULT_NICKNAME})")
    parser.add_argument("-p", "--port", type=int,
                        help=f"UDP port (default: {DEFAULT_PORT})")
    parser.add_argument("-b", "--broadcast", dest="broadcast_address", metavar="IP",
                        help=f"broadcast IP (default: {DEFAULT_BROADCAST_ADDRESS})")
    parser.add_argument("--send", metavar="TEXT",
                        help="send one message and exit")
    parser.add_argument("--config", metavar="PATH",
                        help="JSON or YAML configuration file")
    parser.add_argument("--receive-strategy", choices=RECEIVE_STRATEGIES,
                        help="how to poll the socket without blocking")
    parser.add_argument("--input-mode", choices=INPUT_MODES,
                        help="how to poll operator input without blocking")
    parser.add_argument("--wait-strategy", choices=WAIT_STRATEGIES,
                        help="idle with a fixed sleep or a bounded select() wait")
    parser.add_argument("--log-level",
                        help="logging level (default: WARNING)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map parsed arguments onto ClientConfig field overrides."""
    return {
        "nickname": args.nickname,
        "port": args.port,
        "broadcast_address": args.broadcast_address,
        "receive_strategy": args.receive_strategy,
        "input_mode": args.input_mode,
        "wait_strategy": args.wait_strategy,
    }


def send_once(endpoint: BroadcastEndpoint, config: ClientConfig, text: str) -> int:
    """
    Broadcast a single message and release the endpoint.

    Returns:
        0 if the packet was sent, 1 otherwise.
    """
    logger = get_logger(__name__)
    try:
        endpoint.send(encode_packet(config.nickname, text))
        return 0
    except SendError as e:
        logger.error(str(e))
        print(str(e), file=sys.stderr)
        return 1
    finally:
        endpoint.close()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the messenger.

    Returns:
        Exit code (0 for success, non-zero for startup errors)
    """
    parser = build_parser(program_name(sys.argv[0] if sys.argv else None))
    args = parser.parse_args(argv)

    try:
        configure_from_env(args.log_level)
    except (ValueError, OSError) as e:
        print(f"Failed to set up logging: {e}", file=sys.stderr)
        return 1
    logger = get_logger(__name__)

    endpoint: Optional[BroadcastEndpoint] = None
    try:
        try:
            config = ConfigurationLoader.load_client_config(
                args.config, overrides=config_overrides(args)
            )
        except ConfigurationError as e:
            logger.error(f"Configuration error: {e}")
            print(f"Configuration error: {e}", file=sys.stderr)
            return 1

        try:
            endpoint = open_broadcast_endpoint(config)
        except EndpointError as e:
            logger.error(str(e))
            print(str(e), file=sys.stderr)
            return 1

        if args.send is not None:
            return send_once(endpoint, config, args.send)

        try:
            line_reader = create_line_reader(config.input_mode)
        except (ConfigurationError, UnsupportedPlatformError, InputHandlingError) as e:
            endpoint.close()
            logger.error(f"Input setup failed: {e}")
            print(f"Input setup failed: {e}", file=sys.stderr)
            return 1

        display = DisplayManager()
        display.show_banner(config)
        client = ChatClient(config, endpoint, line_reader=line_reader, display=display)
    except KeyboardInterrupt:
        if endpoint is not None:
            endpoint.close()
        logger.info("Startup cancelled by user")
        print("\nStartup cancelled.", file=sys.stderr)
        return 0

    logger.info(f"Chat session started as {config.nickname}")
    return client.run()


if __name__ == "__main__":
    sys.exit(main())
