import sys
import json
import argparse
import asyncio

from hostops.config.config import load_config
from hostops.gateway.server import start_gateway
from hostops.logging.diagnostic import configure_logging
from hostops.operations.dispatcher import create_dispatcher, run_operation


def _parse_details(raw: str) -> dict:
    try:
        details = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SystemExit(f"--details must be a JSON object: {e}")
    if not isinstance(details, dict):
        raise SystemExit("--details must be a JSON object")
    return details


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="hostops sandboxed operation dispatcher")
    parser.add_argument("--operation", type=str, help="Run a single operation: file_system | network | process | system_info")
    parser.add_argument("--details", type=str, default="{}", help="Operation details as a JSON object")
    parser.add_argument("--root", type=str, help="Sandbox directory (overrides HOSTOPS_SANDBOX_PATH)")
    parser.add_argument("--port", type=int, default=3000, help="Port to run the gateway on")
    return parser.parse_args(argv)


def _setup(args: argparse.Namespace):
    config = load_config()
    if args.root:
        config.sandbox_path = args.root
    configure_logging(config.log_level)
    return create_dispatcher(config)


async def async_main(argv=None) -> int:
    """Run the single operation named by ``--operation`` and print its outcome."""
    args = parse_args(argv)
    if not args.operation:
        raise SystemExit("--operation is required")
    dispatcher = _setup(args)
    outcome = await run_operation(dispatcher, args.operation, _parse_details(args.details))
    sys.stdout.write(json.dumps(outcome.to_dict(), indent=2) + "\n")
    return 0 if outcome.success else 1


def main(argv=None):
    args = parse_args(argv)
    try:
        if args.operation:
            sys.exit(asyncio.run(async_main(argv)))
        start_gateway(args.port, _setup(args))
    except KeyboardInterrupt:
        sys.stderr.write("\n")
        sys.exit(1)
    except Exception as e:
        sys.stderr.write(f"Fatal: {e}\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
