"""Command-line entry point for PhishGuard."""

import argparse
import asyncio
import json
import logging
import signal
import sys

from .api import ApiServer
from .config import Config, load_config, validate_config
from .service import PhishGuardService

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


async def _serve(service: PhishGuardService, config: Config) -> None:
    """Run the HTTP API until SIGINT/SIGTERM."""
    server = ApiServer(service, config.api_host, config.api_port)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    await server.start()
    try:
        await stop_event.wait()
    finally:
        await server.stop()


async def run_command(args: argparse.Namespace, config: Config) -> int:
    """Execute one CLI command against a running service. Returns the exit code."""
    service = PhishGuardService(config)
    await service.start(sweep=args.command == "serve")
    try:
        if args.command == "classify":
            exit_code = 0
            for url in args.urls:
                verdict = await service.analyze_url(url)
                payload = {"url": url, **verdict.to_dict(), "should_block": verdict.should_block}
                _print_json(payload)
                if verdict.should_block:
                    exit_code = 2
            return exit_code

        if args.command == "stats":
            _print_json((await service.get_stats()).to_dict())
        elif args.command == "history":
            if args.clear:
                await service.clear_history()
                print("History cleared")
            else:
                _print_json(await service.get_history(args.limit))
        elif args.command == "lists":
            _print_json(await service.get_lists())
        elif args.command == "allow":
            added = await service.add_to_whitelist(args.domain)
            print(f"{args.domain}: {'added to' if added else 'already in'} whitelist")
        elif args.command == "block":
            added = await service.add_to_blacklist(args.domain)
            print(f"{args.domain}: {'added to' if added else 'already in'} blacklist")
        elif args.command == "unlist":
            removed = await service.remove_from_whitelist(args.domain)
            removed = await service.remove_from_blacklist(args.domain) or removed
            print(f"{args.domain}: {'removed' if removed else 'not listed'}")
        elif args.command == "clear-cache":
            removed = await service.clear_expired_cache()
            print(f"Removed {removed} expired cache entries")
        elif args.command == "serve":
            await _serve(service, config)
        return 0
    finally:
        await service.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phishguard",
        description="Classify URLs as safe, suspicious or malicious.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    classify = sub.add_parser("classify", help="Classify one or more URLs")
    classify.add_argument("urls", nargs="+", metavar="URL")

    sub.add_parser("stats", help="Show scan counters")

    history = sub.add_parser("history", help="Show recent verdicts")
    history.add_argument("--limit", type=int, default=50)
    history.add_argument("--clear", action="store_true", help="Delete all history")

    sub.add_parser("lists", help="Show whitelist and blacklist")

    allow = sub.add_parser("allow", help="Add a domain to the whitelist")
    allow.add_argument("domain")
    block = sub.add_parser("block", help="Add a domain to the blacklist")
    block.add_argument("domain")
    unlist = sub.add_parser("unlist", help="Remove a domain from both lists")
    unlist.add_argument("domain")

    sub.add_parser("serve", help="Run the HTTP API")
    sub.add_parser("clear-cache", help="Delete expired cached verdicts")
    return parser


def main(argv=None):
    """Entry point."""
    args = build_parser().parse_args(argv)
    config = load_config()
    _configure_logging(config.log_level)

    validation_errors = validate_config(config)
    if validation_errors:
        for err in validation_errors:
            logger.error(err)
        sys.exit(1)

    try:
        sys.exit(asyncio.run(run_command(args, config)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
