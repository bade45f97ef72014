from __future__ import annotations

import argparse
import asyncio
import json
import logging

from pushwire.client import ApnsRawPusher, Device, Message, PushConfig, PushError
from pushwire.transport.credentials import ConfigurationError


async def _run(args: argparse.Namespace) -> int:
    logging.basicConfig(level=logging.DEBUG, format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        config = PushConfig.from_env()
    except ConfigurationError as e:
        print({"error": str(e)})
        return 2
    if args.certificate is not None:
        config.certificate = args.certificate
    if args.passphrase is not None:
        config.passphrase = args.passphrase
    if args.production:
        config.environment = "production"
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port

    try:
        pusher = ApnsRawPusher(config)
    except ConfigurationError as e:
        print({"error": str(e)})
        return 2

    for token in args.token:
        if not pusher.supports(token):
            print({"error": f"unsupported token: {token!r}"})
            return 2

    options: dict[str, object] = {}
    if args.badge is not None:
        options["badge"] = args.badge
    if args.custom is not None:
        try:
            custom = json.loads(args.custom)
        except json.JSONDecodeError as e:
            print({"error": f"invalid --custom JSON: {e}"})
            return 2
        if not isinstance(custom, dict):
            print({"error": "--custom must be a JSON object"})
            return 2
        options["custom"] = custom
    message = Message(text=args.text, options=options)

    try:
        submitted = await pusher.push_all([Device(token=t) for t in args.token], message)
    except PushError as e:
        print({"error": str(e), "index": e.index, "submitted": len(e.submitted)})
        return 1

    print(
        {
            "submitted": len(submitted),
            "last_error": pusher.get_response(),
            "errors": [(err.identifier, err.status, err.description) for err in pusher.errors],
        }
    )
    return 0


def main() -> int:
    p = argparse.ArgumentParser(
        description="Smoke-test the binary push gateway (send one notification per token)."
    )
    p.add_argument("token", nargs="+", help="Device token (64 hex characters)")
    p.add_argument("--text", type=str, default="pushwire smoke test", help="Alert text")
    p.add_argument("--badge", type=int, default=None, help="Badge number")
    p.add_argument("--custom", type=str, default=None, help="Custom fields as a JSON object")
    p.add_argument(
        "--certificate",
        type=str,
        default=None,
        help="PEM certificate bundle (default: $PUSHWIRE_CERTIFICATE)",
    )
    p.add_argument("--passphrase", type=str, default=None, help="Private key passphrase")
    p.add_argument("--production", action="store_true", help="Use the production gateway")
    p.add_argument("--host", type=str, default=None, help="Override gateway host")
    p.add_argument("--port", type=int, default=None, help="Override gateway port")
    args = p.parse_args()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
