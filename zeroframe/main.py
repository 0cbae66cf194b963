from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from zeroframe.client import ZeroFrame
from zeroframe.config import ConfigError, load_options
from zeroframe.protocol.errors import ProtocolError

logger = logging.getLogger(__name__)


def _parse_arg(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="zeroframe", description="Run one ZeroFrame command against a site.")
    parser.add_argument("site", help="site address")
    parser.add_argument("command", help="command name, e.g. siteInfo")
    parser.add_argument("args", nargs="*", help="command arguments (JSON values or plain strings)")
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--secure", action="store_true", default=None)
    parser.add_argument("--master-address")
    parser.add_argument("--timeout", type=float, default=30.0, help="seconds to wait for the result")
    parser.add_argument("--log-level", default="WARNING")
    return parser


def _overrides(ns: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    instance = {key: value for key, value in (("host", ns.host), ("port", ns.port), ("secure", ns.secure)) if value is not None}
    overrides: Dict[str, Dict[str, Any]] = {"reconnect": {"attempts": 0}}
    if instance:
        overrides["instance"] = instance
    if ns.master_address:
        overrides["multiuser"] = {"master_address": ns.master_address}
    return overrides


async def run_client(ns: argparse.Namespace) -> Any:
    options = load_options(overrides=_overrides(ns))
    async with ZeroFrame(ns.site, options) as zeroframe:
        args = [_parse_arg(arg) for arg in ns.args]
        return await asyncio.wait_for(zeroframe.invoke(ns.command, *args), timeout=ns.timeout)


def main(argv: Optional[List[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    logging.basicConfig(level=ns.log_level.upper())
    try:
        result = asyncio.run(run_client(ns))
    except (ProtocolError, ConfigError) as exc:
        logger.error("%s", exc)
        return 1
    except asyncio.TimeoutError:
        logger.error("No response to %s within %.1fs", ns.command, ns.timeout)
        return 1
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
