#!/usr/bin/env python3
"""
Command line entry point for the course platform client.

Useful as a smoke test against a running service:

    course-client check              # bootstrap CSRF, show the current user
    course-client get /courses/7/    # GET through the shared client, print JSON
"""

import argparse
import asyncio
import getpass
import json
import logging
import os
import sys

from .api.auth import dashboard_path
from .application_context import ApplicationContext
from .config.loader import load_settings
from .errors.handling import log_error
from .errors.internal import ApiError, ConfigError, SessionExpiredError
from .logging_config import LoggerConfigurator

PASSWORD_ENV = "COURSE_CLIENT_PASSWORD"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="course-client", description=__doc__.splitlines()[1])
    parser.add_argument("--config", help="JSON settings file")
    parser.add_argument("--server", help="Server URL (overrides COURSE_API_URL)")
    parser.add_argument("--login", metavar="USERNAME", help="Log in before running the command")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("check", help="Bootstrap CSRF and show the current user")
    get = sub.add_parser("get", help="GET a path under /api and print the JSON body")
    get.add_argument("path")
    return parser


async def _login(ctx: ApplicationContext, username: str) -> None:
    password = os.environ.get(PASSWORD_ENV) or getpass.getpass(f"Password for {username}: ")
    await ctx.auth.login({"username": username, "password": password})


async def main(argv: list[str] | None = None) -> int:
    """Run one command and return the process exit code."""
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config, overrides={"server_url": args.server})
    except ConfigError as e:
        logging.error(f"⚙️ {e}")
        return 2

    async with await ApplicationContext.create(settings) as ctx:
        try:
            if args.login:
                await _login(ctx, args.login)
            if args.command == "check":
                user = await ctx.auth.check_auth()
                if user is None:
                    print("Not logged in")
                else:
                    print(json.dumps(user, indent=2))
                    print(f"Dashboard: {dashboard_path(user)}")
                print(f"CSRF token present: {bool(ctx.csrf.get_csrf_token())}")
            elif args.command == "get":
                response = await ctx.api.get(args.path)
                print(json.dumps(response.data, indent=2))
        except SessionExpiredError as e:
            logging.error(f"🔒 {e.message}")
            return 3
        except ApiError as e:
            log_error(f"{args.command} failed", e, context={"status": e.status})
            print(e.message, file=sys.stderr)
            return 1
    return 0


def run() -> None:
    """Synchronous entry point for the command line.

    Raises:
        SystemExit: Always, with the command's exit code.
    """
    LoggerConfigurator().configure()
    try:
        code = asyncio.run(main())
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    run()
