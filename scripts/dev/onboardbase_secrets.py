"""Read decrypted secrets from Onboardbase on the command line.

Credentials come from ``ONBOARDBASE_API_KEY`` and ``ONBOARDBASE_PASSCODE``;
the scope defaults to ``ONBOARDBASE_PROJECT`` / ``ONBOARDBASE_ENVIRONMENT``.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from libs.observability import configure_logging, correlation_scope  # noqa: E402
from libs.onboardbase import (  # noqa: E402
    APIError,
    ClientConfig,
    OnboardbaseClient,
    OnboardbaseSettings,
    SecretIdentity,
)

logger = logging.getLogger("onboardbase.cli")


def build_client(settings: OnboardbaseSettings) -> OnboardbaseClient:
    return OnboardbaseClient(ClientConfig.from_settings(settings))


def _identity(args: argparse.Namespace, settings: OnboardbaseSettings, name: str | None = None) -> SecretIdentity:
    return SecretIdentity(
        project=args.project if args.project is not None else settings.project,
        environment=args.environment if args.environment is not None else settings.environment,
        name=name,
    )


def cmd_auth(args: argparse.Namespace, client: OnboardbaseClient, settings: OnboardbaseSettings) -> None:
    client.authenticate()
    print("credentials accepted")


def cmd_get(args: argparse.Namespace, client: OnboardbaseClient, settings: OnboardbaseSettings) -> None:
    secret = client.get_secret(_identity(args, settings, args.name))
    print(secret.value)


def cmd_list(args: argparse.Namespace, client: OnboardbaseClient, settings: OnboardbaseSettings) -> None:
    secrets = client.get_secrets(_identity(args, settings)).secrets
    if args.format == "json":
        print(json.dumps(secrets, indent=2, sort_keys=True))
        return
    for name in sorted(secrets):
        if args.names_only:
            print(name)
        else:
            print(f"{name}={secrets[name]}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read decrypted secrets from Onboardbase")
    parser.set_defaults(func=None)
    parser.add_argument("--project", help="Project scope (defaults to ONBOARDBASE_PROJECT)")
    parser.add_argument("--environment", help="Environment scope (defaults to ONBOARDBASE_ENVIRONMENT)")
    parser.add_argument("--verbose", action="store_true", help="Log requests at DEBUG level")

    sub = parser.add_subparsers(dest="command")

    auth_parser = sub.add_parser("auth", help="Check that the API key is accepted")
    auth_parser.set_defaults(func=cmd_auth)

    get_parser = sub.add_parser("get", help="Print the value of one secret")
    get_parser.add_argument("name", help="Secret name")
    get_parser.set_defaults(func=cmd_get)

    list_parser = sub.add_parser("list", help="Print every secret in scope")
    list_parser.add_argument("--format", choices=("env", "json"), default="env")
    list_parser.add_argument("--names-only", action="store_true", help="Only print secret names")
    list_parser.set_defaults(func=cmd_list)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return
    configure_logging("onboardbase-cli", level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = OnboardbaseSettings()
    with correlation_scope():
        try:
            with build_client(settings) as client:
                args.func(args, client, settings)
        except APIError as exc:
            logger.debug("command %s failed", args.command, exc_info=exc)
            parser.exit(1, f"error: {exc.message}\n")


if __name__ == "__main__":  # pragma: no cover - CLI entry-point
    main()
