from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Optional, Sequence, TextIO

from provisioner.models.storage import AccessWindow
from provisioner.services.config import StorageConfig
from provisioner.services.dependencies import (
    get_container_setup_service,
    get_signing_service,
    get_storage_config,
    get_storage_service,
    storage_management_client,
)
from provisioner.services.storage_service import StorageServiceError


logger = logging.getLogger("provisioner")


def _ensure_logging(level: int = logging.INFO) -> None:
    formatter = logging.Formatter("%(levelname)s: %(message)s")
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    else:
        root.setLevel(level)
        for handler in root.handlers:
            handler.setFormatter(formatter)
    # azure-core logs every request/response header set at INFO.
    logging.getLogger("azure").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blob-provisioner",
        description="Provision an Azure blob container and issue time-limited SAS tokens.",
    )
    parser.add_argument("--resource-group", help="Resource group (default: $AZURE_RESOURCE_GROUP)")
    parser.add_argument("--account-name", help="Storage account (default: $AZURE_STORAGE_ACCOUNT)")
    parser.add_argument(
        "--container-name",
        help="Container name (default: $AZURE_CONTAINER_NAME, or a random name per run)",
    )
    parser.add_argument("--hours", type=float, help="Token validity in hours (default: $SAS_DURATION_HOURS or 24)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    provision = subparsers.add_parser("provision", help="Ensure the container exists (default command)")
    provision.add_argument(
        "--always-sign",
        action="store_true",
        help="Also issue a read token when the container already existed",
    )

    sign = subparsers.add_parser("sign", help="Sign a container SAS URL with the account key")
    sign.add_argument("--write", action="store_true", help="Grant create/delete/list/add instead of read/list")

    return parser


async def run_provision(
    config: StorageConfig,
    *,
    client: Any,
    always_sign: bool = False,
    out: Optional[TextIO] = None,
) -> None:
    """Ensure the configured container exists and, after creating it, print a read token."""

    storage = get_storage_service(config, client=client)
    setup = get_container_setup_service(storage)

    result = await setup.ensure_container(name=config.container_name)
    if not result.created:
        print(result.container.id or result.container.name, file=out or sys.stdout)
        if not always_sign:
            return

    window = AccessWindow.starting_now(config.sas_duration)
    logger.info("SAS window start=%s end=%s", window.start.isoformat(), window.end.isoformat())
    signed = await storage.issue_read_token(window=window)
    print(signed.token, file=out or sys.stdout)


async def _provision(config: StorageConfig, *, always_sign: bool) -> None:
    async with storage_management_client(config) as client:
        await run_provision(config, client=client, always_sign=always_sign)


def run_sign(config: StorageConfig, *, write: bool = False, out: Optional[TextIO] = None) -> None:
    signing = get_signing_service(config)
    window = AccessWindow.starting_now(config.sas_duration)
    signed = signing.sign_container(container_name=config.container_name, window=window, write=write)
    logger.info(
        "Container SAS (permissions=%s) valid until %s",
        signed.permissions,
        window.end.isoformat(),
    )
    print(signing.container_url(container_name=config.container_name, token=signed.token), file=out or sys.stdout)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _ensure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = get_storage_config(
            resource_group=args.resource_group,
            account_name=args.account_name,
            container_name=args.container_name,
            sas_hours=args.hours,
        )
        logger.debug("Using %r", config)

        if args.command == "sign":
            run_sign(config, write=args.write)
        else:
            asyncio.run(_provision(config, always_sign=getattr(args, "always_sign", False)))
    except (StorageServiceError, ValueError) as exc:
        logger.critical("%s", exc)
        return 1

    return 0
