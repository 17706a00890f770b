"""Operator CLI for tenant namespaces.

    python -m app.scripts.provision_tenant provision <tenant-id>
    python -m app.scripts.provision_tenant deprovision <tenant-id> --yes
    python -m app.scripts.provision_tenant list
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import get_settings
from app.core.database import build_engine
from app.core.logging import configure_logging
from app.services.provisioning import SchemaProvisioner, SchemaProvisioningError

logger = logging.getLogger(__name__)


async def run(args: argparse.Namespace, engine: AsyncEngine) -> int:
    provisioner = SchemaProvisioner(engine)

    if args.command == "list":
        for name in await provisioner.list_tenant_schemas():
            print(name)
        return 0

    if args.command == "provision":
        schema = await provisioner.provision(args.tenant_id)
        print(f"Provisioned {schema}")
        return 0

    if not args.yes:
        print("Refusing to drop a tenant schema without --yes", file=sys.stderr)
        return 2
    await provisioner.deprovision(args.tenant_id)
    print(f"Dropped schema for tenant {args.tenant_id}")
    return 0


async def _main(args: argparse.Namespace) -> int:
    engine = build_engine(get_settings())
    try:
        return await run(args, engine)
    finally:
        await engine.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage tenant schemas")
    sub = parser.add_subparsers(dest="command", required=True)

    provision = sub.add_parser("provision", help="Create a tenant schema and its tables")
    provision.add_argument("tenant_id", help="Tenant UUID")

    deprovision = sub.add_parser("deprovision", help="Drop a tenant schema and all its data")
    deprovision.add_argument("tenant_id", help="Tenant UUID")
    deprovision.add_argument("--yes", action="store_true", help="Confirm the drop")

    sub.add_parser("list", help="List provisioned tenant schemas")
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    args = build_parser().parse_args(argv)

    try:
        return asyncio.run(_main(args))
    except SchemaProvisioningError as exc:
        logger.error("Provisioning failed at step %s: %s", exc.step, exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
