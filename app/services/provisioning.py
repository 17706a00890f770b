"""Tenant schema provisioning.

Each tenant gets its own namespace, ``tenant_<uuid>``, holding the full set
of tenant tables. On PostgreSQL that is a real schema; on SQLite (tests,
local runs) it is an in-memory database attached under the same name.

All DDL is issued through a ``schema_translate_map`` so foreign keys resolve
inside the new namespace. The connection's default schema (``search_path``)
is never touched, so nothing leaks into later queries on the pooled
connection.
"""

import logging
import uuid

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.schema import CreateSchema, DropSchema
from sqlmodel import SQLModel

from app.core.tenancy import SCHEMA_PREFIX, InvalidTenantIdError, schema_name_for
from app.models import tenant_tables
from app.models.base import TENANT_SCHEMA

logger = logging.getLogger(__name__)


class SchemaProvisioningError(Exception):
    """A provisioning step failed. ``step`` names which one."""

    def __init__(self, tenant_id: object, step: str, message: str) -> None:
        super().__init__(f"{step} failed for tenant {tenant_id}: {message}")
        self.tenant_id = tenant_id
        self.step = step


def _schema_names(sync_conn: Connection) -> list[str]:
    return inspect(sync_conn).get_schema_names()


def _create_tenant_tables(sync_conn: Connection, schema: str) -> None:
    scoped = sync_conn.execution_options(schema_translate_map={TENANT_SCHEMA: schema})
    SQLModel.metadata.create_all(scoped, tables=tenant_tables(), checkfirst=True)


class SchemaProvisioner:
    """Creates, drops and inspects tenant namespaces on one engine."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    async def provision(self, tenant_id: uuid.UUID | str) -> str:
        """Create the tenant namespace and all its tables. Returns the schema name.

        Safe to call again for an existing namespace: both the schema and
        its tables are created only if missing.
        """
        schema = self._validated_schema(tenant_id)
        logger.info("Provisioning tenant schema %s", schema, extra={"schema": schema})

        step = "connect"
        try:
            async with self.engine.begin() as conn:
                await self._step(tenant_id, "create_schema", self._create_schema(conn, schema))
                await self._step(
                    tenant_id, "create_tables", conn.run_sync(_create_tenant_tables, schema)
                )
                step = "commit"
        except SchemaProvisioningError:
            raise
        except Exception as exc:
            raise self._failed(tenant_id, step, exc) from exc

        logger.info("Tenant schema provisioned: %s", schema, extra={"schema": schema})
        return schema

    async def deprovision(self, tenant_id: uuid.UUID | str) -> None:
        """Drop the tenant namespace and everything in it. Irreversible."""
        schema = self._validated_schema(tenant_id)
        logger.warning("Deprovisioning tenant schema %s", schema, extra={"schema": schema})

        step = "connect"
        try:
            async with self.engine.begin() as conn:
                await self._step(tenant_id, "drop_schema", self._drop_schema(conn, schema))
                step = "commit"
        except SchemaProvisioningError:
            raise
        except Exception as exc:
            raise self._failed(tenant_id, step, exc) from exc

        logger.info("Tenant schema dropped: %s", schema, extra={"schema": schema})

    async def schema_exists(self, tenant_id: uuid.UUID | str) -> bool:
        schema = self._validated_schema(tenant_id)
        async with self.engine.connect() as conn:
            return schema in await conn.run_sync(_schema_names)

    async def list_tenant_schemas(self) -> list[str]:
        async with self.engine.connect() as conn:
            names = await conn.run_sync(_schema_names)
        return sorted(n for n in names if n.startswith(SCHEMA_PREFIX))

    # ── Internal helpers ──────────────────────────────────────

    def _validated_schema(self, tenant_id: uuid.UUID | str) -> str:
        try:
            return schema_name_for(tenant_id)
        except InvalidTenantIdError as exc:
            logger.error("Refusing to provision invalid tenant id %r", tenant_id)
            raise SchemaProvisioningError(tenant_id, "validate", str(exc)) from exc

    async def _step(self, tenant_id: object, step: str, awaitable) -> None:
        try:
            await awaitable
        except Exception as exc:
            raise self._failed(tenant_id, step, exc) from exc

    def _failed(self, tenant_id: object, step: str, exc: Exception) -> SchemaProvisioningError:
        logger.error(
            "Tenant provisioning step %s failed for %s",
            step,
            tenant_id,
            exc_info=exc,
            extra={"tenant_id": str(tenant_id), "step": step},
        )
        return SchemaProvisioningError(tenant_id, step, str(exc))

    async def _create_schema(self, conn: AsyncConnection, schema: str) -> None:
        if conn.dialect.name == "sqlite":
            if schema in await conn.run_sync(_schema_names):
                return
            quoted = conn.dialect.identifier_preparer.quote_identifier(schema)
            await conn.execute(text(f"ATTACH DATABASE ':memory:' AS {quoted}"))
            return
        await conn.execute(CreateSchema(schema, if_not_exists=True))

    async def _drop_schema(self, conn: AsyncConnection, schema: str) -> None:
        if conn.dialect.name == "sqlite":
            if schema not in await conn.run_sync(_schema_names):
                return
            quoted = conn.dialect.identifier_preparer.quote_identifier(schema)
            await conn.execute(text(f"DETACH DATABASE {quoted}"))
            return
        await conn.execute(DropSchema(schema, cascade=True, if_exists=True))
