"""Tests for tenant schema provisioning and naming."""

import uuid

import pytest
from sqlalchemy import DateTime, inspect
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.tenancy import InvalidTenantIdError, schema_name_for
from app.models import public_tables, tenant_tables
from app.models.base import utcnow
from app.services.provisioning import SchemaProvisioner, SchemaProvisioningError


def test_schema_name_is_prefixed_uuid():
    tid = uuid.UUID("0b6f3c1e-5d2a-4c7e-9a61-2f1e8b3d4c5a")
    assert schema_name_for(tid) == "tenant_0b6f3c1e-5d2a-4c7e-9a61-2f1e8b3d4c5a"
    assert schema_name_for(str(tid)) == schema_name_for(tid)


@pytest.mark.parametrize(
    "bad",
    [
        "not-a-uuid",
        "x'; DROP SCHEMA public; --",
        "{0b6f3c1e-5d2a-4c7e-9a61-2f1e8b3d4c5a}",
        "0b6f3c1e5d2a4c7e9a612f1e8b3d4c5a",
        "",
    ],
)
def test_schema_name_rejects_non_canonical_ids(bad):
    with pytest.raises(InvalidTenantIdError):
        schema_name_for(bad)


@pytest.mark.asyncio
async def test_provision_creates_every_tenant_table(provisioner, engine):
    tid = uuid.uuid4()
    schema = await provisioner.provision(tid)

    assert schema == f"tenant_{tid}"
    assert await provisioner.schema_exists(tid)

    async with engine.connect() as conn:
        names = await conn.run_sync(lambda c: inspect(c).get_table_names(schema=schema))
    assert {t.name for t in tenant_tables()} <= set(names)
    assert "tenants" not in names


@pytest.mark.asyncio
async def test_provision_is_idempotent(provisioner):
    tid = uuid.uuid4()
    await provisioner.provision(tid)
    await provisioner.provision(tid)
    assert await provisioner.list_tenant_schemas() == [f"tenant_{tid}"]


@pytest.mark.asyncio
async def test_list_and_deprovision(provisioner):
    first, second = uuid.uuid4(), uuid.uuid4()
    await provisioner.provision(first)
    await provisioner.provision(second)

    assert await provisioner.list_tenant_schemas() == sorted(
        [f"tenant_{first}", f"tenant_{second}"]
    )

    await provisioner.deprovision(first)
    assert not await provisioner.schema_exists(first)
    assert await provisioner.schema_exists(second)


@pytest.mark.asyncio
async def test_deprovision_missing_schema_is_noop(provisioner):
    await provisioner.deprovision(uuid.uuid4())


@pytest.mark.asyncio
async def test_invalid_tenant_id_never_reaches_ddl(provisioner):
    with pytest.raises(SchemaProvisioningError) as exc_info:
        await provisioner.provision("robert'); DROP TABLE tenants;--")
    assert exc_info.value.step == "validate"
    assert await provisioner.list_tenant_schemas() == []


@pytest.mark.asyncio
async def test_unreachable_database_fails_at_connect(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/missing/registry.db")
    try:
        with pytest.raises(SchemaProvisioningError) as exc_info:
            await SchemaProvisioner(engine).provision(uuid.uuid4())
        assert exc_info.value.step == "connect"

        with pytest.raises(SchemaProvisioningError) as exc_info:
            await SchemaProvisioner(engine).deprovision(uuid.uuid4())
        assert exc_info.value.step == "connect"
    finally:
        await engine.dispose()


def test_all_timestamps_are_timezone_aware():
    assert utcnow().tzinfo is not None
    for table in [*public_tables(), *tenant_tables()]:
        for column in table.columns:
            if isinstance(column.type, DateTime):
                assert column.type.timezone, f"{table.name}.{column.name}"
