"""Service test fixtures — async DB, seeded record store, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for the poller and dispatcher that bypass get_db
    - Seed data: unit 1 holds three eligible records, one unapproved record;
      unit 2 holds one eligible record

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for service tests
      (ADR: PostgreSQL-specific features not exercised here)
    - db_manager patched: out-of-request sessions use db_manager's factory directly
"""

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from arsip.core.domain_types import Actor, RecordApprovalStatus
from arsip.db.base import Base
from arsip.infrastructure.database import get_db, DatabaseSessionManager
import arsip.infrastructure.database as db_module
from arsip.main import app
from arsip.models import Classification, StorageLocation, User
from arsip.services.notification_dispatcher import NotificationDispatcher
from arsip.services.transfer_workflow import TransferWorkflow
from tests.services.helpers import TODAY, Seed, make_record


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def actor():
    return Actor(user_id="pegawai-1", role="Pegawai", unit_id=1)


@pytest.fixture
def notifier(test_session_factory):
    return NotificationDispatcher(test_session_factory)


@pytest.fixture
def workflow(test_db, actor, notifier):
    return TransferWorkflow(test_db, actor, notifier, today=TODAY)


@pytest.fixture
async def seed(test_db) -> Seed:
    """Two units, two classifications (one reached via its legacy code), approvers."""
    unit1 = StorageLocation(id_bidang_fkey=1, no_filing_cabinet="FC-1", no_laci="2", no_folder="7")
    unit2 = StorageLocation(id_bidang_fkey=2, no_filing_cabinet="FC-9")
    test_db.add_all([unit1, unit2])
    test_db.add_all([
        Classification(
            kode_klasifikasi="045", kode_klasifikasi_old="KP.045",
            label="Surat Keputusan", aktif=2, inaktif=5, nasib_akhir="Musnah",
        ),
        Classification(
            kode_klasifikasi="000.1.2", kode_klasifikasi_old="012",
            label="Laporan Kegiatan", aktif=1, inaktif=3, nasib_akhir="Permanen",
        ),
        User(user_id="kabid-1", nama="Kepala Bidang Satu", role="Kepala_Bidang", id_bidang_fkey=1),
        User(user_id="kabid-2", nama="Kepala Bidang Dua", role="Kepala_Bidang", id_bidang_fkey=2),
        User(user_id="sekre-1", nama="Sekretaris", role="Sekretaris", id_bidang_fkey=9),
        User(user_id="pegawai-1", nama="Pegawai Satu", role="Pegawai", id_bidang_fkey=1),
    ])
    await test_db.flush()

    expired = make_record(unit1, nomor_berkas=2)
    current = make_record(
        unit1, nomor_berkas=1, kode_klasifikasi="000.1.2",
        uraian_informasi="Laporan kegiatan tahunan", kurun_waktu="2024",
        jangka_simpan_mulai=date(2024, 1, 1), jangka_simpan_berakhir=date(2099, 12, 31),
    )
    legacy = make_record(
        unit1, nomor_berkas=3, kode_klasifikasi="012",
        uraian_informasi="Laporan bulanan", kurun_waktu="2020",
        jangka_simpan_mulai=date(2020, 1, 1), jangka_simpan_berakhir=date(2022, 12, 31),
    )
    unapproved = make_record(
        unit1, nomor_berkas=4,
        status_persetujuan=RecordApprovalStatus.PENDING.value,
    )
    other_unit = make_record(unit2, nomor_berkas=1)
    test_db.add_all([expired, current, legacy, unapproved, other_unit])
    await test_db.commit()
    return Seed(
        location=unit1,
        expired=str(expired.id_arsip_aktif),
        current=str(current.id_arsip_aktif),
        legacy=str(legacy.id_arsip_aktif),
        unapproved=str(unapproved.id_arsip_aktif),
        other_unit=str(other_unit.id_arsip_aktif),
    )
