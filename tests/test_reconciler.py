import asyncio
import os
import shutil

import pytest

from src.resources.errors import StorageIOError
from src.resources.service.business.hierarchy_manager import UploadBlob
from src.resources.service.business.reconcile_manager import ReconcileManager
from src.schemas.repositories.memory_repository import MemoryRepository
from .records import file_record


async def upload(hierarchy, name, parent_id=None):
    result = await hierarchy.upload_files([UploadBlob(filename=name, data=b"data")], parent_id)
    return result.uploaded[0]


@pytest.mark.asyncio
async def test_clean_store_is_untouched(hierarchy, reconciler):
    await hierarchy.create_folder("docs")
    await upload(hierarchy, "a.txt")

    report = await reconciler.reconcile()

    assert report.changed is False
    assert report.skipped is False
    assert len(await hierarchy.repository.all_files()) == 2


@pytest.mark.asyncio
async def test_missing_blob_entries_are_removed(hierarchy, reconciler):
    gone = await upload(hierarchy, "gone.txt")
    kept = await upload(hierarchy, "kept.txt")
    os.remove(gone.path)

    report = await reconciler.reconcile()

    assert report.missing_blobs == [gone.id]
    assert [f.id for f in await hierarchy.repository.all_files()] == [kept.id]


@pytest.mark.asyncio
async def test_reconcile_is_idempotent(hierarchy, reconciler):
    gone = await upload(hierarchy, "gone.txt")
    await upload(hierarchy, "kept.txt")
    os.remove(gone.path)

    await reconciler.reconcile()
    snapshot = await hierarchy.repository.all_files()
    second = await reconciler.reconcile()

    assert second.changed is False
    assert await hierarchy.repository.all_files() == snapshot


@pytest.mark.asyncio
async def test_missing_folder_directory_cascades(hierarchy, reconciler):
    outer = await hierarchy.create_folder("outer")
    inner = await hierarchy.create_folder("inner", parent_id=outer.id)
    leaf = await upload(hierarchy, "leaf.txt", parent_id=inner.id)
    sibling = await upload(hierarchy, "sibling.txt")
    shutil.rmtree(hierarchy.blobs.folder_dir(outer.id))

    report = await reconciler.reconcile()

    assert report.missing_folders == [outer.id]
    assert sorted(report.cascaded) == [inner.id, leaf.id]
    assert [f.id for f in await hierarchy.repository.all_files()] == [sibling.id]
    assert not hierarchy.blobs.folder_dir(inner.id).exists()


@pytest.mark.asyncio
async def test_empty_folder_with_directory_is_kept(hierarchy, reconciler):
    folder = await hierarchy.create_folder("empty")

    report = await reconciler.reconcile()

    assert report.changed is False
    assert (await hierarchy.get_file(folder.id)).is_folder is True


@pytest.mark.asyncio
async def test_dangling_parent_entries_are_removed(blobs):
    path = blobs.upload_root / "orphan.txt"
    path.write_bytes(b"x")
    repository = MemoryRepository(files=[file_record(4, "orphan.txt", parent_id=3, path=str(path))])
    reconciler = ReconcileManager(repository, blobs)

    report = await reconciler.reconcile()

    assert report.dangling == [4]
    assert await repository.all_files() == []
    assert not path.exists()


@pytest.mark.asyncio
async def test_record_pointing_outside_upload_root_is_dropped_without_touching_target(blobs, tmp_path):
    victim = tmp_path / "victim.txt"
    victim.write_bytes(b"keep")
    repository = MemoryRepository(files=[file_record(1, "victim.txt", path=str(victim))])

    report = await ReconcileManager(repository, blobs).reconcile()

    assert report.missing_blobs == [1]
    assert await repository.all_files() == []
    assert victim.read_bytes() == b"keep"


@pytest.mark.asyncio
async def test_overlapping_pass_is_skipped(reconciler):
    async with reconciler._pass_lock:
        report = await reconciler.reconcile()

    assert report.skipped is True
    assert report.error is None


@pytest.mark.asyncio
async def test_storage_failure_is_logged_not_raised(blobs, caplog):
    class BrokenRepository(MemoryRepository):
        def _read(self, collection):
            raise StorageIOError("disk gone", "/data/files.json")

    reconciler = ReconcileManager(BrokenRepository(), blobs)

    report = await reconciler.reconcile()

    assert report.skipped is True
    assert "disk gone" in report.error
    assert reconciler.last_report is report
    assert "패스 실패" in caplog.text


@pytest.mark.asyncio
async def test_periodic_loop_removes_drift(hierarchy):
    reconciler = ReconcileManager(hierarchy.repository, hierarchy.blobs, interval_seconds=0.02)
    gone = await upload(hierarchy, "gone.txt")
    reconciler.start()
    assert reconciler.is_running()

    os.remove(gone.path)
    for _ in range(50):
        await asyncio.sleep(0.02)
        if not await hierarchy.repository.all_files():
            break

    await reconciler.stop()
    assert not reconciler.is_running()
    assert await hierarchy.repository.all_files() == []
