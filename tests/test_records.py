import json
import os
import shutil
import tempfile

import pytest

from common.errors import RecordDecodeError
from filestore.records import RecordStore
from filestore.serializer import EncryptedSerializer


@pytest.fixture
def tmp_dir():
    d = tempfile.mkdtemp(prefix="records-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def records(tmp_dir):
    return RecordStore(tmp_dir)


@pytest.mark.asyncio
async def test_read_missing_returns_default_without_writing(records, tmp_dir):
    assert await records.read("nope", default={"d": 1}) == {"d": 1}
    assert await records.read("nope") is None
    assert os.listdir(tmp_dir) == []


@pytest.mark.asyncio
async def test_write_stores_key_and_value(records):
    await records.write("user:1", {"name": "John"})
    with open(records.path_for("user:1"), "r", encoding="utf-8") as f:
        stored = json.load(f)
    assert stored == {"key": "user:1", "value": {"name": "John"}}
    assert await records.read("user:1") == {"name": "John"}


@pytest.mark.asyncio
async def test_write_overwrites(records):
    await records.write("k", 1)
    await records.write("k", 2)
    assert await records.read("k") == 2


@pytest.mark.asyncio
async def test_delete_is_idempotent(records):
    await records.write("k", "v")
    await records.delete("k")
    await records.delete("k")
    assert await records.read("k", "gone") == "gone"


@pytest.mark.asyncio
async def test_list_keys_recovers_original_keys(records):
    for key in ("alpha", "béta", "with/slash"):
        await records.write(key, key.upper())
    assert await records.list_keys() == {"alpha", "béta", "with/slash"}


@pytest.mark.asyncio
async def test_list_keys_empty(records):
    assert await records.list_keys() == set()


@pytest.mark.asyncio
async def test_clear_removes_everything_including_foreign_files(records, tmp_dir):
    await records.write("a", 1)
    await records.write("b", 2)
    with open(os.path.join(tmp_dir, "not-ours.txt"), "w") as f:
        f.write("hello")

    removed = await records.clear()
    assert removed == 3
    assert os.listdir(tmp_dir) == []


@pytest.mark.asyncio
async def test_garbage_bytes_raise_decode_error(records):
    with open(records.path_for("k"), "wb") as f:
        f.write(b"\x00not json")
    with pytest.raises(RecordDecodeError) as exc_info:
        await records.read("k")
    assert exc_info.value.path == records.path_for("k")


@pytest.mark.asyncio
async def test_json_that_is_not_a_record_raises_decode_error(records):
    with open(records.path_for("k"), "w") as f:
        json.dump([1, 2, 3], f)
    with pytest.raises(RecordDecodeError, match="not a {key, value} record"):
        await records.read("k")


@pytest.mark.asyncio
async def test_list_keys_with_foreign_file_raises(records, tmp_dir):
    await records.write("a", 1)
    with open(os.path.join(tmp_dir, "README"), "w") as f:
        f.write("plain text")
    with pytest.raises(RecordDecodeError):
        await records.list_keys()


@pytest.mark.asyncio
async def test_encrypted_records(tmp_dir):
    store = RecordStore(tmp_dir, serializer=EncryptedSerializer("pw"))
    await store.write("secret", {"pin": "1234"})

    with open(store.path_for("secret"), "rb") as f:
        assert b"1234" not in f.read()
    assert await store.read("secret") == {"pin": "1234"}
    assert await store.list_keys() == {"secret"}

    wrong = RecordStore(tmp_dir, serializer=EncryptedSerializer("nope"))
    with pytest.raises(RecordDecodeError):
        await wrong.read("secret")


@pytest.mark.asyncio
async def test_clear_attempts_every_delete_before_raising(records, tmp_dir, mocker):
    for name in ("one", "two", "three"):
        with open(os.path.join(tmp_dir, name), "w") as f:
            f.write("x")
    delete = mocker.patch.object(
        records.file_store, "delete", side_effect=PermissionError("denied")
    )
    with pytest.raises(PermissionError, match="denied"):
        await records.clear()
    assert delete.await_count == 3


@pytest.mark.asyncio
async def test_list_keys_collects_every_load_before_raising(records, tmp_dir):
    for name in ("bad-1", "bad-2"):
        with open(os.path.join(tmp_dir, name), "wb") as f:
            f.write(b"\x00garbage")
    with pytest.raises(RecordDecodeError) as exc_info:
        await records.list_keys()
    assert os.path.basename(exc_info.value.path) in ("bad-1", "bad-2")
