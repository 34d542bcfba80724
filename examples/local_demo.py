import asyncio
import os
import shutil
import sys
import tempfile
from pathlib import Path

# Ensure the project root is on sys.path when running as a script.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from persist import ClosedError, InvalidEditResult, StorageEngine


async def main() -> int:
    tmp_dir = os.path.join(tempfile.gettempdir(), f"persist-demo-{os.getpid()}")
    engine = await StorageEngine.create(tmp_dir)
    print("[engine] dir:", engine.persistence_dir, "state:", engine.state.value)

    # ===== edit / get =====
    user = await engine.edit_item("user:1", lambda _: {"name": "John", "age": 30})
    print("[edit] created:", user)
    user = await engine.edit_item("user:1", lambda u: {**u, "age": u["age"] + 1})
    print("[edit] birthday:", user)
    print("[get] user:1 ->", await engine.get_item("user:1"))
    print("[get] missing ->", await engine.get_item("user:2", {"name": "nobody"}))

    # ===== concurrent edits on one key are applied in order =====
    async def add(n):
        async def edit(total):
            await asyncio.sleep(0.01 * (5 - n))
            return total + n
        return await engine.edit_item("counter", edit, 0)

    print("[edit] counter steps:", await asyncio.gather(*(add(n) for n in range(1, 5))))

    # ===== guard against edit functions that forget to return =====
    try:
        await engine.edit_item("user:1", lambda u: u.update(age=99))
    except InvalidEditResult as e:
        print("[edit] rejected:", e)

    # ===== keys / delete / clear =====
    print("[keys]", sorted(await engine.list_keys()))
    await engine.delete_item("counter")
    await engine.delete_item("never-existed")
    print("[keys] after delete:", sorted(await engine.list_keys()))
    await engine.clear()
    print("[keys] after clear:", sorted(await engine.list_keys()))

    # ===== close =====
    await engine.close()
    print("[engine] state:", engine.state.value)
    try:
        await engine.edit_item("user:1", lambda _: {})
    except ClosedError as e:
        print("[edit] after close:", e)

    shutil.rmtree(tmp_dir, ignore_errors=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
