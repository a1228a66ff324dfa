"""
Integration tests for the full temporary entry lifecycle.

These exercise the public package API against the real filesystem, from
the first allocation through cleanup and simulated process exit.
"""

import asyncio
import os
from unittest.mock import Mock

import pytest

from tmpdir_manager import TmpDir, get_base_dir, get_service, get_temp_name


class TestLifecycle:
    """End-to-end lifecycle scenarios."""

    @pytest.mark.asyncio
    async def test_concurrent_managers_share_one_base_dir(self, service, tmp_root):
        managers = [TmpDir(f"worker-{i}") for i in range(5)]

        paths = await asyncio.gather(*(manager.create_temp_dir() for manager in managers))

        base_dir = get_base_dir()
        assert {os.path.dirname(path) for path in paths} == {base_dir}
        assert os.listdir(tmp_root) == [os.path.basename(base_dir)]
        assert len(service.registry) == 5

        for manager in managers:
            await manager.cleanup()

        assert not os.path.exists(base_dir)
        assert get_base_dir() is None
        assert os.listdir(tmp_root) == []

    @pytest.mark.asyncio
    async def test_exit_disabled_leaves_files(self, service, disable_exit_cleanup):
        manager = TmpDir("kept")
        path = await manager.get_temp_file({"suffix": ".txt"})
        with open(path, "w") as f:
            f.write("keep me")
        base_dir = get_base_dir()

        assert service.trigger_exit() is None

        assert os.path.exists(path)
        assert os.path.isdir(base_dir)

    @pytest.mark.asyncio
    async def test_graceful_exit(self, service):
        manager = TmpDir("graceful")
        work_dir = await manager.create_temp_dir()
        with open(os.path.join(work_dir, "output.bin"), "wb") as f:
            f.write(b"\0" * 16)
        base_dir = get_base_dir()
        callback = Mock()

        await service.trigger_exit(callback)

        callback.assert_called_once_with()
        assert not os.path.exists(base_dir)
        assert manager.temp_files == []

    @pytest.mark.asyncio
    async def test_forced_exit(self, service):
        manager = TmpDir("forced")
        path = await manager.get_temp_file()
        open(path, "w").close()
        base_dir = get_base_dir()

        service.trigger_exit()

        assert not os.path.exists(base_dir)

    @pytest.mark.asyncio
    async def test_external_deletion_is_tolerated(self, service, caplog):
        manager = TmpDir("raced")
        await TmpDir("other").get_temp_file()
        dir_path = await manager.create_temp_dir()
        file_path = await manager.get_temp_file()
        open(file_path, "w").close()

        os.rmdir(dir_path)
        os.unlink(file_path)
        await manager.cleanup()

        assert "Cannot delete" not in caplog.text
        assert manager not in get_service().registry

    def test_temp_names_unique(self):
        assert len({get_temp_name("x") for _ in range(500)}) == 500
