"""Tests for JSON blob files in the data directory."""
import json

import pytest

from spellbook.exceptions import NotFoundError, StoreError, ValidationError
from spellbook.services.data_file_service import DataFileService


@pytest.fixture
def service(tmp_path):
    return DataFileService(data_dir=tmp_path, seed_file="init.json")


@pytest.mark.asyncio
async def test_save_then_load(service, tmp_path):
    data = {"favorites": ["f1"], "note": "橘猫"}

    written = await service.save_data("backup-2024", data)

    assert written == "backup-2024.json"
    assert await service.load_data("backup-2024") == data
    assert "橘猫" in (tmp_path / "backup-2024.json").read_text(encoding="utf-8")


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [0, False, [], {}])
async def test_save_accepts_falsy_values_other_than_empty(service, data):
    await service.save_data("value", data)

    assert await service.load_data("value") == data


@pytest.mark.asyncio
@pytest.mark.parametrize("filename, data, field", [
    ("", {"a": 1}, "filename"),
    (None, {"a": 1}, "filename"),
    ("blob", None, "data"),
    ("blob", "", "data"),
])
async def test_save_requires_filename_and_data(service, filename, data, field):
    with pytest.raises(ValidationError) as exc_info:
        await service.save_data(filename, data)

    assert exc_info.value.field == field


@pytest.mark.asyncio
@pytest.mark.parametrize("filename", ["../etc/passwd", "a/b", ".hidden", "a..b"])
async def test_rejects_unsafe_filenames(service, filename):
    with pytest.raises(ValidationError):
        await service.load_data(filename)


@pytest.mark.asyncio
async def test_load_missing_file(service):
    with pytest.raises(NotFoundError):
        await service.load_data("nothing-here")


@pytest.mark.asyncio
async def test_load_corrupt_file(service, tmp_path):
    (tmp_path / "broken.json").write_text("{nope", encoding="utf-8")

    with pytest.raises(StoreError):
        await service.load_data("broken")


@pytest.mark.asyncio
async def test_load_init_data(service, tmp_path, sample_seed):
    with pytest.raises(NotFoundError):
        await service.load_init_data()

    (tmp_path / "init.json").write_text(json.dumps(sample_seed), encoding="utf-8")

    assert await service.load_init_data() == sample_seed


@pytest.mark.asyncio
async def test_ui_settings_defaults_written_on_first_read(service, tmp_path):
    data, is_default = await service.get_ui_settings()

    assert is_default is True
    assert data["theme"] == "dark"
    assert data["maxSnippets"] == 500
    assert (tmp_path / "settings.json").exists()

    again, is_default = await service.get_ui_settings()
    assert is_default is False
    assert again == data


@pytest.mark.asyncio
async def test_save_ui_settings_stamps_updated_at(service):
    saved = await service.save_ui_settings({"theme": "light"})

    assert saved["theme"] == "light"
    assert saved["updatedAt"].endswith("Z")
    data, is_default = await service.get_ui_settings()
    assert is_default is False
    assert data == saved
