"""JSON blob files under DATA_DIR (save-data, load-data, UI settings)"""
import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from spellbook.config import settings
from spellbook.exceptions import NotFoundError, StoreError, ValidationError
from spellbook.implementations.seed_sources import read_seed_file
from spellbook.utils.ids import now_iso

logger = logging.getLogger(__name__)

FILENAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
SETTINGS_FILE = "settings"


def default_ui_settings() -> Dict[str, Any]:
    return {
        'theme': 'dark',
        'language': 'zh-CN',
        'autoSave': True,
        'maxSnippets': 500,
        'createdAt': now_iso()
    }


class DataFileService:
    """Reads and writes `<name>.json` files in the data directory"""

    def __init__(self, data_dir: Optional[Path] = None, seed_file: Optional[str] = None):
        self.data_dir = Path(data_dir) if data_dir else settings.data_path
        self.seed_file = seed_file or settings.SEED_FILE

    def _path(self, filename: str) -> Path:
        if not filename or not FILENAME_PATTERN.match(filename) or '..' in filename:
            raise ValidationError("filename", f"Invalid file name: {filename!r}")
        return self.data_dir / f"{filename}.json"

    def _read(self, path: Path) -> Any:
        with open(path, encoding='utf-8') as f:
            return json.load(f)

    def _write(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    async def load_init_data(self) -> Dict:
        path = self.data_dir / self.seed_file
        try:
            return await asyncio.to_thread(read_seed_file, path)
        except FileNotFoundError as e:
            raise NotFoundError(f"Seed file {path} does not exist") from e
        except (OSError, ValueError) as e:
            raise StoreError(f"Failed to read seed file {path}: {e}") from e

    async def save_data(self, filename: str, data: Any) -> str:
        """Write `data` to DATA_DIR/<filename>.json; returns the file name written."""
        if not filename:
            raise ValidationError("filename", "Both filename and data are required")
        if data is None or data == '':
            raise ValidationError("data", "Both filename and data are required")
        path = self._path(filename)
        try:
            await asyncio.to_thread(self._write, path, data)
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Failed to save {path.name}: {e}") from e
        logger.info(f"Saved data to {path.name}")
        return path.name

    async def load_data(self, filename: str) -> Any:
        path = self._path(filename)
        try:
            return await asyncio.to_thread(self._read, path)
        except FileNotFoundError as e:
            raise NotFoundError(f"File {path.name} does not exist") from e
        except (OSError, ValueError) as e:
            raise StoreError(f"Failed to read {path.name}: {e}") from e

    async def get_ui_settings(self) -> Tuple[Dict, bool]:
        """
        Stored UI settings, or defaults written on first read.

        Returns:
            (settings, is_default)
        """
        try:
            return await self.load_data(SETTINGS_FILE), False
        except NotFoundError:
            defaults = default_ui_settings()
            path = self._path(SETTINGS_FILE)
            try:
                await asyncio.to_thread(self._write, path, defaults)
            except OSError as e:
                raise StoreError(f"Failed to write default settings: {e}") from e
            logger.info("Created default UI settings")
            return defaults, True

    async def save_ui_settings(self, data: Dict) -> Dict:
        data = {**data, 'updatedAt': now_iso()}
        path = self._path(SETTINGS_FILE)
        try:
            await asyncio.to_thread(self._write, path, data)
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Failed to save settings: {e}") from e
        return data
