"""Seed data sources: local init.json or a remote backend's /api/init-data"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, Optional

import httpx

from spellbook.config import settings
from spellbook.exceptions import InitializationError
from spellbook.interfaces.seed_source import ISeedDataSource

logger = logging.getLogger(__name__)


def read_seed_file(path: Path) -> Dict:
    """
    Read and decode a seed JSON file.

    Raises:
        FileNotFoundError: the file does not exist
        ValueError: the content is not a JSON object
    """
    with open(path, encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


class FileSeedDataSource(ISeedDataSource):
    """Reads seed data from DATA_DIR/init.json"""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else settings.seed_path

    async def fetch(self) -> Dict:
        try:
            data = await asyncio.to_thread(read_seed_file, self.path)
        except (OSError, ValueError) as e:
            raise InitializationError(f"Cannot read seed data from {self.path}: {e}") from e
        logger.info(f"Loaded seed data from {self.path}")
        return data


class HttpSeedDataSource(ISeedDataSource):
    """Fetches seed data from another backend's /api/init-data ({success, data} envelope)"""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    async def fetch(self) -> Dict:
        url = f"{self.base_url}/api/init-data"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"❌ Failed to fetch seed data from {url}: {e}")
            raise InitializationError(f"Cannot fetch seed data from {url}: {e}") from e
        except ValueError as e:
            raise InitializationError(f"Seed data from {url} is not valid JSON") from e

        if not isinstance(payload, dict) or not payload.get('success') or not isinstance(payload.get('data'), dict):
            raise InitializationError(f"Unexpected seed data response from {url}")

        logger.info(f"Fetched seed data from {url}")
        return payload['data']
