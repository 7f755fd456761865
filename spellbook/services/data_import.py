"""Seed import, reconciliation and data maintenance"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from spellbook.domain.app_settings import AppSettings, SETTINGS_KEY
from spellbook.exceptions import InitializationError, SpellbookError
from spellbook.interfaces.seed_source import ISeedDataSource
from spellbook.repositories.document_store import BUSINESS_KEYS, DocumentStore
from spellbook.utils.ids import now_iso, timestamp_ms

logger = logging.getLogger(__name__)

# Import order: reference data before the records that point at it
IMPORT_ORDER = ("models", "tags", "snippets", "formulas")

ACTION_IMPORTED = "imported"
ACTION_UPDATED = "updated"
ACTION_UNCHANGED = "unchanged"


@dataclass
class ImportResult:
    action: str
    inserted: Dict[str, int] = field(default_factory=dict)
    skipped: Dict[str, int] = field(default_factory=dict)
    version: Optional[Any] = None


def _version_key(version: Any) -> Tuple:
    """Numbers compare numerically; dotted strings ('1.2.10') part by part."""
    if isinstance(version, bool):
        return (1, str(version))
    if isinstance(version, (int, float)):
        return (0, (float(version),))
    text = str(version).strip()
    try:
        return (0, tuple(float(part) for part in text.split('.')))
    except ValueError:
        return (1, text)


def is_newer_version(seed_version: Any, stored_version: Any) -> bool:
    """True when the seed carries a version and it is strictly greater than the stored one."""
    if seed_version is None or seed_version == '':
        return False
    if stored_version is None or stored_version == '':
        return True
    seed_key, stored_key = _version_key(seed_version), _version_key(stored_version)
    if seed_key[0] != stored_key[0]:
        return False
    return seed_key > stored_key


class DataImportService:
    """
    Startup import of seed data plus on-demand maintenance.

    The Settings singleton (settingKey 'app_settings') records whether the
    seed was imported and at which version.
    """

    def __init__(self, store: DocumentStore, seed_source: ISeedDataSource):
        self.store = store
        self.seed_source = seed_source

    async def _load_settings(self) -> Optional[AppSettings]:
        doc = await self.store.settings.find_one({'settingKey': SETTINGS_KEY})
        return AppSettings.from_document(doc) if doc else None

    async def run(self) -> ImportResult:
        """
        Import seed data if needed.

        Raises:
            InitializationError: seed fetch, parse or store failure
        """
        try:
            stored = await self._load_settings()
            seed = await self.seed_source.fetch()
            if not isinstance(seed, dict):
                raise InitializationError("Seed data must be a JSON object")

            if stored is None:
                return await self.import_all(seed)

            if is_newer_version(seed.get('version'), stored.version):
                return await self.update_settings(stored, seed)

            logger.info(f"Seed data already imported (version {stored.version}), nothing to do")
            return ImportResult(action=ACTION_UNCHANGED, version=stored.version)
        except InitializationError:
            raise
        except (SpellbookError, ValueError, TypeError) as e:
            raise InitializationError(f"Data import failed: {e}") from e

    async def import_all(self, seed: Dict) -> ImportResult:
        """Insert every seed record whose business id is not stored yet, then write Settings."""
        result = ImportResult(action=ACTION_IMPORTED, version=seed.get('version'))

        for name in IMPORT_ORDER:
            business_key = BUSINESS_KEYS[name]
            collection = self.store.collection(name)
            inserted = skipped = 0
            for record in seed.get(name) or []:
                business_id = record.get(business_key)
                if business_id and await collection.find_one({business_key: business_id}):
                    skipped += 1
                    continue
                await collection.upsert(dict(record))
                inserted += 1
            result.inserted[name] = inserted
            result.skipped[name] = skipped
            logger.info(f"Imported {inserted} {name} ({skipped} already present)")

        value = dict(seed.get('settings') or {})
        value['initialized'] = True
        value['initDate'] = now_iso()
        if seed.get('version') is not None:
            value['version'] = seed['version']

        await self.store.settings.upsert(AppSettings(value=value, updated_at=now_iso()).to_document())
        logger.info(f"Seed import complete (version {seed.get('version')})")
        return result

    async def update_settings(self, stored: AppSettings, seed: Dict) -> ImportResult:
        """Merge the seed's settings into the stored ones; collections are left alone."""
        timestamp = now_iso()
        value = {**stored.value, **(seed.get('settings') or {})}
        value['version'] = seed['version']
        value['lastUpdated'] = timestamp

        updated = AppSettings(value=value, updated_at=timestamp, storage_id=stored.storage_id)
        await self.store.settings.upsert(updated.to_document())
        logger.info(f"Settings updated from version {stored.version} to {seed['version']}")
        return ImportResult(action=ACTION_UPDATED, version=seed['version'])

    async def deduplicate_collection(self, name: str, business_field: Optional[str] = None) -> int:
        """
        Keep only the most recently updated record per business id.

        Records without updatedAt count as oldest; records without a
        business id are left alone.

        Returns:
            Number of records removed
        """
        business_field = business_field or BUSINESS_KEYS[name]
        collection = self.store.collection(name)
        docs = await collection.find({})

        groups: Dict[str, List[Dict]] = {}
        for doc in docs:
            business_id = doc.get(business_field)
            if not business_id:
                logger.warning(f"{name}: record {doc.get('_id')} has no {business_field}, skipping")
                continue
            groups.setdefault(business_id, []).append(doc)

        removed = 0
        for business_id, group in groups.items():
            if len(group) < 2:
                continue
            group.sort(key=lambda d: timestamp_ms(d.get('updatedAt')), reverse=True)
            for duplicate in group[1:]:
                if await collection.remove(duplicate['_id']):
                    removed += 1
            logger.debug(f"{name}: kept newest of {len(group)} records for {business_id}")

        logger.info(f"{name}: removed {removed} duplicate records")
        return removed

    async def deduplicate_all(self) -> Dict[str, Optional[int]]:
        """Deduplicate each collection independently; a failing one reports None."""
        results: Dict[str, Optional[int]] = {}
        for name in IMPORT_ORDER:
            try:
                results[name] = await self.deduplicate_collection(name)
            except Exception as e:
                logger.error(f"Deduplication of {name} failed: {e}")
                results[name] = None
        return results

    async def reset(self) -> Dict[str, int]:
        """Remove every document, Settings included, so the next run() re-imports."""
        removed = {}
        for name, collection in self.store.all().items():
            count = 0
            for doc in await collection.find({}):
                if await collection.remove(doc['_id']):
                    count += 1
            removed[name] = count
        logger.warning(f"Store reset: {removed}")
        return removed

    async def export_snapshot(self) -> Dict[str, List[Dict]]:
        return {name: await collection.find({}) for name, collection in self.store.all().items()}

    async def validate_integrity(self) -> Dict[str, Any]:
        """Collection counts plus snippets whose tagIds point at no known tag."""
        counts = {name: len(await collection.find({})) for name, collection in self.store.all().items()}

        tag_keys = set()
        for doc in await self.store.tags.find({}):
            for key in (doc.get('tagId'), doc.get('slug'), doc.get('_id')):
                if key:
                    tag_keys.add(key)

        orphans = []
        for doc in await self.store.snippets.find({}):
            tag_ids = doc.get('tagIds') or []
            if not any(tag_id in tag_keys for tag_id in tag_ids):
                orphans.append({
                    'snippetId': doc.get('snippetId'),
                    'shortName': doc.get('shortName'),
                    'tagIds': tag_ids
                })

        if orphans:
            logger.warning(f"{len(orphans)} snippets reference no known tag")
        return {'counts': counts, 'orphanSnippets': orphans}
