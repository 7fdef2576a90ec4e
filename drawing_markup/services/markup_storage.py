"""
MarkupStorage - File storage for saved drawing markups

Each save writes a new immutable record (JSON metadata + flattened PNG);
records are never overwritten, a correction is simply another record.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import Config
from ..models.markup_record import DrawingMarkupRecord, append_evidence

logger = logging.getLogger(__name__)

UNASSIGNED_FINDING = '_unassigned'


class MarkupStorage:
    """
    Manages markup record files on disk.

    File structure:
        markups/{finding_id}/
        ├── markup_3f2a....json   # Record metadata + annotation list
        ├── markup_3f2a....png    # Flattened image
        └── manifest.json         # Index of the finding's records
    """

    JSON_VERSION = "1.0"

    def __init__(self, base_path: Optional[Path] = None):
        if base_path is None:
            base_path = Config.get_markups_folder()
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    def get_finding_dir(self, finding_id: Optional[str]) -> Path:
        """Get directory for a finding's markups."""
        return self._base / Config.sanitize_file_name(finding_id or UNASSIGNED_FINDING)

    def get_record_path(self, finding_id: Optional[str], record_id: str) -> Path:
        """Get path for a record's JSON."""
        return self.get_finding_dir(finding_id) / f'{record_id}.json'

    def get_png_path(self, finding_id: Optional[str], record_id: str) -> Path:
        """Get path for a record's flattened PNG."""
        return self.get_finding_dir(finding_id) / f'{record_id}.png'

    def get_manifest_path(self, finding_id: Optional[str]) -> Path:
        return self.get_finding_dir(finding_id) / 'manifest.json'

    # ==================== Save/Load ====================

    def save_record(self, record: DrawingMarkupRecord) -> Path:
        """
        Persist a markup record.

        Usable directly as a session's evidence sink.

        Returns:
            Path to the record's JSON file

        Raises:
            FileExistsError: a record with the same id is already stored
            OSError: the files could not be written
        """
        json_path = self.get_record_path(record.finding_id, record.id)
        png_path = self.get_png_path(record.finding_id, record.id)

        if json_path.exists():
            raise FileExistsError(f"Markup record already stored: {record.id}")

        json_path.parent.mkdir(parents=True, exist_ok=True)

        data = record.to_metadata()
        data['version'] = self.JSON_VERSION
        data['png'] = png_path.name

        png_path.write_bytes(record.flattened_png)
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

        self._update_manifest(record.finding_id)
        logger.info("Stored markup %s (%d annotations) in %s", record.id, len(record.annotations), json_path.parent)
        return json_path

    def load_record(self, finding_id: Optional[str], record_id: str) -> Optional[DrawingMarkupRecord]:
        """Load a stored record, or None if missing or unreadable."""
        json_path = self.get_record_path(finding_id, record_id)
        if not json_path.exists():
            return None

        try:
            with open(json_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            png_path = json_path.parent / data.get('png', f'{record_id}.png')
            return DrawingMarkupRecord.from_metadata(data, png_path.read_bytes())
        except Exception as e:
            logger.error("Error loading markup %s: %s", record_id, e)
            return None

    def has_records(self, finding_id: Optional[str]) -> bool:
        finding_dir = self.get_finding_dir(finding_id)
        return finding_dir.exists() and any(finding_dir.glob('markup_*.json'))

    def list_records(self, finding_id: Optional[str]) -> List[DrawingMarkupRecord]:
        """All readable records for a finding, oldest first."""
        finding_dir = self.get_finding_dir(finding_id)
        if not finding_dir.exists():
            return []

        records = []
        for json_path in finding_dir.glob('markup_*.json'):
            record = self.load_record(finding_id, json_path.stem)
            if record is not None:
                records.append(record)

        records.sort(key=lambda r: (r.created_at, r.id))
        return records

    def evidence_for_finding(self, finding_id: Optional[str]) -> List[Dict[str, Any]]:
        """Evidence entries for every stored record of a finding."""
        evidence: List[Dict[str, Any]] = []
        for record in self.list_records(finding_id):
            evidence = append_evidence(evidence, record)
        return evidence

    # ==================== Manifest ====================

    def _update_manifest(self, finding_id: Optional[str]):
        """Rewrite the manifest for a finding."""
        finding_dir = self.get_finding_dir(finding_id)
        if not finding_dir.exists():
            return

        records = {}
        total_annotations = 0

        for json_path in finding_dir.glob('markup_*.json'):
            try:
                with open(json_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Skipping unreadable markup %s: %s", json_path.name, e)
                continue

            annotation_count = len(data.get('annotations', []))
            total_annotations += annotation_count

            records[json_path.stem] = {
                'json': json_path.name,
                'png': data.get('png', f'{json_path.stem}.png'),
                'drawing_name': data.get('drawing_name', ''),
                'created_at': data.get('created_at', ''),
                'annotation_count': annotation_count
            }

        manifest = {
            'version': self.JSON_VERSION,
            'finding_id': finding_id,
            'records': records,
            'total_records': len(records),
            'total_annotations': total_annotations
        }

        with open(self.get_manifest_path(finding_id), 'w', encoding='utf-8') as f:
            json.dump(manifest, f, indent=2)

    def get_manifest(self, finding_id: Optional[str]) -> Optional[Dict]:
        """Get manifest data for a finding."""
        path = self.get_manifest_path(finding_id)
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Cannot read manifest %s: %s", path, e)
            return None


# ==================== Singleton ====================

_storage_instance: Optional[MarkupStorage] = None


def get_markup_storage() -> MarkupStorage:
    """Get singleton MarkupStorage instance."""
    global _storage_instance
    if _storage_instance is None:
        _storage_instance = MarkupStorage()
    return _storage_instance


__all__ = [
    'MarkupStorage',
    'get_markup_storage',
]
