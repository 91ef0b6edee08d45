"""Filesystem-backed blob, parameter and record stores."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from .detector import detect_media_type
from .errors import InvalidEvent, SourceNotFound

logger = logging.getLogger(__name__)


def _resolve_within(root: Path, key: str) -> Path:
    target = (root / key).resolve()
    root_real = root.resolve()
    if root_real not in target.parents:
        raise InvalidEvent(f"Key {key!r} does not name an object under {root}")
    return target


class LocalBlobStore:
    """Reads source objects from one directory and writes outputs to another."""

    def __init__(self, source_dir: Path, output_dir: Optional[Path] = None) -> None:
        self._source_dir = Path(source_dir)
        self._output_dir = Path(output_dir) if output_dir is not None else self._source_dir

    def read(self, key: str) -> Tuple[bytes, str]:
        path = _resolve_within(self._source_dir, key)
        if not path.is_file():
            raise SourceNotFound(f"No source object stored under {key!r}")
        data = path.read_bytes()
        media_type = detect_media_type(data, path.name)
        logger.info("Read %s (%s bytes, %s)", key, len(data), media_type)
        return data, media_type

    def write(self, key: str, data: bytes, content_type: str) -> None:
        path = _resolve_within(self._output_dir, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Wrote %s (%s, %s bytes)", path, content_type, len(data))


class FileParameterStore:
    """Serves the extraction prompt from a text file; missing means empty."""

    def __init__(self, path: Optional[Path]) -> None:
        self._path = Path(path) if path else None

    def get_prompt(self) -> str:
        if self._path is None or not self._path.exists():
            return ""
        return self._path.read_text(encoding="utf-8").strip()


class JsonRecordStore:
    """Stores one JSON record per source key, overwriting earlier runs."""

    def __init__(self, records_dir: Path) -> None:
        self._records_dir = Path(records_dir)

    def _record_path(self, key: str) -> Path:
        return self._records_dir / f"{quote(key.strip(), safe='')}.json"

    def put(self, key: str, attributes: Dict[str, str]) -> None:
        self._records_dir.mkdir(parents=True, exist_ok=True)
        payload = {
            "key": key,
            "attributes": attributes,
        }
        path = self._record_path(key)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("Stored record for %s at %s", key, path)

    def get(self, key: str) -> Optional[Dict[str, str]]:
        path = self._record_path(key)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Record for %s at %s is not valid JSON", key, path)
            return None
        return dict(payload.get("attributes") or {})


__all__ = ["FileParameterStore", "JsonRecordStore", "LocalBlobStore"]
