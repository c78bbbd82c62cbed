from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

logger = logging.getLogger(__name__)


@dataclass
class LocalStore:
    """Versioned JSON documents kept in the terminal's user data directory.

    Each key lives in its own ``<key>.json`` file wrapped in an envelope
    ``{"version": n, "saved_at": ..., "data": ...}``. A file whose version does
    not match what the caller expects, or that cannot be decoded, is discarded
    and reported as missing.
    """

    app_name: str = "tillpoint"
    base_dir: str | Path | None = None

    def root(self) -> Path:
        base = Path(self.base_dir) if self.base_dir else Path(user_data_dir(self.app_name, "Tillpoint"))
        base.mkdir(parents=True, exist_ok=True)
        return base

    def _path(self, key: str) -> Path:
        return self.root() / f"{key}.json"

    def save(self, key: str, version: int, data: Any) -> None:
        path = self._path(key)
        envelope = {
            "version": version,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "data": data,
        }
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(envelope, indent=2), encoding="utf-8")
        os.replace(tmp_path, path)
        try:
            path.chmod(0o600)
        except OSError:
            pass

    def load(self, key: str, version: int) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            envelope = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("local_store_corrupt", extra={"store_key": key})
            self.clear(key)
            return None
        if not isinstance(envelope, dict) or envelope.get("version") != version:
            logger.warning(
                "local_store_version_mismatch",
                extra={"store_key": key, "expected_version": version},
            )
            self.clear(key)
            return None
        return envelope.get("data")

    def clear(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()
