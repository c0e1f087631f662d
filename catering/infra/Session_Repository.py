"""Session persistence: one JSON object mapping package id -> saved CurrentConfig."""
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from catering.infra.paths import SESSIONS_FILE

logger = logging.getLogger(__name__)


class SessionRepository:
    def __init__(self, path: Path = SESSIONS_FILE):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in sessions file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".sessions_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(data, tmp, ensure_ascii=False, indent=2)
            shutil.move(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def save(self, package_id: str, config: Dict[str, Any]) -> None:
        data = self._read_all()
        data[package_id] = config
        self._write_all(data)
        logger.info(f"Saved session for package {package_id}")

    def load(self, package_id: str) -> Optional[Dict[str, Any]]:
        return self._read_all().get(package_id)

    def delete(self, package_id: str) -> bool:
        data = self._read_all()
        if package_id not in data:
            return False
        del data[package_id]
        self._write_all(data)
        return True
