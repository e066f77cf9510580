import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from errors import StorageError

INDEX_FILENAME = "planos_index.json"


class PlanIndex:
    """
    Documento único com o resumo de todos os planos de ação.

    Toda alteração é um read-modify-write do array inteiro, serializado por
    um lock e gravado via arquivo temporário + os.replace. O lock vale só
    para este processo.
    """

    def __init__(self, root):
        self.path = Path(root) / INDEX_FILENAME
        self._lock = threading.Lock()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._write([])

    def _read(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, encoding="utf-8") as f:
                entries = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"❌ Erro ao ler índice de planos: {e}")
            raise StorageError(str(e)) from e
        if not isinstance(entries, list):
            raise StorageError(f"{self.path.name} não contém uma lista")
        return entries

    def _write(self, entries: List[Dict[str, Any]]):
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error(f"❌ Erro ao gravar índice de planos: {e}")
            raise StorageError(str(e)) from e

    def load(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._read()

    def append(self, entry: Dict[str, Any]):
        with self._lock:
            entries = self._read()
            entries.append(entry)
            self._write(entries)

    def find_by_id(self, plano_id: str) -> Optional[Dict[str, Any]]:
        for entry in self.load():
            if entry.get("plano_id") == plano_id:
                return entry
        return None

    def update(self, plano_id: str, **changes) -> Optional[Dict[str, Any]]:
        """Atualiza a entrada no lugar; retorna None se o plano não existe."""
        with self._lock:
            entries = self._read()
            for entry in entries:
                if entry.get("plano_id") == plano_id:
                    entry.update(changes)
                    self._write(entries)
                    return entry
        return None
