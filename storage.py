import itertools
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, NamedTuple, Optional

from loguru import logger

from errors import StorageError

# ==================== VOCABULÁRIO ====================

CATEGORIAS_FORMULARIO = ("ambiente", "psicossocial", "lideranca", "rh", "raiox")
TIPOS_REGISTRO = CATEGORIAS_FORMULARIO + ("voice", "plano", "plano_close")


class StoredRecord(NamedTuple):
    file: str
    data: Any


# ==================== TIMESTAMPS ====================

def agora_utc() -> datetime:
    return datetime.now(timezone.utc)


def iso_ms(momento: datetime) -> str:
    """ISO-8601 em UTC com milissegundos, ex.: 2026-10-17T12:34:56.789Z"""
    momento = momento.astimezone(timezone.utc)
    return momento.strftime("%Y-%m-%dT%H:%M:%S.") + f"{momento.microsecond // 1000:03d}Z"


def carimbo_arquivo(momento: datetime) -> str:
    return iso_ms(momento).replace(":", "-").replace(".", "-")


# ==================== RECORD STORE ====================

class RecordStore:
    """Grava cada payload em um arquivo JSON próprio: <tipo>-<timestamp>.json"""

    def __init__(self, root):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _validar_tipo(self, kind: str):
        if kind not in TIPOS_REGISTRO:
            raise ValueError(f"Tipo de registro desconhecido: {kind}")

    def store(self, kind: str, payload: Any) -> str:
        self._validar_tipo(kind)
        conteudo = json.dumps(payload, indent=2, ensure_ascii=False)
        carimbo = carimbo_arquivo(agora_utc())

        caminho = self.root / f"{kind}-{carimbo}.json"
        for seq in itertools.count(1):
            try:
                handle = open(caminho, "x", encoding="utf-8")
                break
            except FileExistsError:
                # mesmo milissegundo: "_001" ordena depois de ".json"
                caminho = self.root / f"{kind}-{carimbo}_{seq:03d}.json"
            except OSError as e:
                logger.error(f"❌ Erro ao criar {caminho}: {e}")
                raise StorageError(str(e)) from e

        try:
            with handle:
                handle.write(conteudo)
        except OSError as e:
            logger.error(f"❌ Erro ao gravar {caminho}: {e}")
            caminho.unlink(missing_ok=True)
            raise StorageError(str(e)) from e

        return str(caminho)

    def list(self, kind: str, newest_first: bool = False,
             limit: Optional[int] = None) -> List[StoredRecord]:
        self._validar_tipo(kind)
        try:
            nomes = sorted(
                nome for nome in os.listdir(self.root)
                if nome.startswith(kind + "-") and nome.endswith(".json")
            )
        except OSError as e:
            logger.error(f"❌ Erro ao listar {self.root}: {e}")
            raise StorageError(str(e)) from e

        if newest_first:
            nomes.reverse()

        registros = []
        for nome in nomes:
            if limit is not None and len(registros) >= limit:
                break
            try:
                with open(self.root / nome, encoding="utf-8") as f:
                    registros.append(StoredRecord(nome, json.load(f)))
            except (OSError, ValueError) as e:
                logger.warning(f"⚠️ Ignorando arquivo ilegível {nome}: {e}")
        return registros
