from collections import Counter
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from calculo import coletar_notas, resumo_notas
from deps import get_index, get_store
from errors import InvalidStatus
from plan_index import PlanIndex
from schemas import PlanStatus
from storage import TIPOS_REGISTRO, RecordStore

router = APIRouter(tags=["Analytics"])

FORMULARIOS_RESPOSTAS = ("ambiente", "psicossocial", "lideranca")


def _do_tenant(data, empresa_id: Optional[str]) -> bool:
    return not empresa_id or (isinstance(data, dict) and data.get("empresaID") == empresa_id)


# ================= ANALYTICS ENDPOINTS =================

@router.get("/api/respostas")
def listar_respostas(
    form: str,
    limit: int = Query(200, ge=1, le=5000),
    empresaID: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    """
    Respostas mais recentes de um formulário, da mais nova para a mais antiga.
    """
    if form not in FORMULARIOS_RESPOSTAS:
        raise HTTPException(
            status_code=400,
            detail={"error": f"form_invalid: {form}", "allowed": list(FORMULARIOS_RESPOSTAS)},
        )
    try:
        registros = store.list(form, newest_first=True)
    except Exception as e:
        logger.error(f"❌ Erro ao ler dados: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

    itens = [
        {"file": r.file, "data": r.data}
        for r in registros if _do_tenant(r.data, empresaID)
    ][:limit]
    return {"ok": True, "form": form, "total": len(itens), "itens": itens}


@router.get("/api/planos")
def listar_planos(
    limit: int = Query(1000, ge=1, le=10000),
    empresaID: Optional[str] = None,
    status: Optional[str] = None,
    index: PlanIndex = Depends(get_index),
):
    """
    Resumo dos planos (mais recentes primeiro). O token não é exposto aqui.
    """
    filtro_status = None
    if status:
        try:
            filtro_status = PlanStatus.parse(status)
        except InvalidStatus as e:
            raise HTTPException(status_code=400, detail=str(e))
    try:
        entries = index.load()
    except Exception as e:
        logger.error(f"❌ Erro ao ler dados: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

    planos = []
    for entry in reversed(entries):
        if not _do_tenant(entry, empresaID):
            continue
        if filtro_status and entry.get("status") != filtro_status.value:
            continue
        planos.append({k: v for k, v in entry.items() if k != "token"})
        if len(planos) >= limit:
            break
    return {"ok": True, "total": len(planos), "planos": planos}


@router.get("/api/summary")
def resumo_geral(
    empresaID: Optional[str] = None,
    store: RecordStore = Depends(get_store),
    index: PlanIndex = Depends(get_index),
):
    """
    Retorna contagens por categoria, situação dos planos e média das notas por formulário.
    """
    try:
        contagens = {}
        scores = {}
        for tipo in TIPOS_REGISTRO:
            registros = [r for r in store.list(tipo) if _do_tenant(r.data, empresaID)]
            contagens[tipo] = len(registros)
            if tipo in FORMULARIOS_RESPOSTAS:
                notas = []
                for registro in registros:
                    notas.extend(coletar_notas(registro.data))
                scores[tipo] = resumo_notas(notas)

        entries = [e for e in index.load() if _do_tenant(e, empresaID)]
    except Exception as e:
        logger.error(f"❌ Erro ao ler dados: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

    por_status = Counter(e.get("status") for e in entries)
    return {
        "ok": True,
        "empresaID": empresaID,
        "contagens": contagens,
        "planos": {
            "total": len(entries),
            "abertos": por_status.get(PlanStatus.ABERTO.value, 0),
            "concluidos": por_status.get(PlanStatus.CONCLUIDO.value, 0),
        },
        "scores": scores,
    }
