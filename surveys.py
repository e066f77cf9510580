from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from loguru import logger

from config import Settings
from deps import get_settings, get_store
from schemas import PlanStatus, VoiceCreate
from storage import CATEGORIAS_FORMULARIO, TIPOS_REGISTRO, RecordStore, agora_utc, iso_ms

router = APIRouter(tags=["Radar"])


def _gravar(store: RecordStore, kind: str, body: Dict[str, Any]) -> str:
    try:
        return store.store(kind, body)
    except Exception as e:
        logger.error(f"❌ Erro ao gravar {kind}: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


# ==================== SAFETY VOICE (CANAL ANÔNIMO) ====================

@router.post("/api/radar/voice")
def registrar_voice(
    relato: Optional[VoiceCreate] = None,
    settings: Settings = Depends(get_settings),
    store: RecordStore = Depends(get_store),
):
    relato = relato or VoiceCreate()
    agora = iso_ms(agora_utc())
    meta = relato.meta if isinstance(relato.meta, dict) else {}
    registro = {
        "empresaID": settings.resolve_empresa_id(relato.empresaID),
        "criado_em": agora,
        "meta": {
            "unidade": meta.get("unidade") or relato.unidade,
            "ref_mes": meta.get("ref_mes") or relato.ref_mes or agora[:7],
        },
        "tipo": relato.tipo or "Nao informado",
        "categoria": relato.categoria or "Não classificado",
        "descricao": relato.descricao,
        "elogio_para": relato.elogio_para,
        "origem": "Safety Voice",
        "status": relato.status or PlanStatus.ABERTO.value,
        "virou_plano": relato.virou_plano or False,
        "plano_id": relato.plano_id,
    }
    stored = _gravar(store, "voice", registro)
    logger.info(f"✅ Relato Safety Voice registrado ({registro['empresaID']})")
    return {"ok": True, "stored": stored, "empresaID": registro["empresaID"]}


# ==================== FORMULÁRIOS (AMB, PSICO, LIDERANÇA, RH, RAIO-X) ====================

@router.post("/api/radar/{categoria}")
def enviar_resposta(
    categoria: str,
    resposta: Optional[Dict[str, Any]] = Body(None),
    settings: Settings = Depends(get_settings),
    store: RecordStore = Depends(get_store),
):
    if categoria not in CATEGORIAS_FORMULARIO:
        raise HTTPException(status_code=404, detail=f"Formulário desconhecido: {categoria}")

    body = dict(resposta or {})
    body["empresaID"] = settings.resolve_empresa_id(body.get("empresaID"))
    stored = _gravar(store, categoria, body)
    logger.info(f"✅ Resposta {categoria} recebida ({body['empresaID']})")
    return {"ok": True, "stored": stored, "empresaID": body["empresaID"]}


# ==================== LISTAGEM PARA DASHBOARD ====================

@router.get("/api/listar")
def listar(
    tipo: Optional[str] = None,
    empresaID: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    if not tipo:
        raise HTTPException(
            status_code=400,
            detail={"error": "tipo_required", "hint": "use ?tipo=psicossocial"},
        )
    if tipo not in TIPOS_REGISTRO:
        raise HTTPException(
            status_code=400,
            detail={"error": f"tipo_invalid: {tipo}", "allowed": list(TIPOS_REGISTRO)},
        )

    try:
        registros = store.list(tipo)
    except Exception as e:
        logger.error(f"❌ Erro ao listar {tipo}: {str(e)}")
        raise HTTPException(status_code=500, detail={"error": "read_error", "message": str(e)})

    itens = []
    for registro in registros:
        item = {"file": registro.file}
        if isinstance(registro.data, dict):
            item.update(registro.data)
        else:
            item["data"] = registro.data
        if empresaID and item.get("empresaID") != empresaID:
            continue
        itens.append(item)

    return {
        "ok": True,
        "tipo": tipo,
        "empresaID": empresaID,
        "total": len(itens),
        "itens": itens,
    }
