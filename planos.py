from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from deps import get_manager
from errors import InvalidStatus, MissingField, PlanForbidden, PlanNotFound
from lifecycle import PlanLifecycleManager
from schemas import PlanLookupResponse, PlanRequest

router = APIRouter(tags=["Planos de Ação"])


# ==================== CRIAÇÃO / CONCLUSÃO ====================

@router.post("/api/planos")
def criar_ou_concluir_plano(body: Optional[PlanRequest] = None, manager: PlanLifecycleManager = Depends(get_manager)):
    """Cria um plano (status ausente ou ABERTO) ou conclui um existente (status CONCLUIDO)."""
    try:
        return manager.submit(body.model_dump() if body else {})
    except (InvalidStatus, MissingField) as e:
        logger.warning(f"⚠️ Requisição de plano rejeitada: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PlanNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PlanForbidden as e:
        logger.warning(f"⚠️ Token inválido ao concluir {e.plano_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Erro inesperado no plano: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


# ==================== CONSULTA PÚBLICA ====================

@router.get("/api/planos/{plano_id}", response_model=PlanLookupResponse)
def consultar_plano(plano_id: str, token: Optional[str] = None,
                    manager: PlanLifecycleManager = Depends(get_manager)):
    try:
        entry = manager.lookup(plano_id, token)
    except PlanNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PlanForbidden as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Erro inesperado no plano: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return PlanLookupResponse(plano=entry)
