import unicodedata
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from errors import InvalidStatus


class PlanStatus(str, Enum):
    """Estados possíveis de um plano de ação."""
    ABERTO = "ABERTO"
    CONCLUIDO = "CONCLUIDO"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["PlanStatus"]:
        """Aceita variações de caixa e acento ("concluído"); rejeita o resto."""
        if value is None or str(value).strip() == "":
            return None
        normalizado = unicodedata.normalize("NFKD", str(value).strip())
        normalizado = "".join(c for c in normalizado if not unicodedata.combining(c)).upper()
        try:
            return cls(normalizado)
        except ValueError:
            raise InvalidStatus(value, [s.value for s in cls])


# ==================== SCHEMAS DE PLANO ====================

class PlanRequest(BaseModel):
    """Corpo de POST /api/planos: cria um plano ou conclui um existente."""
    empresaID: Optional[Any] = None
    origem: Optional[Any] = Field(None, description="Ambiente | Psicossocial | Liderança & Gestão | RH")
    secao: Optional[Any] = None
    indicador: Optional[Any] = Field(None, description="Texto da pergunta")
    unidade: Optional[Any] = None
    ref_mes: Optional[Any] = Field(None, description="YYYY-MM")
    responsavel_nome: Optional[Any] = None
    responsavel_email: Optional[Any] = None
    prazo: Optional[Any] = None
    prioridade: Optional[Any] = None
    acao: Optional[Any] = None
    status: Optional[str] = Field(None, description="ABERTO (padrão) ou CONCLUIDO")
    plano_id: Optional[str] = None
    token: Optional[str] = None

    class Config:
        extra = "allow"


# ==================== SCHEMAS DO SAFETY VOICE ====================

class VoiceCreate(BaseModel):
    """Relato anônimo do canal Safety Voice."""
    empresaID: Optional[Any] = None
    meta: Optional[Any] = Field(None, description="{unidade, ref_mes}")
    unidade: Optional[Any] = None
    ref_mes: Optional[Any] = None
    tipo: Optional[Any] = Field(None, description="Positivo / Negativo")
    categoria: Optional[Any] = Field(None, description="Ambiente, EPI, Liderança, Assédio...")
    descricao: Optional[Any] = None
    elogio_para: Optional[Any] = None
    status: Optional[Any] = Field(None, description="ABERTO / EM ANÁLISE / ENCERRADO")
    virou_plano: Optional[Any] = False
    plano_id: Optional[Any] = None


# ==================== SCHEMAS DE RESPOSTA ====================

class PlanCreatedResponse(BaseModel):
    ok: bool = True
    type: str = "created"
    stored: str
    plano_id: str
    token: str
    link: str
    email_status: str
    empresaID: Optional[Any] = None


class PlanClosedResponse(BaseModel):
    ok: bool = True
    type: str = "closed"
    stored: str
    plano_id: str
    status: PlanStatus
    concluido_em: str
    empresaID: Optional[Any] = None


class PlanLookupResponse(BaseModel):
    ok: bool = True
    plano: Any
