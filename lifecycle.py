import secrets
from typing import Any, Dict, Optional, Union
from urllib.parse import quote, urlencode

from loguru import logger

from config import Settings
from errors import MissingField, PlanForbidden, PlanNotFound
from notifications import NotificationDispatcher
from plan_index import PlanIndex
from schemas import PlanClosedResponse, PlanCreatedResponse, PlanStatus
from storage import RecordStore, agora_utc, carimbo_arquivo, iso_ms

PRIORIDADE_PADRAO = "Alta"

CAMPOS_PLANO = (
    "origem", "secao", "indicador", "unidade", "ref_mes",
    "responsavel_nome", "responsavel_email", "prazo", "acao",
)
CAMPOS_INDICE = (
    "plano_id", "token", "criado_em", "empresaID", "origem", "secao", "indicador",
    "unidade", "ref_mes", "responsavel_nome", "responsavel_email", "status",
)
CAMPOS_CONTROLE = {"plano_id", "token", "status"}


def gerar_plano_id(momento=None) -> str:
    """PA-<timestamp>-<6 hex>"""
    return f"PA-{carimbo_arquivo(momento or agora_utc())}-{secrets.token_hex(3)}"


def gerar_token() -> str:
    return secrets.token_hex(16)


class PlanLifecycleManager:
    """Cria, consulta e conclui planos de ação."""

    def __init__(self, settings: Settings, store: RecordStore, index: PlanIndex,
                 dispatcher: NotificationDispatcher):
        self.settings = settings
        self.store = store
        self.index = index
        self.dispatcher = dispatcher

    # ==================== LINKS ====================

    def _query(self, plano_id: str, token: str, **context) -> str:
        params = {"plano_id": plano_id, "token": token}
        params.update({k: v for k, v in context.items() if v is not None})
        return urlencode(params, quote_via=quote)

    def build_link(self, plano_id: str, token: str, **context) -> str:
        return f"{self.settings.front_base}/radar-acao.html?{self._query(plano_id, token, **context)}"

    def build_fragment_link(self, plano_id: str, token: str, **context) -> str:
        return f"{self.settings.front_base}/radar-acao.html#{self._query(plano_id, token, **context)}"

    # ==================== OPERAÇÕES ====================

    def submit(self, data: Dict[str, Any]) -> Union[PlanCreatedResponse, PlanClosedResponse]:
        status = PlanStatus.parse(data.get("status"))
        if status == PlanStatus.CONCLUIDO:
            return self.close(data)
        return self.create(data)

    def create(self, data: Dict[str, Any]) -> PlanCreatedResponse:
        momento = agora_utc()
        plano_id = gerar_plano_id(momento)
        token = gerar_token()
        empresa_id = self.settings.resolve_empresa_id(data.get("empresaID"))

        plano = {
            "plano_id": plano_id,
            "token": token,
            "criado_em": iso_ms(momento),
            "empresaID": empresa_id,
        }
        for campo in CAMPOS_PLANO:
            plano[campo] = data.get(campo) or None
        plano["prioridade"] = data.get("prioridade") or PRIORIDADE_PADRAO
        plano["status"] = PlanStatus.ABERTO.value

        stored = self.store.store("plano", plano)
        self.index.append({campo: plano.get(campo) for campo in CAMPOS_INDICE})
        logger.info(f"✅ Plano criado: {plano_id} ({empresa_id})")

        link = self.build_link(plano_id, token, empresaID=empresa_id)
        template = dict(plano)
        template["link"] = link
        template["link_alternativo"] = self.build_fragment_link(plano_id, token, empresaID=empresa_id)
        outcome = self.dispatcher.notify(plano["responsavel_email"], template)

        return PlanCreatedResponse(
            stored=stored,
            plano_id=plano_id,
            token=token,
            link=link,
            email_status=outcome.status_string,
            empresaID=empresa_id,
        )

    def lookup(self, plano_id: str, token: Optional[str] = None) -> Dict[str, Any]:
        entry = self.index.find_by_id(plano_id)
        if entry is None:
            raise PlanNotFound(plano_id)
        if token is not None and entry.get("token") != token:
            raise PlanForbidden(plano_id)
        return entry

    def close(self, data: Dict[str, Any]) -> PlanClosedResponse:
        plano_id = data.get("plano_id")
        if not plano_id:
            raise MissingField("plano_id")
        entry = self.lookup(plano_id, data.get("token") or "")

        concluido_em = iso_ms(agora_utc())
        registro = {k: v for k, v in entry.items() if k != "token"}
        registro.update({
            k: v for k, v in data.items()
            if k not in CAMPOS_CONTROLE and k not in entry and v is not None
        })
        registro["status"] = PlanStatus.CONCLUIDO.value
        registro["concluido_em"] = concluido_em

        stored = self.store.store("plano_close", registro)
        self.index.update(plano_id, status=PlanStatus.CONCLUIDO.value, concluido_em=concluido_em)
        logger.info(f"✅ Plano concluído: {plano_id}")

        return PlanClosedResponse(
            stored=stored,
            plano_id=plano_id,
            status=PlanStatus.CONCLUIDO,
            concluido_em=concluido_em,
            empresaID=entry.get("empresaID"),
        )
