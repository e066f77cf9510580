import json
import re
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import pytest

from errors import InvalidStatus, MissingField, PlanForbidden, PlanNotFound
from lifecycle import PlanLifecycleManager, gerar_plano_id, gerar_token
from notifications import DeliveryOutcome

PLANO_ID_RE = re.compile(r"^PA-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z-[0-9a-f]{6}$")


def test_formato_de_id_e_token():
    assert PLANO_ID_RE.match(gerar_plano_id())
    assert re.fullmatch(r"[0-9a-f]{32}", gerar_token())


def test_ids_unicos_em_sequencia(manager):
    ids = {manager.create({"origem": "Ambiente"}).plano_id for _ in range(50)}
    assert len(ids) == 50


def test_create_persiste_registro_e_indice(manager, store, index):
    criado = manager.create({"origem": "Ambiente", "unidade": "Planta SC", "responsavel_email": ""})

    assert criado.ok is True
    assert criado.type == "created"
    assert PLANO_ID_RE.match(criado.plano_id)
    assert criado.email_status == "skipped"
    assert criado.empresaID == "empresa-demo-1"

    with open(criado.stored, encoding="utf-8") as f:
        plano = json.load(f)
    assert plano["plano_id"] == criado.plano_id
    assert plano["token"] == criado.token
    assert plano["prioridade"] == "Alta"
    assert plano["status"] == "ABERTO"
    assert plano["secao"] is None
    assert plano["responsavel_email"] is None

    entry = index.find_by_id(criado.plano_id)
    assert entry["token"] == criado.token
    assert entry["unidade"] == "Planta SC"
    assert "acao" not in entry


def test_link_carrega_id_e_token(manager):
    criado = manager.create({"origem": "RH", "empresaID": "acme & cia"})
    url = urlparse(criado.link)
    assert url.path.endswith("/radar-acao.html")
    query = parse_qs(url.query)
    assert query["plano_id"] == [criado.plano_id]
    assert query["token"] == [criado.token]
    assert query["empresaID"] == ["acme & cia"]


def test_lookup(manager):
    criado = manager.create({"origem": "Liderança"})

    assert manager.lookup(criado.plano_id)["token"] == criado.token
    assert manager.lookup(criado.plano_id, criado.token)["plano_id"] == criado.plano_id
    with pytest.raises(PlanForbidden):
        manager.lookup(criado.plano_id, "errado")
    with pytest.raises(PlanNotFound):
        manager.lookup("PA-inexistente")


def test_close_atualiza_indice_e_grava_evento(manager, store, index):
    criado = manager.create({"origem": "Ambiente", "unidade": "Planta SC"})

    fechado = manager.submit({
        "plano_id": criado.plano_id,
        "token": criado.token,
        "status": "concluído",
        "evidencia": "foto.jpg",
    })

    assert fechado.type == "closed"
    assert fechado.status.value == "CONCLUIDO"
    assert index.find_by_id(criado.plano_id)["status"] == "CONCLUIDO"

    eventos = store.list("plano_close")
    assert len(eventos) == 1
    assert eventos[0].data["evidencia"] == "foto.jpg"
    assert eventos[0].data["unidade"] == "Planta SC"
    assert "token" not in eventos[0].data
    # o registro original não é alterado
    assert store.list("plano")[0].data["status"] == "ABERTO"


def test_close_exige_token(manager, store):
    criado = manager.create({"origem": "Ambiente"})
    with pytest.raises(PlanForbidden):
        manager.close({"plano_id": criado.plano_id})
    with pytest.raises(PlanForbidden):
        manager.close({"plano_id": criado.plano_id, "token": "x" * 32})
    assert store.list("plano_close") == []


def test_close_sem_plano_id(manager):
    with pytest.raises(MissingField):
        manager.submit({"status": "CONCLUIDO"})


def test_close_plano_inexistente(manager):
    with pytest.raises(PlanNotFound):
        manager.submit({"status": "CONCLUIDO", "plano_id": "PA-x", "token": "t"})


def test_status_fora_do_conjunto(manager):
    with pytest.raises(InvalidStatus):
        manager.submit({"status": "quase concluído"})


def test_falha_de_email_nao_impede_criacao(settings, store, index):
    dispatcher = MagicMock()
    dispatcher.notify.return_value = DeliveryOutcome.failed("Connection refused")
    manager = PlanLifecycleManager(settings, store, index, dispatcher)

    criado = manager.create({"responsavel_email": "x@y.com", "origem": "RH"})

    assert criado.email_status == "failed:Connection refused"
    recipient, template = dispatcher.notify.call_args[0]
    assert recipient == "x@y.com"
    assert template["link"] == criado.link
    assert "#plano_id=" in template["link_alternativo"]
