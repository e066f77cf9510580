import sys

from config import Settings
from lifecycle import PlanLifecycleManager
from notifications import NotificationDispatcher
from plan_index import PlanIndex
from storage import RecordStore

RESPOSTAS_EXEMPLO = {
    "ambiente": [8, 7, 9, 6, 8],
    "psicossocial": [5, 6, 4, 7, 6],
    "lideranca": [7, 8, 8, 6, 9],
}


def seed(settings: Settings) -> dict:
    """Popula o diretório de dados com respostas, um relato e um plano de exemplo."""
    store = RecordStore(settings.data_dir)
    index = PlanIndex(settings.data_dir)
    empresa_id = settings.empresa_id_padrao

    # 1. Respostas dos formulários (5 colaboradores por formulário)
    for form, notas in RESPOSTAS_EXEMPLO.items():
        for i, nota in enumerate(notas, start=1):
            store.store(form, {
                "empresaID": empresa_id,
                "unidade": "Planta SC",
                "colaborador": i,
                "respostas": {"q1": nota, "q2": max(nota - 1, 0), "q3": min(nota + 1, 10)},
            })
    print("✅ Respostas criadas")

    # 2. Relato do Safety Voice
    store.store("voice", {
        "empresaID": empresa_id,
        "meta": {"unidade": "Planta SC", "ref_mes": "2025-01"},
        "tipo": "Negativo",
        "categoria": "EPI",
        "descricao": "Falta de luvas no setor de corte",
        "elogio_para": None,
        "origem": "Safety Voice",
        "status": "ABERTO",
        "virou_plano": False,
        "plano_id": None,
    })
    print("✅ Relato Safety Voice criado")

    # 3. Plano de ação (sem envio de e-mail)
    settings_sem_email = settings.model_copy(update={"smtp_host": None})
    manager = PlanLifecycleManager(settings_sem_email, store, index, NotificationDispatcher(settings_sem_email))
    plano = manager.create({
        "empresaID": empresa_id,
        "origem": "Psicossocial",
        "secao": "Carga de trabalho",
        "indicador": "Sinto que consigo concluir minhas tarefas no horário",
        "unidade": "Planta SC",
        "ref_mes": "2025-01",
        "responsavel_nome": "Gestor de Exemplo",
        "responsavel_email": "gestor@example.com",
        "acao": "Revisar distribuição de turnos",
    })
    print(f"✅ Plano criado: {plano.plano_id}")
    return {"plano_id": plano.plano_id, "token": plano.token}


if __name__ == "__main__":
    try:
        resultado = seed(Settings.from_env())
    except Exception as e:
        print(f"❌ Erro: {e}")
        sys.exit(1)
    print("\n✅✅✅ DADOS DE EXEMPLO CRIADOS COM SUCESSO! ✅✅✅")
    print(f"Link de teste: plano_id={resultado['plano_id']} token={resultado['token']}")
