import statistics
from typing import Any, Dict, List

BENCHMARK = 7.0
NOTA_MINIMA = 0
NOTA_MAXIMA = 10


def coletar_notas(payload: Any) -> List[float]:
    """Notas numéricas (0-10) de uma resposta; prioriza a chave "respostas"."""
    if isinstance(payload, dict) and "respostas" in payload:
        payload = payload["respostas"]

    notas = []
    pendentes = [payload]
    while pendentes:
        item = pendentes.pop()
        if isinstance(item, dict):
            pendentes.extend(item.values())
        elif isinstance(item, list):
            pendentes.extend(item)
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            if NOTA_MINIMA <= item <= NOTA_MAXIMA:
                notas.append(float(item))
    return notas


def interpretar(media: float) -> str:
    if media >= BENCHMARK:
        return "Excelente"
    elif media >= 5:
        return "Bom, mas precisa evoluir"
    return "Crítico - atenção urgente"


def resumo_notas(valores: List[float]) -> Dict:
    if not valores:
        return {"total": 0, "media": None, "interpretacao": None}
    media = statistics.mean(valores)
    return {
        "media": round(media, 2),
        "desvio": round(statistics.stdev(valores), 2) if len(valores) > 1 else 0,
        "total": len(valores),
        "minimo": min(valores),
        "maximo": max(valores),
        "interpretacao": interpretar(media),
        "benchmark": BENCHMARK,
    }
