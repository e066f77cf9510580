class RadarError(Exception):
    """Erro base da API Radar360."""


class StorageError(RadarError):
    """Falha de leitura/escrita no diretório de dados."""


class PlanNotFound(RadarError):
    def __init__(self, plano_id: str):
        super().__init__(f"Plano não encontrado: {plano_id}")
        self.plano_id = plano_id


class PlanForbidden(RadarError):
    def __init__(self, plano_id: str):
        super().__init__(f"Token inválido para o plano {plano_id}")
        self.plano_id = plano_id


class InvalidStatus(RadarError):
    def __init__(self, value, allowed):
        super().__init__(f"Status inválido: {value!r} (permitidos: {', '.join(allowed)})")
        self.value = value
        self.allowed = list(allowed)


class MissingField(RadarError):
    def __init__(self, field: str):
        super().__init__(f"Campo obrigatório ausente: {field}")
        self.field = field
