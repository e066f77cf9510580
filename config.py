import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Carregar variáveis de ambiente
load_dotenv()

EMPRESA_ID_FALLBACK = "empresa-demo-1"
FRONT_BASE_PADRAO = "https://www.safetytechsc.com.br/radar360"
VERDADEIROS = {"1", "true", "yes", "on", "sim"}


def _env_int(name: str, default: Optional[int] = None) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} precisa ser numérico (recebido: {raw!r})")


class Settings(BaseModel):
    """Configuração da API, montada uma vez no startup e injetada nos serviços."""
    data_dir: str = "data"
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_secure: bool = False
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    mail_from: Optional[str] = None
    empresa_id_padrao: str = EMPRESA_ID_FALLBACK
    front_base: str = FRONT_BASE_PADRAO
    host: str = "0.0.0.0"
    port: int = 10000
    log_file: Optional[str] = "logs/info.log"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        smtp_port = _env_int("SMTP_PORT")
        secure_flag = (os.getenv("SMTP_SECURE") or "").strip().lower() in VERDADEIROS
        return cls(
            data_dir=os.getenv("RADAR_DATA_DIR") or "data",
            smtp_host=os.getenv("SMTP_HOST") or None,
            smtp_port=smtp_port,
            smtp_secure=secure_flag or smtp_port == 465,
            smtp_user=os.getenv("SMTP_USER") or None,
            smtp_pass=os.getenv("SMTP_PASS") or None,
            mail_from=os.getenv("MAIL_FROM") or None,
            empresa_id_padrao=os.getenv("EMPRESA_ID_PADRAO") or EMPRESA_ID_FALLBACK,
            front_base=(os.getenv("RADAR_FRONT_BASE") or FRONT_BASE_PADRAO).rstrip("/"),
            host=os.getenv("HOST") or "0.0.0.0",
            port=_env_int("PORT", 10000),
            log_file=os.getenv("LOG_FILE", "logs/info.log") or None,
            log_level=os.getenv("LOG_LEVEL") or "INFO",
        )

    @property
    def email_enabled(self) -> bool:
        """E-mail só fica ativo com todas as credenciais de transporte."""
        return all([
            self.smtp_host,
            self.smtp_port,
            self.smtp_user,
            self.smtp_pass,
            self.mail_from,
        ])

    def resolve_empresa_id(self, value: Optional[str]) -> str:
        return value or self.empresa_id_padrao
