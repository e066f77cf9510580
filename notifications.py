import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from html import escape
from typing import Any, Dict, Optional

from loguru import logger

from config import Settings

NAO_CONFIGURADO = "not configured"
SEM_DESTINATARIO = "no recipient"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Resultado do envio: sent, skipped ou failed."""
    state: str
    message_id: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def sent(cls, message_id: str) -> "DeliveryOutcome":
        return cls("sent", message_id=message_id)

    @classmethod
    def skipped(cls, reason: str) -> "DeliveryOutcome":
        return cls("skipped", reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "DeliveryOutcome":
        return cls("failed", reason=reason)

    @property
    def status_string(self) -> str:
        if self.state == "failed":
            return f"failed:{self.reason}"
        return self.state


# ==================== TEMPLATE ====================

def _campo(valor: Any) -> str:
    return escape(str(valor)) if valor else "-"


def render_plan_email(data: Dict[str, Any]):
    """Monta (assunto, html) do e-mail de plano de ação atribuído."""
    subject = f"Plano de Ação • {data.get('origem') or 'Radar 360'} • {data.get('unidade') or ''}".strip()
    referencia = f"<b>Referência:</b> {escape(str(data['ref_mes']))}<br/>" if data.get("ref_mes") else ""
    link = escape(data.get("link") or "")
    link_alternativo = escape(data.get("link_alternativo") or "")
    html = f"""
      <div style="font-family:system-ui,Segoe UI,Roboto,Arial">
        <h2>Plano de Ação atribuído</h2>
        <p><b>Empresa:</b> {_campo(data.get('empresaID'))}<br/>
           <b>Origem:</b> {_campo(data.get('origem'))}<br/>
           <b>Seção:</b> {_campo(data.get('secao'))}<br/>
           <b>Indicador:</b> {_campo(data.get('indicador'))}<br/>
           <b>Unidade:</b> {_campo(data.get('unidade'))}<br/>
           {referencia}
        </p>
        <p>Clique para abrir e concluir (anexe evidência ao finalizar):<br/>
          <a href="{link}" target="_blank">{link}</a>
        </p>
        <hr/>
        <p style="font-size:12px;color:#666">
          Se o link acima não abrir, copie e cole no navegador.<br/>
          Também funciona em: {link_alternativo}
        </p>
      </div>
    """
    return subject, html


# ==================== DISPATCHER ====================

class NotificationDispatcher:
    """Envio de e-mail best-effort; nunca propaga falha de transporte."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def enabled(self) -> bool:
        return self.settings.email_enabled

    def _connect(self) -> smtplib.SMTP:
        s = self.settings
        if s.smtp_secure:
            return smtplib.SMTP_SSL(s.smtp_host, s.smtp_port)
        return smtplib.SMTP(s.smtp_host, s.smtp_port)

    def _starttls(self, smtp: smtplib.SMTP):
        if self.settings.smtp_secure:
            return
        smtp.ehlo()
        if smtp.has_extn("starttls"):
            smtp.starttls()
            smtp.ehlo()

    def notify(self, recipient: Optional[str], template_data: Dict[str, Any]) -> DeliveryOutcome:
        if not self.enabled:
            return DeliveryOutcome.skipped(NAO_CONFIGURADO)
        if not recipient:
            return DeliveryOutcome.skipped(SEM_DESTINATARIO)

        subject, html = render_plan_email(template_data)
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.mail_from
        msg["To"] = str(recipient)
        msg["Message-ID"] = make_msgid()
        msg.set_content("Abra este e-mail em um cliente com suporte a HTML.\n" + (template_data.get("link") or ""))
        msg.add_alternative(html, subtype="html")

        try:
            # a conexão fecha mesmo se o STARTTLS falhar
            with self._connect() as smtp:
                self._starttls(smtp)
                smtp.login(self.settings.smtp_user, self.settings.smtp_pass)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"❌ Erro ao enviar e-mail para {recipient}: {e}")
            return DeliveryOutcome.failed(str(e))

        logger.info(f"✅ E-mail enviado para {recipient}")
        return DeliveryOutcome.sent(msg["Message-ID"])
