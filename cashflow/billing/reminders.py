"""WhatsApp payment reminders for overdue installments."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Iterable
from urllib.parse import quote

from cashflow.logging import log_event
from cashflow.models import OverduePayment
from cashflow.validation.formatters import format_currency, format_date, only_digits

if TYPE_CHECKING:
    from cashflow.config import ReminderConfig

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """🚨 *COBRANÇA - SAN LÉO SOLUÇÕES EM TRÂNSITO* 🚨

Olá, {CLIENTE}!

Identificamos que o pagamento referente ao serviço de *{SERVICO}* está em atraso há *{DIAS_ATRASO} dias*.

📋 *Detalhes:*
• Parcela: {PARCELA}/{TOTAL_PARCELAS}
• Valor: {VALOR}
• Vencimento: {DATA_VENCIMENTO}

💳 *Para regularizar:*
PIX: sanleo@pagamentos.com
Chave: 11.222.333/0001-44

⚠️ *Importante:* Após o pagamento, envie o comprovante para confirmarmos a quitação.

Dúvidas? Entre em contato conosco!
📞 (11) 3333-4444

_SanLéo - Soluções em Trânsito_"""

# Characters left unescaped by JavaScript's encodeURIComponent
_URI_SAFE = "-_.!~*'()"


def render_reminder(payment: OverduePayment, template: str | None = None) -> str:
    """Fill the reminder template for one overdue payment.

    Only the first occurrence of each placeholder is substituted; unknown
    placeholders are left as they are.

    Parameters
    ----------
    payment : OverduePayment
        Payment the message is about.
    template : str | None
        Message with ``{CLIENTE}``, ``{SERVICO}``, ``{DIAS_ATRASO}``,
        ``{PARCELA}``, ``{TOTAL_PARCELAS}``, ``{VALOR}`` and
        ``{DATA_VENCIMENTO}`` placeholders. Empty or None uses
        :data:`DEFAULT_TEMPLATE`.

    Returns
    -------
    str
        The message text.
    """
    message = template or DEFAULT_TEMPLATE
    values = {
        "{CLIENTE}": payment.client_name,
        "{SERVICO}": payment.service_name,
        "{DIAS_ATRASO}": str(payment.days_overdue),
        "{PARCELA}": str(payment.installment),
        "{TOTAL_PARCELAS}": str(payment.total_installments),
        "{VALOR}": format_currency(payment.amount),
        "{DATA_VENCIMENTO}": format_date(payment.due_date),
    }
    for token, value in values.items():
        message = message.replace(token, value, 1)
    return message


def whatsapp_url(phone: str, message: str, country_code: str = "55") -> str:
    """Build a ``wa.me`` click-to-chat link."""
    return f"https://wa.me/{country_code}{only_digits(phone)}?text={quote(message, safe=_URI_SAFE)}"


class ReminderDispatcher:
    """Open reminder links one by one, pausing between bulk sends.

    Parameters
    ----------
    opener : Callable[[str], Any]
        Called with each ``wa.me`` URL (e.g. ``webbrowser.open``).
    delay_seconds : float
        Pause after each message of a bulk send.
    country_code : str
        Dialling prefix prepended to the client phone.
    template : str | None
        Message template used when a send does not pass its own.
    sleep : Callable[[float], Any]
        Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        opener: Callable[[str], Any],
        delay_seconds: float = 1.0,
        country_code: str = "55",
        template: str | None = None,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self.opener = opener
        self.delay_seconds = delay_seconds
        self.country_code = country_code
        self.template = template
        self.sleep = sleep
        self.sent: list[str] = []

    @classmethod
    def from_config(
        cls,
        config: "ReminderConfig",
        opener: Callable[[str], Any],
        sleep: Callable[[float], Any] = time.sleep,
    ) -> "ReminderDispatcher":
        """Build a dispatcher from the ``reminders`` section of the configuration."""
        return cls(
            opener,
            delay_seconds=config.delay_seconds,
            country_code=config.country_code,
            template=config.template,
            sleep=sleep,
        )

    def send(self, payment: OverduePayment, template: str | None = None) -> str:
        """Open the reminder for one payment and return the URL used."""
        message = render_reminder(payment, template or self.template)
        url = whatsapp_url(payment.client_phone, message, self.country_code)
        self.opener(url)
        self.sent.append(payment.installment_id)
        log_event(
            logger,
            "Reminder sent",
            installment_id=payment.installment_id,
            days_overdue=payment.days_overdue,
        )
        return url

    def send_bulk(
        self,
        payments: Iterable[OverduePayment],
        selected_ids: Iterable[str],
        template: str | None = None,
    ) -> list[str]:
        """Send reminders for the selected payments, in list order.

        There is no cancellation: an opener failure propagates and the
        remaining payments are not sent.

        Returns
        -------
        list[str]
            Installment ids sent by this call.
        """
        selected = set(selected_ids)
        sent: list[str] = []
        for payment in payments:
            if payment.installment_id not in selected:
                continue
            self.send(payment, template)
            sent.append(payment.installment_id)
            self.sleep(self.delay_seconds)
        logger.info("Bulk reminder run sent %d messages", len(sent))
        return sent
