"""
Emails transactionnels d'une commande (serveur).

- Confirmation au client et notification au propriétaire, envoyées en parallèle.
- Chaque envoi capture sa propre erreur: l'échec de l'un n'empêche pas l'autre.
- smtplib est bloquant: l'envoi se fait dans un thread (asyncio.to_thread).
- Corps HTML + texte rendus par Jinja2 (templates/).
"""
import asyncio
import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Any, Dict, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from storefront.config import TEMPLATES_DIR
from storefront.orders.models import OrderDraft
from .email_config import SmtpSettings, load_smtp_settings

logger = logging.getLogger(__name__)

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def _money(value: Any) -> str:
    try:
        return f"₹{float(value):,.2f}"
    except (TypeError, ValueError):
        return str(value)


def _display_date(iso: str) -> str:
    try:
        return datetime.fromisoformat(str(iso).replace("Z", "+00:00")).strftime("%d/%m/%Y %H:%M")
    except ValueError:
        return str(iso)


def render_email(template: str, draft: OrderDraft, settings: SmtpSettings) -> Tuple[str, str]:
    """Retourne (texte, html) pour un template de base (ex: 'customer_order')."""
    context = {
        "order": draft.to_wire(),
        "order_date": _display_date(draft.order_date),
        "store_name": settings.sender_name,
        "contact_email": settings.owner_email,
        "money": _money,
    }
    text = _env.get_template(f"{template}.txt").render(**context)
    html = _env.get_template(f"{template}.html").render(**context)
    return text, html


def build_message(*, sender: str, to: str, subject: str, text: str, html: str) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to
    msg["Message-ID"] = make_msgid()
    msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))
    return msg


def _deliver(msg: MIMEMultipart, settings: SmtpSettings) -> str:
    """Envoi SMTP bloquant; retourne le Message-ID."""
    if settings.secure:
        server = smtplib.SMTP_SSL(settings.host, settings.port, timeout=settings.timeout)
    else:
        server = smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout)
    try:
        if not settings.secure:
            server.starttls()
        server.login(settings.user, settings.password)
        server.send_message(msg)
    finally:
        server.quit()
    return msg["Message-ID"]


async def _send(template: str, subject: str, sender_label: str, to: str, draft: OrderDraft, settings: SmtpSettings) -> Dict[str, Any]:
    try:
        if not to:
            raise ValueError("Destinataire manquant")
        text, html = render_email(template, draft, settings)
        msg = build_message(
            sender=formataddr((sender_label, settings.user)),
            to=to,
            subject=subject,
            text=text,
            html=html,
        )
        message_id = await asyncio.to_thread(_deliver, msg, settings)
        logger.info("notifications.email_service sent template=%s reference=%s", template, draft.order_reference)
        return {"success": True, "messageId": message_id}
    except Exception as e:
        logger.exception("notifications.email_service failed template=%s reference=%s", template, draft.order_reference)
        return {"success": False, "error": str(e)}


# module storefront.notifications.email_service
async def send_customer_confirmation(draft: OrderDraft, settings: Optional[SmtpSettings] = None) -> Dict[str, Any]:
    settings = settings or load_smtp_settings()
    return await _send(
        "customer_order",
        f"Confirmation de commande - {draft.order_reference}",
        settings.sender_name,
        draft.customer.email,
        draft,
        settings,
    )


async def send_owner_notification(draft: OrderDraft, settings: Optional[SmtpSettings] = None) -> Dict[str, Any]:
    settings = settings or load_smtp_settings()
    return await _send(
        "owner_order",
        f"Nouvelle commande - {draft.order_reference}",
        f"{settings.sender_name} Commandes",
        settings.owner_email,
        draft,
        settings,
    )


async def send_order_emails(draft: OrderDraft, settings: Optional[SmtpSettings] = None) -> Dict[str, Any]:
    """Les deux envois en parallèle; succès global = client ET propriétaire."""
    settings = settings or load_smtp_settings()
    customer, owner = await asyncio.gather(
        send_customer_confirmation(draft, settings),
        send_owner_notification(draft, settings),
    )
    return {
        "success": bool(customer.get("success") and owner.get("success")),
        "customer": customer,
        "owner": owner,
    }
