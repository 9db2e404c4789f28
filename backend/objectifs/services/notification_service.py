from __future__ import annotations

import logging
from dataclasses import dataclass
from html import escape
from typing import Any, Optional, Protocol

import httpx
from fastapi import BackgroundTasks

from objectifs.core.settings import settings

"""
Notification Service (email de bienvenue).

Rôle (fonctionnel) :
- Envoie au nouveau consultant ses identifiants de connexion via l’API transactionnelle Brevo.
- Déclenché après la création du compte (par un BUM ou un ADMIN), en tâche de fond :
  la réponse HTTP n’attend pas l’envoi.

Comportement :
- Pas de retry : un échec est logué puis oublié, il ne fait jamais échouer la création.
- BREVO_API_KEY vide : envoi désactivé (log d’avertissement), MailResult(sent=False).
- Destinataire : email du compte, à défaut le username s’il ressemble à une adresse.
"""

log = logging.getLogger("objectifs.mail")

WELCOME_SUBJECT = "🎯 Vos identifiants de connexion - Plateforme Objectifs"


@dataclass(frozen=True)
class MailResult:
    """Résultat d’un envoi (jamais levé en exception côté appelant)."""
    sent: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class Notifier(Protocol):
    async def send_welcome_email(self, to_email: str, username: str, password: str) -> MailResult: ...


def render_welcome_html(username: str, password: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: #3b82f6; color: white; padding: 20px; border-radius: 8px 8px 0 0; }}
    .content {{ background: #f9fafb; padding: 20px; border-radius: 0 0 8px 8px; border: 1px solid #e5e7eb; }}
    .credentials {{ background: white; padding: 15px; border-left: 4px solid #3b82f6; margin: 15px 0; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h2 style="margin: 0;">🎯 Bienvenue sur la plateforme Objectifs</h2></div>
    <div class="content">
      <p>Bonjour,</p>
      <p>Votre compte consultant a été créé avec succès.</p>
      <div class="credentials">
        <h3>🔑 Vos identifiants de connexion</h3>
        <p><strong>Nom d'utilisateur :</strong> {escape(username)}</p>
        <p><strong>Mot de passe :</strong> {escape(password)}</p>
      </div>
      <p>Vous pouvez maintenant vous connecter pour consulter vos objectifs, suivre votre
      progression et échanger avec votre manager.</p>
      <p style="margin-top: 20px;">À bientôt !</p>
    </div>
  </div>
</body>
</html>
"""


class BrevoMailer:
    """Client minimal de l’API Brevo `POST /v3/smtp/email`."""

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = "https://api.brevo.com/v3/smtp/email",
        sender_name: str = "Plateforme Objectifs",
        sender_email: str = "noreply@votre-domaine.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.sender_name = sender_name
        self.sender_email = sender_email
        self.timeout = timeout
        self._transport = transport

    def _payload(self, to_email: str, username: str, password: str) -> dict[str, Any]:
        return {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [{"email": to_email, "name": username}],
            "subject": WELCOME_SUBJECT,
            "htmlContent": render_welcome_html(username, password),
        }

    async def send_welcome_email(self, to_email: str, username: str, password: str) -> MailResult:
        if not self.api_key:
            log.warning("mail_disabled: BREVO_API_KEY not configured")
            return MailResult(sent=False, error="not_configured")

        headers = {"api-key": self.api_key, "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=self._payload(to_email, username, password), headers=headers)
        except httpx.HTTPError as exc:
            log.error("mail_failed: %s", exc)
            return MailResult(sent=False, error=str(exc))

        if response.status_code not in (200, 201, 202):
            log.error("mail_failed: status %s", response.status_code)
            return MailResult(sent=False, error=f"status {response.status_code}")

        try:
            message_id = response.json().get("messageId")
        except ValueError:
            message_id = None

        log.info("mail_sent: %s", message_id)
        return MailResult(sent=True, message_id=message_id)


_notifier: Optional[Notifier] = None


def get_notifier() -> Notifier:
    """Dépendance FastAPI : mailer construit depuis les settings (remplaçable en test)."""
    global _notifier
    if _notifier is None:
        _notifier = BrevoMailer(
            settings.BREVO_API_KEY,
            api_url=settings.BREVO_API_URL,
            sender_name=settings.MAIL_SENDER_NAME,
            sender_email=settings.MAIL_SENDER_EMAIL,
            timeout=settings.MAIL_TIMEOUT_S,
        )
    return _notifier


def recipient_for(email: Optional[str], username: str) -> Optional[str]:
    if email and "@" in email:
        return email
    if "@" in username:
        return username
    return None


async def _send_quietly(notifier: Notifier, to_email: str, username: str, password: str) -> MailResult:
    # Tâche de fond : aucune exception ne doit remonter
    try:
        return await notifier.send_welcome_email(to_email, username, password)
    except Exception as exc:
        log.exception("mail_failed: unexpected error")
        return MailResult(sent=False, error=str(exc))


def schedule_welcome_email(
    background_tasks: BackgroundTasks,
    notifier: Notifier,
    *,
    email: Optional[str],
    username: str,
    password: str,
) -> bool:
    """Planifie l’email après la réponse ; retourne False s’il n’y a pas d’adresse."""
    to_email = recipient_for(email, username)
    if to_email is None:
        log.info("mail_skipped: no recipient address")
        return False
    background_tasks.add_task(_send_quietly, notifier, to_email, username, password)
    return True
