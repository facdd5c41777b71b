import logging

import requests

from .. import config

logger = logging.getLogger(__name__)

BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def send_email_via_brevo(to_email: str, subject: str, html_content: str) -> bool:
    """
    Service d'envoi d'email via Brevo API.
    """
    if not config.BREVO_API_KEY:
        logger.error("❌ SERVICE EMAIL: Clé API manquante")
        return False

    headers = {"accept": "application/json", "api-key": config.BREVO_API_KEY, "content-type": "application/json"}
    payload = {
        "sender": {"name": config.SENDER_NAME, "email": config.SENDER_EMAIL},
        "to": [{"email": to_email}],
        "subject": subject,
        "htmlContent": html_content,
    }

    try:
        response = requests.post(BREVO_URL, json=payload, headers=headers, timeout=10)
    except requests.RequestException as e:
        logger.error("❌ Exception envoi email à %s : %s", to_email, e)
        return False

    if response.status_code in (200, 201, 202):
        logger.info("✅ Email envoyé à %s", to_email)
        return True
    logger.error("❌ Erreur Brevo (%s) : %s", response.status_code, response.text)
    return False


def send_password_reset_email(to_email: str, full_name: str, reset_token: str) -> bool:
    reset_url = f"{config.APP_URL}/auth/reset-password?token={reset_token}"
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2>Réinitialisation de votre mot de passe</h2>
      <p>Bonjour {full_name or ''},</p>
      <p>Vous avez demandé la réinitialisation de votre mot de passe {config.SENDER_NAME}.
         Ce lien est valable une heure.</p>
      <p><a href="{reset_url}" style="background:#2563eb;color:#fff;padding:12px 24px;
         text-decoration:none;border-radius:6px;">Réinitialiser mon mot de passe</a></p>
      <p style="word-break: break-all; color: #666;">{reset_url}</p>
      <p>Si vous n'êtes pas à l'origine de cette demande, ignorez cet email.</p>
    </div>
    """
    return send_email_via_brevo(to_email, f"Réinitialisation de votre mot de passe {config.SENDER_NAME}", html)
