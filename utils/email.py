# utils/email.py
import requests

import config

BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def send_notification_email(to_email: str, subject: str, message: str):
     """Send a plain notification e-mail through Brevo's transactional API."""
     if not config.BREVO_API_KEY:
          raise Exception("BREVO_API_KEY is not set")

     html_message = message.replace("\n", "<br>")
     response = requests.post(
          BREVO_URL,
          headers={
               "api-key": config.BREVO_API_KEY,
               "Content-Type": "application/json",
          },
          json={
               "sender": {"name": config.MAIL_SENDER_NAME, "email": config.MAIL_SENDER},
               "to": [{"email": to_email}],
               "subject": subject,
               "htmlContent": f"""
                    <h2>{subject}</h2>
                    <p>{html_message}</p>
               """,
          },
          timeout=10,
     )
     if response.status_code not in (200, 201):
          raise Exception(f"Brevo error: {response.text}")
