"""Resend adapter: sends transactional email through the Resend REST API.

Delivery problems are reported in the returned status dict rather than
raised, so a failed email never undoes the business action that caused it.
"""

import httpx
import structlog

from storefront.notification.email_port import EmailPort

logger = structlog.get_logger(__name__)

API_URL = "https://api.resend.com/emails"
DEFAULT_TIMEOUT = 10.0


class ResendEmailAdapter(EmailPort):
    def __init__(
        self,
        api_key: str,
        sender: str,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.sender = sender
        self.client = client or httpx.Client(timeout=timeout)

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        payload = {"from": self.sender, "to": [to], "subject": subject, "text": body}
        if html_body:
            payload["html"] = html_body

        try:
            response = self.client.post(
                API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "resend_request_rejected",
                status_code=exc.response.status_code,
                body=exc.response.text[:500],
            )
            return {"message_id": None, "status": "failed", "error": f"HTTP {exc.response.status_code}"}
        except httpx.HTTPError as exc:
            logger.error("resend_request_failed", error=str(exc))
            return {"message_id": None, "status": "failed", "error": str(exc)}

        return {"message_id": response.json().get("id"), "status": "sent"}
