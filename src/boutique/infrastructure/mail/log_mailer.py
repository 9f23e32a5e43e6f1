"""Mail adapter used when no SMTP server is configured.

Nothing leaves the process; every message is written to the log instead.
"""

from __future__ import annotations

from uuid import uuid4

import structlog

from boutique.application.mailer import Mailer

logger = structlog.get_logger(__name__)


class LogMailer(Mailer):

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        message_id = f"log-{uuid4().hex[:12]}"
        logger.info("email_logged", message_id=message_id, to=to, subject=subject)
        return {"message_id": message_id, "status": "sent"}
