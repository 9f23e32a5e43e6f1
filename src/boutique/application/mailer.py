"""Mailer port — abstract interface for outbound email.

Concrete adapters live in ``boutique.infrastructure.mail``.  One instance
is built at start-up and injected into the handlers that send email.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Mailer(ABC):

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        """Send an email message.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
