"""Application service: Notify Order Progress use case.

Emails the customer about the progress of one order line, or that it is
ready for delivery once progress reaches 100%.  Sending is
fire-and-forget: a delivery failure is logged and reported in the result,
it never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

import structlog

from boutique.application.mailer import Mailer
from boutique.domain.exceptions import EntityNotFoundError, ValidationError
from boutique.domain.model.order import MAX_PROGRESS, Order, OrderLine, parse_line_key
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)

SHORT_ID_LENGTH = 8


@dataclass(frozen=True)
class NotificationResult:
    sent: bool
    subject: str
    message_id: str | None = None
    error: str | None = None


class NotifyOrderProgressHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        mailer: Mailer,
        store_name: str = "Wahret Zmen",
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._mailer = mailer
        self._store_name = store_name

    def handle(
        self,
        order_id: int,
        email: str | None,
        line_key: str | None,
        progress: int | None,
        article_index: int | None = None,
    ) -> NotificationResult:
        if not email or not email.strip() or not line_key or progress is None:
            raise ValidationError("Email, line key and progress are required")
        if isinstance(progress, bool) or not isinstance(progress, int):
            raise ValidationError("Progress must be an integer")
        if not 0 <= progress <= MAX_PROGRESS:
            raise ValidationError(f"Progress must be between 0 and {MAX_PROGRESS}")

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        product_id, key = parse_line_key(line_key)
        line = order.find_line(product_id, key)

        subject = self._subject(order, progress, article_index)
        text, html = self._render(order, line, progress, article_index)

        result = self._mailer.send(
            to=email.strip(), subject=subject, body=text, html_body=html
        )
        if result.get("status") != "sent":
            logger.warning(
                "order_notification_failed",
                order_id=order_id,
                line_key=line.key,
                error=result.get("error"),
            )
            return NotificationResult(
                sent=False, subject=subject, error=result.get("error")
            )

        logger.info(
            "order_notification_sent",
            order_id=order_id,
            line_key=line.key,
            progress=progress,
            message_id=result.get("message_id"),
        )
        return NotificationResult(
            sent=True, subject=subject, message_id=result.get("message_id")
        )

    # --- Rendering ------------------------------------------------------------

    @staticmethod
    def _article(article_index: int | None) -> str:
        return f" (item #{article_index})" if article_index else ""

    def _subject(self, order: Order, progress: int, article_index: int | None) -> str:
        short_id = str(order.id)[:SHORT_ID_LENGTH]
        article = self._article(article_index)
        if progress == MAX_PROGRESS:
            return f"Order {short_id}{article} - ready for delivery"
        return f"Order {short_id}{article} - progress update ({progress}%)"

    def _render(
        self,
        order: Order,
        line: OrderLine,
        progress: int,
        article_index: int | None,
    ) -> tuple[str, str]:
        product = self._product_repo.get_by_id(line.product_id)
        title = product.title if product else "your item"
        short_id = str(order.id)[:SHORT_ID_LENGTH]
        article = self._article(article_index)

        status = (
            "Good news! Your item is ready for delivery."
            if progress == MAX_PROGRESS
            else "We will let you know as soon as there is news."
        )
        text = (
            f"Hello {order.customer.name},\n\n"
            f"Update on your order {short_id}{article}: "
            f"{title} (color: {line.variant.name}) is {progress}% ready.\n"
            f"{status}\n\n"
            f"Thank you for trusting {self._store_name}."
        )
        html = (
            '<div style="font-family: Arial, sans-serif; line-height: 1.8;">'
            f"<p><strong>Hello {escape(order.customer.name)}</strong>,</p>"
            f"<p>Update on your order <strong>{short_id}</strong>{escape(article)}: "
            f"<strong>{escape(title)}</strong> "
            f"(color: <strong>{escape(line.variant.name)}</strong>) is "
            f"<strong>{progress}%</strong> ready.</p>"
            f"<p>{status}</p>"
            f'<p style="margin-top:14px;">Thank you for trusting '
            f"<strong>{escape(self._store_name)}</strong>.</p>"
            "</div>"
        )
        return text, html
