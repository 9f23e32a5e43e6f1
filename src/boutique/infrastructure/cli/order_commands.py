"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from boutique.application.dto import OrderDTO, OrderLineSpec
from boutique.domain.exceptions import DomainException
from boutique.domain.model.order import CustomerContact, ShippingAddress, parse_line_key
from boutique.domain.model.variant import VariantKey


def _parse_items(raw: str) -> list[OrderLineSpec]:
    """Parse 'P1:2:Red,P2:1' into OrderLineSpec list (variant name optional)."""
    specs: list[OrderLineSpec] = []
    for entry in raw.split(","):
        entry = entry.strip()
        parts = entry.split(":", 2)
        if len(parts) < 2:
            raise click.BadParameter(
                f"Invalid item format '{entry}'. Expected 'ProductId:Quantity[:Variant]'."
            )
        product_id, qty_str = parts[0].strip(), parts[1].strip()
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        variant = VariantKey(name=parts[2]) if len(parts) == 3 else VariantKey()
        specs.append(OrderLineSpec(product_id=product_id, quantity=qty, variant=variant))
    return specs


def _parse_progress(pairs: tuple[str, ...]) -> dict[str, int] | None:
    """Parse ('P1|Red=50', ...) into {line_key: progress}."""
    if not pairs:
        return None
    progress: dict[str, int] = {}
    for pair in pairs:
        key, sep, value = pair.rpartition("=")
        if not sep or not key.strip():
            raise click.BadParameter(
                f"Invalid progress '{pair}'. Expected 'LineKey=Percent'."
            )
        try:
            progress[key.strip()] = int(value)
        except ValueError:
            raise click.BadParameter(f"Invalid progress value '{value}' for '{key}'.")
    return progress


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    paid = "paid" if dto.is_paid else "unpaid"
    delivered = "delivered" if dto.is_delivered else "not delivered"
    click.echo(f"Order #{dto.id}  (status={dto.status}, {paid}, {delivered})")
    click.echo(f"Customer: {dto.name} <{dto.email}> {dto.phone}")
    address = dto.address
    click.echo(
        f"Ship to:  {address['street']}, {address['zipcode']} {address['city']}, "
        f"{address['state']}, {address['country']}"
    )
    click.echo(f"Created:  {dto.created_at}")
    click.echo()

    click.echo(f"  {'Line':<28} {'Qty':>5} {'Price':>10} {'Total':>10} {'Progress':>9}")
    click.echo(f"  {'-'*66}")
    for line in dto.lines:
        progress = dto.line_progress.get(line.key)
        shown = f"{progress}%" if progress is not None else "-"
        click.echo(
            f"  {line.key:<28} {line.quantity:>5} {line.unit_price:>10} "
            f"{line.line_total:>10} {shown:>9}"
        )
    click.echo(f"  {'-'*66}")
    click.echo(f"  {'Order Total':<33} {dto.total_price:>21} {dto.currency}")


@click.command("create")
@click.option("--name", required=True, help="Customer name.")
@click.option("--email", required=True, help="Customer email.")
@click.option("--phone", required=True, help="Customer phone.")
@click.option("--street", required=True, help="Shipping street.")
@click.option("--city", required=True, help="Shipping city.")
@click.option("--state", required=True, help="Shipping state.")
@click.option("--country", required=True, help="Shipping country.")
@click.option("--zipcode", required=True, help="Shipping zipcode.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty[:Variant],...'.")
@click.pass_obj
def order_create(
    services,
    name: str,
    email: str,
    phone: str,
    street: str,
    city: str,
    state: str,
    country: str,
    zipcode: str,
    items: str,
) -> None:
    """Place a new order (decrements variant stock)."""
    specs = _parse_items(items)

    try:
        dto = services.create_order().handle(
            customer=CustomerContact(name=name, email=email, phone=phone),
            address=ShippingAddress(
                street=street, city=city, state=state, country=country, zipcode=zipcode
            ),
            line_specs=specs,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(services, order_id: int) -> None:
    """Show details of an existing order."""
    try:
        dto = services.show_order().handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--email", default=None, help="Only orders placed with this email.")
@click.pass_obj
def order_list(services, email: str | None) -> None:
    """List orders, all of them or one customer's."""
    try:
        if email is not None:
            orders = services.list_customer_orders().handle(email)
        else:
            orders = services.list_orders().handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Customer':<24} {'Lines':>6} {'Total':>12} {'Paid':>6} {'Created':<25}")
    click.echo("-" * 84)
    for dto in orders:
        click.echo(
            f"{dto.id:<6} {dto.name:<24} {len(dto.lines):>6} {dto.total_price:>12} "
            f"{'yes' if dto.is_paid else 'no':>6} {dto.created_at:<25}"
        )


@click.command("remove-line")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--key", "line_key", required=True, help="Line key as 'ProductId|Variant'.")
@click.option("--quantity", required=True, type=int, help="Units to remove.")
@click.pass_obj
def order_remove_line(services, order_id: int, line_key: str, quantity: int) -> None:
    """Remove units from one line (restores stock)."""
    try:
        product_id, key = parse_line_key(line_key)
        result = services.remove_order_line().handle(
            order_id=order_id, product_id=product_id, key=key, quantity=quantity
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if result.order_deleted:
        click.echo(f"Order #{order_id} had no lines left and was deleted.")
    else:
        click.echo(
            f"Removed {quantity} from '{line_key}' "
            f"({result.remaining_quantity} left). New total: {result.total_price}"
        )


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to delete.")
@click.pass_obj
def order_delete(services, order_id: int) -> None:
    """Delete an order (restores stock of every line)."""
    try:
        services.delete_order().handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} deleted.")


@click.command("update")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--paid/--unpaid", "is_paid", default=None, help="Payment flag.")
@click.option("--delivered/--undelivered", "is_delivered", default=None, help="Delivery flag.")
@click.option(
    "--progress",
    multiple=True,
    help="Line progress as 'ProductId|Variant=Percent'; replaces all progress.",
)
@click.pass_obj
def order_update(
    services,
    order_id: int,
    is_paid: bool | None,
    is_delivered: bool | None,
    progress: tuple[str, ...],
) -> None:
    """Update payment/delivery flags and line progress."""
    try:
        dto = services.update_order().handle(
            order_id,
            is_paid=is_paid,
            is_delivered=is_delivered,
            line_progress=_parse_progress(progress),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("notify")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--email", required=True, help="Recipient email.")
@click.option("--key", "line_key", required=True, help="Line key as 'ProductId|Variant'.")
@click.option("--progress", required=True, type=int, help="Progress percent (0-100).")
@click.option("--article", "article_index", default=None, type=int, help="Item number shown in the subject.")
@click.pass_obj
def order_notify(
    services,
    order_id: int,
    email: str,
    line_key: str,
    progress: int,
    article_index: int | None,
) -> None:
    """Email the customer about one line's progress."""
    try:
        result = services.notify_order().handle(
            order_id, email, line_key, progress, article_index=article_index
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if result.sent:
        click.echo(f"Notification sent: {result.subject}")
    else:
        click.echo(f"Notification not sent: {result.error}", err=True)
