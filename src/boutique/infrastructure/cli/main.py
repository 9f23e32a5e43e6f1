import click

from boutique.infrastructure.bootstrap import build_services
from boutique.infrastructure.cli.order_commands import (
    order_create,
    order_delete,
    order_list,
    order_notify,
    order_remove_line,
    order_show,
    order_update,
)
from boutique.infrastructure.cli.product_commands import product_add, product_list
from boutique.infrastructure.cli.stock_commands import stock_pending, stock_reconcile
from boutique.infrastructure.config import Settings
from boutique.infrastructure.logging import configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Boutique — orders and variant stock"""
    settings = Settings.from_env()
    configure_logging(settings.log_level, json=settings.log_json)
    ctx.obj = build_services(settings)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def stock() -> None:
    """Inspect and reconcile stock adjustments."""


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address.")
@click.option("--port", default=8000, type=int, show_default=True, help="Bind port.")
@click.pass_obj
def serve(services, host: str, port: int) -> None:
    """Run the REST API with uvicorn."""
    import uvicorn

    from boutique.infrastructure.api.app import create_app

    uvicorn.run(create_app(services), host=host, port=port, log_config=None)


# Register subcommands
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_list)
order.add_command(order_notify)
order.add_command(order_remove_line)
order.add_command(order_show)
order.add_command(order_update)
product.add_command(product_add)
product.add_command(product_list)
stock.add_command(stock_pending)
stock.add_command(stock_reconcile)
