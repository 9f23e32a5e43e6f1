"""CLI commands for the Product aggregate."""

from __future__ import annotations

import json

import click

from boutique.domain.exceptions import DomainException


@click.command("add")
@click.option(
    "--file",
    "document_file",
    required=True,
    type=click.File("r", encoding="utf-8"),
    help="JSON catalog document ('-' for stdin).",
)
@click.pass_obj
def product_add(services, document_file) -> None:
    """Add a new product to the catalog."""
    try:
        document = json.load(document_file)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Not valid JSON: {exc}")
    if not isinstance(document, dict):
        raise click.BadParameter("The document must be a JSON object.")

    try:
        product = services.add_product().handle(document)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} '{product.title}' added at {product.price_current} "
        f"({len(product.variants)} variants, {product.total_stock} in stock)"
    )


@click.command("list")
@click.pass_obj
def product_list(services) -> None:
    """List all products in the catalog with per-variant stock."""
    products = services.list_products().handle()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Title':<28} {'Price':>10} {'Stock':>7}")
    click.echo("-" * 54)
    for p in products:
        click.echo(f"{p.id:<6} {p.title:<28} {p.price_current:>10} {p.total_stock:>7}")
        for v in p.variants:
            click.echo(f"{'':<6}   - {v.name:<24} {'':>10} {v.stock:>7}")
