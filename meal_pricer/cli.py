"""CLI entry point for meal-pricer."""

import logging
import threading
from typing import Any

import click

from .api import KrogerAPI
from .catalog import CatalogError, CatalogSearch, InMemoryCatalog
from .config import load_settings, save_access_token
from .export import export_pricing_summary
from .ingredients import (
    Ingredient,
    IngredientValidationError,
    load_ingredients,
    parse_ingredient_text,
    validate_ingredients,
)
from .matcher import RecipePricingSummary, price_ingredients, search_alternatives
from .pack_size import parse_pack_size
from .tui import interactive_review
from .units import UnitConversionError, convert, format_number, normalize_unit

# Shared API instance
_api: KrogerAPI | None = None


def get_api() -> KrogerAPI:
    """Get or create the API instance."""
    global _api
    if _api is None:
        _api = KrogerAPI()
    return _api


def get_catalog(catalog_file: str | None) -> CatalogSearch:
    """An offline catalog when a snapshot file is given, the live API otherwise."""
    if catalog_file:
        return InMemoryCatalog.from_file(catalog_file)
    return get_api()


def resolve_location(
    catalog: CatalogSearch, location_id: str | None, zip_code: str | None
) -> str | None:
    """Pick the store to price against: explicit id, then ZIP lookup, then settings."""
    if location_id:
        return location_id
    if zip_code and isinstance(catalog, KrogerAPI):
        found = catalog.find_location(zip_code)
        if found:
            click.echo(f"Using store {found} near {zip_code}")
            return found
        click.echo(f"⚠ No store found near {zip_code}, prices may be missing")
    return load_settings().location_id


def parse_preferences(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated NAME=PRODUCT_ID options."""
    preferred: dict[str, str] = {}
    for value in values:
        name, sep, product_id = value.partition("=")
        if not sep or not name.strip() or not product_id.strip():
            raise click.BadParameter(f"expected NAME=PRODUCT_ID, got '{value}'", param_hint="--prefer")
        preferred[name.strip()] = product_id.strip()
    return preferred


def run_pricing(
    catalog: CatalogSearch,
    ingredients: list[Ingredient],
    **kwargs: Any,
) -> RecipePricingSummary:
    """Run price_ingredients in a worker thread so Ctrl-C cancels it cleanly."""
    cancel_event = threading.Event()
    outcome: dict[str, Any] = {}

    def run() -> None:
        try:
            outcome["summary"] = price_ingredients(
                catalog, ingredients, cancel_event=cancel_event, **kwargs
            )
        except Exception as e:
            outcome["error"] = e

    worker = threading.Thread(target=run, daemon=True)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.1)
    except KeyboardInterrupt:
        click.echo("\nCancelling...", err=True)
        cancel_event.set()
        worker.join()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["summary"]


def display_summary(summary: RecipePricingSummary, show_alternatives: bool = False) -> None:
    """Display pricing results in a formatted way."""
    click.echo()
    click.echo("=" * 60)
    click.echo("PRICED INGREDIENTS")
    click.echo("=" * 60)

    for i, result in enumerate(summary.results, 1):
        click.echo(f"\n{i}. {result.ingredient}")
        if not result.matched:
            searched = ", ".join(f"'{t}'" for t in result.search_terms)
            click.echo(f"   ✗ No match found (searched: {searched})")
            continue

        click.echo(f"   → {result.product_name}")
        if result.status == "unpriced":
            click.echo("   ⚠ No price at this store")
        else:
            size = f" of {result.package_size}" if result.package_size else ""
            click.echo(
                f"   Cost: ${result.estimated_cost:.2f} "
                f"(buy {result.packages_to_buy}{size} at ${result.package_price:.2f})"
            )
        click.echo(f"   Confidence: {result.confidence:.0%}")

        if show_alternatives and len(result.top_candidates) > 1:
            click.echo("   Alternatives:")
            for j, candidate in enumerate(result.top_candidates[1:], 1):
                price = candidate.product.price
                price_info = f" - ${price:.2f}" if price else ""
                click.echo(f"     {j}. {candidate.product.description}{price_info}")

    click.echo()
    click.echo("-" * 60)
    click.echo(
        f"Priced: {len(summary.results) - len(summary.unavailable)} | "
        f"Unavailable: {len(summary.unavailable)}"
    )
    click.echo(f"Estimated total: ${summary.total_cost:.2f}")
    click.echo(f"Per serving ({summary.servings}): ${summary.cost_per_serving:.2f}")
    if summary.cancelled:
        click.echo("⚠ Pricing was cancelled, results are incomplete")
    click.echo("-" * 60)


# ============================================================================
# Main CLI Group
# ============================================================================


@click.group()
@click.version_option(version="1.0.0", prog_name="meal-pricer")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Recipe ingredient pricing against a grocery catalog.

    Match each ingredient to a store product, convert units, and estimate
    what the recipe costs.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# Pricing Commands
# ============================================================================


@cli.command("price")
@click.argument("items", nargs=-1)
@click.option("--file", "-f", "file_path", type=click.Path(exists=True), help="Load ingredients from file")
@click.option("--servings", "-S", type=int, help="Recipe servings")
@click.option("--location", "-l", "location_id", help="Store location id")
@click.option("--zip", "-z", "zip_code", help="Find the nearest store to a ZIP code")
@click.option("--catalog", "catalog_file", type=click.Path(exists=True), help="Offline catalog JSON file")
@click.option("--workers", "-w", type=int, help="Concurrent ingredient lookups")
@click.option("--prefer", "prefer", multiple=True, help="Pin an ingredient: NAME=PRODUCT_ID")
@click.option("--alternatives", "-a", is_flag=True, help="Show alternative products")
@click.option("--interactive", "-i", is_flag=True, help="Interactive review with TUI")
@click.option("--export", "-o", "output", type=click.Path(), help="Export results to a file")
@click.option("--format", type=click.Choice(["json", "md", "pdf"]), help="Export format")
@click.option("--title", help="Recipe title for exports")
def price(
    items: tuple[str, ...],
    file_path: str | None,
    servings: int | None,
    location_id: str | None,
    zip_code: str | None,
    catalog_file: str | None,
    workers: int | None,
    prefer: tuple[str, ...],
    alternatives: bool,
    interactive: bool,
    output: str | None,
    format: str | None,
    title: str | None,
):
    """Estimate the cost of a recipe's ingredients.

    Examples:

        meal-pricer price "2 cups milk" "3 eggs" "1 lb ground beef" -S 4

        meal-pricer price -f ingredients.json --zip 45202

        meal-pricer price -f recipe.txt --catalog snapshot.json -o cost.md
    """
    try:
        if file_path:
            ingredients = load_ingredients(file_path)
        else:
            ingredients = validate_ingredients([parse_ingredient_text(item) for item in items])
        preferred = parse_preferences(prefer)

        catalog = get_catalog(catalog_file)
        location = resolve_location(catalog, location_id, zip_code)

        click.echo(f"Pricing {len(ingredients)} ingredients...")
        summary = run_pricing(
            catalog,
            ingredients,
            servings=servings,
            location_id=location,
            max_workers=workers or load_settings().max_workers,
            preferred_products=preferred,
        )
    except IngredientValidationError as e:
        click.echo(f"✗ Invalid ingredients: {e}", err=True)
        raise SystemExit(1) from None
    except CatalogError as e:
        click.echo(f"✗ Catalog error: {e}", err=True)
        raise SystemExit(1) from None

    if interactive:
        review = interactive_review(summary, title)
        if not review.confirmed:
            click.echo("Review cancelled.")
            return
        summary = RecipePricingSummary(
            review.results, servings=summary.servings, cancelled=summary.cancelled
        )

    display_summary(summary, show_alternatives=alternatives)

    if output:
        try:
            used_format = export_pricing_summary(
                summary,
                output,
                recipe_title=title,
                format=format,
                include_alternatives=alternatives,
            )
        except (ImportError, OSError, ValueError) as e:
            click.echo(f"✗ Export failed: {e}", err=True)
            raise SystemExit(1) from None
        click.echo(f"✓ Exported to {output} ({used_format} format)")


@cli.command()
@click.argument("query")
@click.option("--limit", "-n", default=5, help="Maximum results to show")
@click.option("--location", "-l", "location_id", help="Store location id")
@click.option("--catalog", "catalog_file", type=click.Path(exists=True), help="Offline catalog JSON file")
def search(query: str, limit: int, location_id: str | None, catalog_file: str | None):
    """Search the catalog for products."""
    try:
        catalog = get_catalog(catalog_file)
        click.echo(f"Searching for: {query}")
        products = catalog.search(
            query, location_id=location_id or load_settings().location_id, limit=limit
        )
    except CatalogError as e:
        click.echo(f"✗ Search failed: {e}", err=True)
        raise SystemExit(1) from None

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"\nFound {len(products)} products:\n")
    for i, product in enumerate(products, 1):
        price_str = f"${product.price:.2f}" if product.price else "N/A"
        click.echo(f"{i}. {product.description}")
        click.echo(f"   {product.size_label or ''} - {price_str}")
        click.echo()


@cli.command()
@click.argument("name")
@click.option("--query", "-q", help="Search term to use instead of the name")
@click.option("--amount", type=float, default=1.0, help="Ingredient amount")
@click.option("--unit", default="each", help="Ingredient unit")
@click.option("--limit", "-n", default=12, help="Page size (max 24)")
@click.option("--offset", default=0, help="Skip this many ranked results")
@click.option("--priced-only", is_flag=True, help="Only show products with a price")
@click.option("--location", "-l", "location_id", help="Store location id")
@click.option("--catalog", "catalog_file", type=click.Path(exists=True), help="Offline catalog JSON file")
def alternatives(
    name: str,
    query: str | None,
    amount: float,
    unit: str,
    limit: int,
    offset: int,
    priced_only: bool,
    location_id: str | None,
    catalog_file: str | None,
):
    """List ranked substitute products for an ingredient."""
    try:
        catalog = get_catalog(catalog_file)
    except CatalogError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    candidates = search_alternatives(
        catalog,
        name,
        query,
        amount=amount,
        unit=unit,
        location_id=location_id or load_settings().location_id,
        limit=limit,
        offset=offset,
        priced_only=priced_only,
    )

    if not candidates:
        click.echo("No alternatives found.")
        return

    for i, candidate in enumerate(candidates, offset + 1):
        product = candidate.product
        price_str = f"${product.price:.2f}" if product.price else "N/A"
        click.echo(f"{i}. {product.description} [{product.product_id or '-'}]")
        click.echo(f"   {product.size_label or ''} - {price_str} (score {candidate.score:.2f})")


@cli.command()
@click.argument("zip_code")
@click.option("--radius", default=10, help="Search radius in miles")
@click.option("--limit", "-n", default=5, help="Maximum stores to show")
def locations(zip_code: str, radius: int, limit: int):
    """Find stores near a ZIP code."""
    api = get_api()

    try:
        stores = api.find_locations(zip_code, radius_miles=radius, limit=limit)
    except CatalogError as e:
        click.echo(f"✗ Location lookup failed: {e}", err=True)
        raise SystemExit(1) from None

    if not stores:
        click.echo(f"No stores found near {zip_code}.")
        return

    for store in stores:
        click.echo(f"{store['location_id']}  {store['name']}")
        if store["address"]:
            click.echo(f"   {store['address']}")


# ============================================================================
# Utility Commands
# ============================================================================


@cli.command("convert")
@click.argument("quantity", type=float)
@click.argument("from_unit")
@click.argument("to_unit")
def convert_cmd(quantity: float, from_unit: str, to_unit: str):
    """Convert a quantity between units of the same family.

    Example: meal-pricer convert 2 cups ml
    """
    try:
        value = convert(quantity, from_unit, to_unit)
    except UnitConversionError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    click.echo(f"{format_number(quantity)} {source} = {format_number(round(value, 2))} {target}")


@cli.command("pack-size")
@click.argument("label")
@click.option("--unit", help="Ingredient unit, decides how a bare 'oz' is read")
def pack_size_cmd(label: str, unit: str | None):
    """Show how a product size label is parsed."""
    pack = parse_pack_size(label, context_unit=unit)
    if pack is None:
        click.echo(f"✗ Could not parse '{label}'")
        raise SystemExit(1)
    click.echo(str(pack))


@cli.command("set-token")
@click.option("--token", prompt="Access token", hide_input=True, help="Catalog API access token")
def set_token(token: str):
    """Store a catalog access token locally."""
    save_access_token(token)
    click.echo("✓ Token saved")


# ============================================================================
# Entry Point
# ============================================================================


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
