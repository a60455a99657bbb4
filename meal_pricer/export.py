"""Pricing summary export in various formats."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from .matcher import RecipePricingSummary


def _money(value: float | None) -> str:
    return f"${value:.2f}" if value is not None else "N/A"


def export_to_json(
    summary: RecipePricingSummary,
    filepath: str | Path,
    *,
    recipe_title: str | None = None,
    include_alternatives: bool = False,
) -> None:
    """
    Export a pricing summary to JSON format.

    Args:
        summary: Pricing summary
        filepath: Output file path
        recipe_title: Optional recipe title
        include_alternatives: Include the top candidates of each ingredient
    """
    data: dict[str, Any] = {
        "exported_at": datetime.now().isoformat(),
        "recipe_title": recipe_title,
        **summary.to_dict(),
    }

    if not include_alternatives:
        for item in data["results"]:
            item.pop("top_candidates", None)

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export_to_markdown(
    summary: RecipePricingSummary,
    filepath: str | Path,
    *,
    recipe_title: str | None = None,
    include_alternatives: bool = False,
) -> None:
    """Export a pricing summary to Markdown format."""
    lines: list[str] = []

    title = recipe_title or "Recipe Cost Estimate"
    lines.append(f"# {title}")
    lines.append("")
    lines.append(f"*Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}*")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append(f"- **Ingredients:** {len(summary.results)}")
    lines.append(f"- **Unavailable:** {len(summary.unavailable)}")
    lines.append(f"- **Estimated Total:** {_money(summary.total_cost)}")
    lines.append(f"- **Servings:** {summary.servings}")
    lines.append(f"- **Cost per Serving:** {_money(summary.cost_per_serving)}")
    if summary.cancelled:
        lines.append("- **Note:** pricing was cancelled, the list is incomplete")
    lines.append("")

    lines.append("## Ingredients")
    lines.append("")

    for result in summary.results:
        if result.status == "unavailable":
            lines.append(f"- [ ] **{result.ingredient}** → *No match found*")
            continue

        cost = _money(result.estimated_cost) if result.status == "priced" else "no price"
        lines.append(f"- [x] **{result.ingredient}** → {result.product_name} - {cost}")
        if result.packages_to_buy:
            size = f" of {result.package_size}" if result.package_size else ""
            lines.append(
                f"  - Buy {result.packages_to_buy} package(s){size} at {_money(result.package_price)}"
            )
        lines.append(f"  - Confidence: {result.confidence:.0%}")

        if include_alternatives and len(result.top_candidates) > 1:
            lines.append("  - Alternatives:")
            for candidate in result.top_candidates[1:]:
                price = candidate.product.price
                price_info = f" - {_money(price)}" if price else ""
                lines.append(f"    - {candidate.product.description}{price_info}")

    lines.append("")

    if summary.unavailable:
        lines.append("## Unavailable Ingredients")
        lines.append("")
        lines.append("These items need to be found manually:")
        lines.append("")
        for result in summary.results:
            if result.status == "unavailable":
                searched = ", ".join(f"'{t}'" for t in result.search_terms)
                lines.append(f"- {result.ingredient_name} (searched: {searched})")
        lines.append("")

    with open(filepath, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def export_to_pdf(
    summary: RecipePricingSummary,
    filepath: str | Path,
    *,
    recipe_title: str | None = None,
) -> None:
    """
    Export a pricing summary to PDF format.

    Requires reportlab package.
    """
    try:
        from reportlab.lib import colors  # type: ignore[import-untyped]
        from reportlab.lib.pagesizes import LETTER  # type: ignore[import-untyped]
        from reportlab.lib.styles import (  # type: ignore[import-untyped]
            ParagraphStyle,
            getSampleStyleSheet,
        )
        from reportlab.lib.units import cm  # type: ignore[import-untyped]
        from reportlab.platypus import (  # type: ignore[import-untyped]
            Paragraph,
            SimpleDocTemplate,
            Spacer,
            Table,
            TableStyle,
        )
    except ImportError as e:
        raise ImportError(
            "PDF export requires reportlab. Install with: pip install 'meal-pricer[pdf]'"
        ) from e

    doc = SimpleDocTemplate(
        str(filepath),
        pagesize=LETTER,
        rightMargin=2 * cm,
        leftMargin=2 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("CustomTitle", parent=styles["Heading1"], fontSize=18, spaceAfter=12)
    subtitle_style = ParagraphStyle(
        "CustomSubtitle",
        parent=styles["Normal"],
        fontSize=10,
        textColor=colors.grey,
        spaceAfter=20,
    )

    elements: list[Any] = []
    elements.append(Paragraph(recipe_title or "Recipe Cost Estimate", title_style))
    elements.append(
        Paragraph(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}", subtitle_style)
    )

    summary_data = [
        ["Ingredients", str(len(summary.results))],
        ["Unavailable", str(len(summary.unavailable))],
        ["Estimated Total", _money(summary.total_cost)],
        ["Cost per Serving", _money(summary.cost_per_serving)],
    ]
    summary_table = Table(summary_data, colWidths=[4 * cm, 3 * cm])
    summary_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (0, -1), colors.lightgrey),
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("PADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    elements.append(summary_table)
    elements.append(Spacer(1, 20))

    elements.append(Paragraph("Ingredients", styles["Heading2"]))
    elements.append(Spacer(1, 10))

    table_data = [["Ingredient", "Product", "Pkgs", "Cost"]]
    for result in summary.results:
        if result.matched:
            name = result.product_name
            table_data.append(
                [
                    str(result.ingredient),
                    name[:40] + "..." if len(name) > 40 else name,
                    str(result.packages_to_buy),
                    _money(result.estimated_cost) if result.status == "priced" else "N/A",
                ]
            )
        else:
            table_data.append([str(result.ingredient), "No match", "-", "-"])

    main_table = Table(table_data, colWidths=[4.5 * cm, 7 * cm, 1.5 * cm, 2 * cm])
    main_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (2, 0), (3, -1), "CENTER"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("PADDING", (0, 0), (-1, -1), 6),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    elements.append(main_table)

    doc.build(elements)


def export_pricing_summary(
    summary: RecipePricingSummary,
    filepath: str | Path,
    *,
    recipe_title: str | None = None,
    format: str | None = None,
    include_alternatives: bool = False,
) -> str:
    """
    Export a pricing summary to file.

    Format is auto-detected from file extension if not specified.

    Args:
        summary: Pricing summary
        filepath: Output file path
        recipe_title: Optional recipe title
        format: Output format (json, md, pdf) - auto-detected if None
        include_alternatives: Include top candidates (json/md only)

    Returns:
        The format used for export
    """
    path = Path(filepath)

    if format is None:
        format = {
            ".json": "json",
            ".md": "md",
            ".markdown": "md",
            ".pdf": "pdf",
        }.get(path.suffix.lower(), "md")

    if format == "json":
        export_to_json(
            summary, filepath, recipe_title=recipe_title, include_alternatives=include_alternatives
        )
    elif format in ("md", "markdown"):
        export_to_markdown(
            summary, filepath, recipe_title=recipe_title, include_alternatives=include_alternatives
        )
    elif format == "pdf":
        export_to_pdf(summary, filepath, recipe_title=recipe_title)
    else:
        raise ValueError(f"Unsupported format: {format}")

    return format
