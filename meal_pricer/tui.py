"""Interactive TUI for reviewing pricing results and overriding picks."""

from dataclasses import dataclass

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Footer, Header, Label, Static

from .matcher import PricingResult, RecipePricingSummary, select_alternative


@dataclass
class ReviewResult:
    """Result from the interactive review."""

    confirmed: bool
    results: list[PricingResult]


class AlternativesModal(ModalScreen[int | None]):
    """Modal dialog to pick one of the top candidates."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, result: PricingResult, name: str | None = None) -> None:
        super().__init__(name=name)
        self.result = result

    def compose(self) -> ComposeResult:
        with Vertical(id="alternatives-dialog"):
            yield Label(f"Candidates for: {self.result.ingredient}", id="alt-title")
            yield Label(f"Current: {self.result.product_name}", id="alt-current")
            yield Static("", id="alt-spacer")

            if self.result.top_candidates:
                table = DataTable(id="alt-table")
                table.cursor_type = "row"
                table.add_columns("#", "Product", "Size", "Price", "Score")
                for i, candidate in enumerate(self.result.top_candidates):
                    product = candidate.product
                    price = product.price
                    table.add_row(
                        str(i + 1),
                        product.description[:45],
                        product.size_label or "-",
                        f"${price:.2f}" if price else "N/A",
                        f"{candidate.score:.2f}",
                    )
                yield table
            else:
                yield Label("No candidates retained", id="no-alts")

            with Horizontal(id="alt-buttons"):
                yield Button("Cancel", variant="default", id="btn-cancel")

    @on(DataTable.RowSelected)
    def on_row_selected(self, event: DataTable.RowSelected) -> None:
        """Select the candidate when row is clicked or Enter pressed."""
        if event.cursor_row is not None:
            self.dismiss(event.cursor_row)

    @on(Button.Pressed, "#btn-cancel")
    def on_cancel(self) -> None:
        self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ReviewScreen(App[ReviewResult]):
    """Interactive screen for reviewing pricing results."""

    CSS = """
    Screen {
        background: $surface;
    }

    #main-container {
        height: 100%;
        padding: 1;
    }

    #summary {
        height: 3;
        padding: 0 1;
        background: $primary-background;
        color: $text;
        content-align: center middle;
    }

    #results-table {
        height: 1fr;
        margin: 1 0;
    }

    #button-bar {
        height: 3;
        align: center middle;
        padding: 0 1;
    }

    #button-bar Button {
        margin: 0 1;
    }

    #alternatives-dialog {
        width: 80;
        height: auto;
        max-height: 80%;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    #alt-title {
        text-style: bold;
        padding-bottom: 1;
    }

    #alt-current {
        color: $text-muted;
        padding-bottom: 1;
    }

    #alt-spacer {
        height: 1;
    }

    #alt-table {
        height: auto;
        max-height: 10;
        margin-bottom: 1;
    }

    #no-alts {
        color: $warning;
        padding: 1;
    }

    #alt-buttons {
        height: 3;
        align: center middle;
    }
    """

    BINDINGS = [
        Binding("q", "quit_cancel", "Cancel"),
        Binding("enter", "show_alternatives", "Candidates"),
        Binding("c", "confirm", "Confirm"),
        Binding("escape", "quit_cancel", "Cancel"),
    ]

    def __init__(
        self,
        results: list[PricingResult],
        recipe_title: str | None = None,
        servings: int | None = None,
    ) -> None:
        super().__init__()
        self.results = list(results)
        self.recipe_title = recipe_title or "Recipe Cost Estimate"
        self.servings = servings

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="main-container"):
            yield Static(self._get_summary(), id="summary")
            table = DataTable(id="results-table")
            table.cursor_type = "row"
            table.add_columns("Ingredient", "Product", "Pkgs", "Cost", "Conf", "Status")
            yield table
            with Horizontal(id="button-bar"):
                yield Button("Confirm (c)", variant="success", id="btn-confirm")
                yield Button("Cancel (q)", variant="error", id="btn-cancel")
        yield Footer()

    def on_mount(self) -> None:
        self.title = self.recipe_title
        self._refresh_table()

    def _get_summary(self) -> str:
        summary = RecipePricingSummary(self.results, servings=max(self.servings or 1, 1))
        return (
            f"Ingredients: {len(self.results)} | Unavailable: {len(summary.unavailable)} | "
            f"Total: ${summary.total_cost:.2f} | Per serving: ${summary.cost_per_serving:.2f}"
        )

    def _refresh_table(self) -> None:
        table = self.query_one("#results-table", DataTable)
        table.clear()

        for result in self.results:
            if result.matched:
                status = {"priced": "✓", "unpriced": "⚠ no price"}.get(result.status, "✗")
                if result.overridden:
                    status += " (override)"
                table.add_row(
                    str(result.ingredient)[:25],
                    result.product_name[:35],
                    str(result.packages_to_buy),
                    f"${result.estimated_cost:.2f}",
                    f"{result.confidence:.0%}",
                    status,
                )
            else:
                table.add_row(str(result.ingredient)[:25], "No match found", "-", "-", "-", "✗")

        summary = self.query_one("#summary", Static)
        summary.update(self._get_summary())

    def action_show_alternatives(self) -> None:
        table = self.query_one("#results-table", DataTable)
        if table.cursor_row is not None and 0 <= table.cursor_row < len(self.results):
            result = self.results[table.cursor_row]
            if result.top_candidates:
                self.push_screen(AlternativesModal(result), callback=self._on_alternative_selected)

    def _on_alternative_selected(self, index: int | None) -> None:
        if index is not None:
            table = self.query_one("#results-table", DataTable)
            if table.cursor_row is not None:
                self.replace_result(table.cursor_row, index)
                self._refresh_table()

    def replace_result(self, row: int, index: int) -> None:
        """Re-price one row with the candidate at `index`."""
        self.results[row] = select_alternative(self.results[row], index, self.servings)

    def action_confirm(self) -> None:
        self.exit(ReviewResult(confirmed=True, results=self.results))

    def action_quit_cancel(self) -> None:
        self.exit(ReviewResult(confirmed=False, results=self.results))

    @on(Button.Pressed, "#btn-confirm")
    def on_confirm_button(self) -> None:
        self.action_confirm()

    @on(Button.Pressed, "#btn-cancel")
    def on_cancel_button(self) -> None:
        self.action_quit_cancel()


def interactive_review(
    summary: RecipePricingSummary,
    recipe_title: str | None = None,
) -> ReviewResult:
    """
    Launch interactive TUI for reviewing a pricing summary.

    Returns:
        ReviewResult with confirmed status and potentially overridden results
    """
    app = ReviewScreen(summary.results, recipe_title, summary.servings)
    result = app.run()
    # App exited without an explicit result
    if result is None:
        return ReviewResult(confirmed=False, results=summary.results)
    return result
