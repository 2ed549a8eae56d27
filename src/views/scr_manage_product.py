from __future__ import annotations

from typing import Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer, OptionList
from textual.widgets.option_list import Option

from api.errors import EndpointNotImplementedError
from api.models import Product
from utils.pure import markdown_table
from views.base_screen import REQUEST_ERRORS, BaseScreen
from views.modal_dialog import DialogModal


class ManageProductScreen(BaseScreen):
    """
    Staff look up a product and edit price/stock or delete it.
    The backend has no write endpoints yet, saving reports that.
    """

    current: Optional[Product] = None

    def __init__(self) -> None:
        super().__init__()
        self._found: Dict[str, Product] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Input(id="input-search", placeholder="Search for product...")
            yield OptionList(id="optlist-prods")
            yield MarkdownViewer(id="md-prod", show_table_of_contents=False)
            with Horizontal(id="hort-controls"):
                with Vertical():
                    yield Label("New Price ($):")
                    yield Input(
                        id="input-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Vertical():
                    yield Label("New Stock:")
                    yield Input(
                        id="input-stock",
                        type="integer",
                        validators=[Number(minimum=0)],
                    )
                yield Button("Save", id="btn-update", variant="success")
                yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        self.query_one("#input-search", Input).focus()
        self.query_one("#md-prod").add_class("hidden")
        self.query_one("#hort-controls").add_class("hidden")
        self.update_optlist("")

    @on(Input.Changed, "#input-search")
    def handle_search(self, message: Input.Changed) -> None:
        self.query_one("#optlist-prods").remove_class("hidden")
        self.update_optlist(message.value.strip())

    @work(exclusive=True, group="search")
    async def update_optlist(self, query: str) -> None:
        try:
            page = (
                await self.app.state.api.products.list(search=query or None, limit=50)
            ).data
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to fetch products")
            return

        self._found = {p.id: p for p in page.products}
        opt_list = self.query_one("#optlist-prods", OptionList)
        opt_list.clear_options()
        opt_list.add_options(
            [
                Option(f"{p.name}  (${p.price:.2f}, {p.stock_quantity} left)", id=p.id)
                for p in page.products
            ]
        )

    def on_option_list_option_selected(self, message: OptionList.OptionSelected):
        self.current = self._found.get(message.option.id)
        if self.current is None:
            return
        self.render_product()
        self.query_one("#optlist-prods").add_class("hidden")
        self.query_one("#md-prod").remove_class("hidden")
        self.query_one("#hort-controls").remove_class("hidden")

    def render_product(self) -> None:
        prod = self.current
        rows = [
            ["Slug", prod.slug],
            ["Category", prod.category_name or "-"],
            ["Price", f"${prod.price:.2f}"],
            ["Stock", prod.stock_quantity],
            ["Featured", "yes" if prod.is_featured else "no"],
            ["Updated", prod.updated_at],
        ]
        self.query_one("#md-prod", MarkdownViewer).document.update(
            f"### {prod.name}\n\n" + markdown_table(["Attribute", "Value"], rows, ["l", "l"])
        )
        self.query_one("#input-price", Input).value = f"{prod.price:.2f}"
        self.query_one("#input-stock", Input).value = str(prod.stock_quantity)

    @on(Button.Pressed, "#btn-update")
    @work(exclusive=True)
    async def handle_update(self) -> None:
        price_input = self.query_one("#input-price", Input)
        stock_input = self.query_one("#input-stock", Input)
        for field in (price_input, stock_input):
            if not field.value or not field.is_valid:
                field.focus()
                field.add_class("-invalid")
                return

        new_price = float(price_input.value)
        new_stock = int(stock_input.value)
        if new_price == self.current.price and new_stock == self.current.stock_quantity:
            self.notify("Nothing to update.", severity="warning")
            return

        try:
            await self.app.state.api.products.update(
                self.current.id, {"price": new_price, "stock_quantity": new_stock}
            )
        except EndpointNotImplementedError as e:
            self.notify(e.message, severity="error")
            return
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to save product")
            return
        self.notify("Product updated.")

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Delete {self.current.name}?",
                primary_text="Delete",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return
        try:
            await self.app.state.api.products.delete(self.current.id)
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to delete product")
            return
        self.notify("Product deleted.")
