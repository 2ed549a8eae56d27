from math import ceil
from typing import List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.widgets import Button, Checkbox, DataTable, Input, Label

from api.models import Product
from utils.messages import CartChangedMessage
from views.base_screen import REQUEST_ERRORS, BaseScreen
from views.modal_prod_detail import ProdDetailModal

PAGE_SIZE = 10


class ProdSearchScreen(BaseScreen):
    """
    Catalog browsing backed by products/list.php, one page of PAGE_SIZE at a time.
    """

    page_idx = reactive(1)
    page_cnt = reactive(1)

    def __init__(self):
        super().__init__()
        self._products: List[Product] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-search"):
            yield Input(id="input-search", placeholder="Search products...")
            yield Input(id="input-category", placeholder="category slug")
            yield Checkbox("Featured only", id="chk-featured")
        yield DataTable(id="table-search-result")
        with Horizontal(id="hort-table-control"):
            yield Button("<", id="btn-prev")
            yield Label("1 / 1", id="label-page")
            yield Button(">", id="btn-next")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Category", "Price", "Stock", "Rating")

        self.query_one("#input-search").focus()
        self.load_page(1)

    @on(Input.Changed, "#input-search")
    @on(Input.Changed, "#input-category")
    @on(Checkbox.Changed)
    def handle_filter_change(self) -> None:
        self.page_idx = 1
        self.load_page(1)

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        if self.page_idx > 1:
            self.page_idx -= 1
            self.load_page(self.page_idx)

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        if self.page_idx < self.page_cnt:
            self.page_idx += 1
            self.load_page(self.page_idx)

    @on(DataTable.RowSelected)
    @work()
    async def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        slug = event.row_key.value
        if await self.app.push_screen_wait(ProdDetailModal(slug)):
            self.app.post_message(CartChangedMessage())

    @work(exclusive=True)
    async def load_page(self, page: int) -> None:
        try:
            envelope = await self.app.state.api.products.list(
                search=self.query_one("#input-search", Input).value.strip() or None,
                category=self.query_one("#input-category", Input).value.strip() or None,
                featured=self.query_one("#chk-featured", Checkbox).value,
                limit=PAGE_SIZE,
                offset=(page - 1) * PAGE_SIZE,
            )
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to fetch products")
            return

        page_data = envelope.data
        self._products = page_data.products
        table = self.query_one(DataTable)
        table.clear()
        for p in self._products:
            table.add_row(
                p.name,
                p.category_name or "-",
                f"${p.price:.2f}",
                p.stock_quantity,
                f"{p.rating:.1f}" if p.rating is not None else "-",
                key=p.slug,
            )

        self.page_cnt = max(ceil(page_data.pagination.total / PAGE_SIZE), 1)
        self.query_one("#label-page", Label).update(f"{page} / {self.page_cnt}")
        self.query_one("#btn-prev", Button).disabled = page <= 1
        self.query_one("#btn-next", Button).disabled = page >= self.page_cnt
