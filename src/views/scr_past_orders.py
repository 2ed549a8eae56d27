from math import ceil
from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.reactive import reactive
from textual.widgets import Button, DataTable, Label, MarkdownViewer

from api.models import Order
from utils.messages import ModeSwitchedMessage, NewOrderMessage
from utils.pure import markdown_table
from views.base_screen import REQUEST_ERRORS, BaseScreen

PAGE_SIZE = 5


class PastOrdersScreen(BaseScreen):
    """
    Orders of the signed in customer, newest first, with the selected one's items.

    orders/list.php has no paging, the table pages client side.
    """

    page_idx = reactive(1)

    def __init__(self) -> None:
        super().__init__()
        self._orders: List[Order] = []

    @property
    def page_cnt(self) -> int:
        return max(ceil(len(self._orders) / PAGE_SIZE), 1)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")
            yield Button("<", id="btn-prev")
            yield Label("1 / 1", id="label-page")
            yield Button(">", id="btn-next")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Date", "Status", "Payment", "Total ($)")
        self.handle_refresh()

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(NewOrderMessage)
    @work(exclusive=True, group="orders")
    async def handle_refresh(self) -> None:
        try:
            orders = (await self.app.state.api.orders.list()).data.orders
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to load orders")
            return
        self._orders = sorted(orders, key=lambda o: o.created_at, reverse=True)
        self.page_idx = 1
        self._fill_table()

    def watch_page_idx(self, old: int, new: int) -> None:
        if self.is_mounted:
            self._fill_table()

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        if self.page_idx > 1:
            self.page_idx -= 1

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        if self.page_idx < self.page_cnt:
            self.page_idx += 1

    def _fill_table(self) -> None:
        start = (self.page_idx - 1) * PAGE_SIZE
        table = self.query_one(DataTable)
        table.clear()
        for o in self._orders[start : start + PAGE_SIZE]:
            table.add_row(
                o.order_number,
                o.created_at[:10],
                o.status,
                o.payment_status or "-",
                f"{o.total:.2f}",
                key=o.id,
            )

        self.query_one("#label-page", Label).update(f"{self.page_idx} / {self.page_cnt}")
        self.query_one("#btn-prev", Button).disabled = self.page_idx <= 1
        self.query_one("#btn-next", Button).disabled = self.page_idx >= self.page_cnt
        if table.row_count == 0:
            self._render_detail(None)

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is not None and event.row_key.value:
            self._load_detail(event.row_key.value)

    @work(exclusive=True, group="detail")
    async def _load_detail(self, order_id: str) -> None:
        try:
            order = (await self.app.state.api.orders.get_by_id(order_id)).data.order
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to load order")
            return
        self._render_detail(order)

    def _render_detail(self, order: Optional[Order]) -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if order is None:
            viewer.document.update("### Select an order to view its details.")
            return

        address = ", ".join(
            part
            for part in (
                order.shipping_address,
                order.shipping_city,
                order.shipping_postal_code,
                order.shipping_country,
            )
            if part
        )
        header = (
            f"### Order {order.order_number}\n"
            f"Date: {order.created_at}  \n"
            f"Status: {order.status} / payment {order.payment_status or '-'}  \n"
            f"Ship To: {address or '-'}\n\n"
        )
        rows = [
            [i.product_name, i.quantity, f"{i.product_price:.2f}", f"{i.subtotal:.2f}"]
            for i in order.items or []
        ]
        table = markdown_table(
            ["Product", "Qty", "Unit Price", "Line Total"], rows, ["l", "r", "r", "r"]
        )
        footer = (
            f"\n\nSubtotal: ${order.subtotal:.2f}  \n"
            f"Shipping: ${order.shipping:.2f}  \n"
            f"Tax: ${order.tax:.2f}  \n"
            f"**Total: ${order.total:.2f}**"
        )
        viewer.document.update(header + table + footer)
