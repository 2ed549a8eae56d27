from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import DataTable, Input, MarkdownViewer

from api.errors import EndpointNotImplementedError
from utils.logger import get_logger
from utils.messages import NewOrderMessage
from utils.pure import customers_from_orders, markdown_table
from views.base_screen import REQUEST_ERRORS, BaseScreen

_logger = get_logger(__name__)


class CustomersScreen(BaseScreen):
    """
    Customers with their order count and spend.

    There is no customers endpoint yet, so the list is rebuilt from the orders.
    """

    def __init__(self) -> None:
        super().__init__()
        self._customers = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Input(id="input-search", placeholder="Filter by id, city or country...")
            yield DataTable(id="table-customers")
            yield MarkdownViewer(id="md-customer", show_table_of_contents=False)

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Customer", "City", "Country", "Orders", "Spent ($)")
        self.handle_reload()

    @on(ScreenResume)
    @on(NewOrderMessage)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        api = self.app.state.api
        try:
            try:
                await api.customers.list()
            except EndpointNotImplementedError as e:
                _logger.info(f"{e.message}, deriving customers from orders")
            orders = (await api.orders.list()).data.orders
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to fetch customers")
            return

        self._customers = customers_from_orders(orders)
        if not self._customers:
            self.notify("No customer data available yet")
        self._fill_table(self.query_one("#input-search", Input).value)

    @on(Input.Changed, "#input-search")
    def handle_search(self, message: Input.Changed) -> None:
        self._fill_table(message.value)

    def _fill_table(self, query: str) -> None:
        query = query.strip().lower()
        table = self.query_one(DataTable)
        table.clear()
        for c in self._customers:
            haystack = " ".join(str(c[k] or "") for k in ("id", "city", "country")).lower()
            if query and query not in haystack:
                continue
            table.add_row(
                c["id"],
                c["city"] or "-",
                c["country"] or "-",
                c["order_count"],
                f"{c['total_spent']:.2f}",
                key=c["id"],
            )

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        customer = next((c for c in self._customers if c["id"] == event.row_key.value), None)
        if customer is None:
            return
        rows = [
            ["Address", customer["address"] or "-"],
            ["City", customer["city"] or "-"],
            ["Postal Code", customer["postal_code"] or "-"],
            ["Country", customer["country"] or "-"],
            ["First order", customer["created_at"]],
        ]
        self.query_one("#md-customer", MarkdownViewer).document.update(
            f"### Customer {customer['id']}\n\n"
            + markdown_table(["Field", "Value"], rows, ["l", "l"])
        )
