from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import MarkdownViewer

from utils.messages import ModeSwitchedMessage, NewOrderMessage
from utils.pure import markdown_table, revenue_by_day, store_stats, top_products
from views.base_screen import REQUEST_ERRORS, BaseScreen


class AnalyticsScreen(BaseScreen):
    """
    Store overview computed from orders/list.php and products/list.php.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-top", show_table_of_contents=False)

    def on_mount(self) -> None:
        self.handle_reload()

    @on(NewOrderMessage)
    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        api = self.app.state.api
        try:
            orders = (await api.orders.list()).data.orders
            products = (await api.products.list()).data.products
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to load analytics")
            return

        stats = store_stats(orders, products)
        daily = revenue_by_day(orders)
        top = top_products(products)

        md = (
            "### Overview\n\n"
            f"- Total Revenue: ${stats['total_revenue']:.2f}\n"
            f"- Orders: {stats['total_orders']}\n"
            f"- Products: {stats['total_products']}\n"
            f"- Customers: {stats['total_customers']}\n"
            f"- Avg Order Value: ${stats['avg_order_value']:.2f}\n\n"
            "### Revenue by Day\n\n"
            + (
                markdown_table(
                    ["Date", "Orders", "Revenue ($)"],
                    [[d["date"], d["orders"], f"{d['revenue']:.2f}"] for d in daily],
                    ["l", "r", "r"],
                )
                or "No orders yet."
            )
            + "\n\n### Top Products (by reviews)\n\n"
            + (
                markdown_table(
                    ["Product", "Reviews"],
                    [[t["name"], t["quantity"]] for t in top],
                    ["l", "r"],
                )
                or "No products yet."
            )
        )
        self.query_one("#md-top", MarkdownViewer).document.update(md)
