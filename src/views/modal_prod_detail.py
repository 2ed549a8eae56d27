from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer

from api.models import CartItem, Product
from utils.logger import get_logger
from utils.pure import markdown_table
from views.base_screen import REQUEST_ERRORS

_logger = get_logger(__name__)


class ProdDetailModal(ModalScreen[bool]):
    """
    Product detail plus add-to-cart.
    Dismissed with True if the cart changed.
    """

    CSS = """
    #input-order-qty {
        width: 10;
    }
    #btn-sub-qty, #btn-add-qty {
        min-width: 4;
    }
    """

    order_qty = reactive(1)

    def __init__(self, slug: str) -> None:
        super().__init__()

        self._slug = slug
        self._prod: Optional[Product] = None
        self._existing_cart_item: Optional[CartItem] = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Label("Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    @work(exclusive=True)
    async def on_mount(self):
        api = self.app.state.api
        try:
            self._prod = (await api.products.get_by_slug(self._slug)).data.product
            cart = (await api.cart.list()).data
        except REQUEST_ERRORS as e:
            _logger.warning(f"Could not open product {self._slug}: {e!r}")
            self.notify(str(e), severity="error")
            self.dismiss(False)
            return

        prod = self._prod
        rating = f"{prod.rating} ({prod.review_count or 0} reviews)" if prod.rating else "-"
        rows = [
            ["Price", f"${prod.price:.2f}"],
            ["Was", f"${prod.original_price:.2f}" if prod.original_price else "-"],
            ["Category", prod.category_name or "-"],
            ["In stock", prod.stock_quantity],
            ["Rating", rating],
        ]
        md = f"### {prod.name}\n\n{prod.description or ''}\n\n"
        md += markdown_table(["Attribute", "Value"], rows, ["l", "l"])
        await self.query_one(MarkdownViewer).document.update(md)

        if prod.stock_quantity < 1:
            order_btn = self.query_one("#btn-addcart", Button)
            order_btn.label = "Out of Stock"
            order_btn.disabled = True
            order_btn.variant = "warning"

        self.query_one("#input-order-qty", Input).validators = [
            Number(minimum=1, maximum=max(prod.stock_quantity, 1))
        ]

        for item in cart.items:
            if item.product_id == prod.id:
                self._existing_cart_item = item
                break
        if self._existing_cart_item:
            self.order_qty = self._existing_cart_item.quantity
            self.query_one("#btn-addcart", Button).label = "Update Cart"

        self.query_one("#input-order-qty").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.input.is_valid
            and self.focused == message.input
        ):
            self.order_qty = int(message.value)

    def watch_order_qty(self, qty: int) -> None:
        stock = self._prod.stock_quantity if self._prod else qty
        self.query_one("#btn-sub-qty", Button).disabled = qty <= 1
        self.query_one("#btn-add-qty", Button).disabled = qty >= stock
        self.query_one("#input-order-qty", Input).value = str(qty)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        self.order_qty -= 1

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    @work(exclusive=True)
    async def handle_addcart(self):
        cart = self.app.state.api.cart
        try:
            if self._existing_cart_item is None:
                envelope = await cart.add(self._prod.id, self.order_qty)
            else:
                envelope = await cart.update(self._existing_cart_item.id, self.order_qty)
        except REQUEST_ERRORS as e:
            self.notify(str(e), severity="error")
            return

        self.app.notify(envelope.message or "Cart updated.")
        self.dismiss(True)
