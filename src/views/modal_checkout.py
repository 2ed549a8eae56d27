from typing import List

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer, RadioButton, RadioSet

from api.errors import ApiError
from api.models import PAYMENT_METHODS, CartItem, ShippingDetails
from utils.logger import get_logger
from utils.pure import cart_subtotal, markdown_table, order_totals
from views.base_screen import REQUEST_ERRORS
from views.modal_dialog import DialogModal

_logger = get_logger(__name__)

ADDRESS_FIELDS = {
    "input-address": "Address",
    "input-city": "City",
    "input-postal-code": "Postal Code",
    "input-country": "Country",
}


class CheckoutModal(ModalScreen[bool]):
    """
    Order summary, shipping form and payment method.
    Dismissed with True once orders/create.php accepted the order.
    """

    def __init__(self, items: List[CartItem]):
        super().__init__()
        self._items = items

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield MarkdownViewer("", show_table_of_contents=False)
            for input_id, caption in ADDRESS_FIELDS.items():
                yield Label(caption)
                yield Input(
                    value="United States" if input_id == "input-country" else "",
                    id=input_id,
                )
            yield Label("Payment Method")
            with RadioSet(id="radio-payment"):
                for i, (method, caption) in enumerate(PAYMENT_METHODS.items()):
                    yield RadioButton(caption, value=i == 0, id=f"radio-{method}")
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        rows = []
        for item in self._items:
            prod = item.product
            name = prod.name if prod else item.product_id
            price = prod.price if prod else 0.0
            rows.append([name, f"{price:.2f}", item.quantity, f"{price * item.quantity:.2f}"])

        totals = order_totals(cart_subtotal(self._items))
        md = "### Order Summary\n\n"
        md += markdown_table(
            ["Product", "Unit Price", "Quantity", "Total"], rows, ["l", "r", "c", "r"]
        )
        shipping = "Free" if totals["shipping"] == 0 else f"${totals['shipping']:.2f}"
        md += (
            f"\n\nSubtotal: ${totals['subtotal']:.2f}  \n"
            f"Shipping: {shipping}  \n"
            f"Tax: ${totals['tax']:.2f}  \n"
            f"**Total: ${totals['total']:.2f}**"
        )
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#input-address").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    def _payment_method(self) -> str:
        pressed = self.query_one("#radio-payment", RadioSet).pressed_button
        if pressed is None:
            return "card"
        return pressed.id.removeprefix("radio-")

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        values = {}
        for input_id, caption in ADDRESS_FIELDS.items():
            field = self.query_one(f"#{input_id}", Input)
            if not field.value.strip():
                field.focus()
                field.add_class("-invalid")
                self.notify(f"{caption} is required.", severity="error")
                return
            values[input_id] = field.value.strip()

        if not await self.app.push_screen_wait(
            DialogModal(
                "Place order? This cannot be undone.",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        shipping = ShippingDetails(
            shipping_address=values["input-address"],
            shipping_city=values["input-city"],
            shipping_postal_code=values["input-postal-code"],
            shipping_country=values["input-country"],
            payment_method=self._payment_method(),
            notes="",
        )
        self.query_one("#btn-submit", Button).disabled = True
        try:
            envelope = await self.app.state.api.orders.create(shipping)
        except ApiError as e:
            self.notify(e.message, severity="error")
            self.query_one("#btn-submit", Button).disabled = False
            return
        except REQUEST_ERRORS as e:
            # the order may or may not exist now; do not offer a blind retry
            _logger.error(f"Order creation outcome unknown: {e!r}")
            self.notify(
                "Could not confirm the order. Check My Orders before trying again.",
                severity="error",
            )
            self.dismiss(False)
            return

        order = envelope.data.order
        self.notify(f"Order placed. Your order number is {order.order_number}.")
        self.dismiss(True)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
