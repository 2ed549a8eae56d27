from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.message import Message
from textual.widgets import Button, Label, Rule

from api.models import CartItem
from utils.messages import CartChangedMessage, ModeSwitchedMessage, NewOrderMessage
from utils.pure import cart_subtotal
from views.base_screen import REQUEST_ERRORS, BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal
from views.modal_prod_detail import ProdDetailModal


class CartItemActionEditMessage(Message):
    bubble = True


class CartItemActionRemoveMessage(Message):
    bubble = True


class CartItemActionLabel(Label):
    def action_edit(self):
        self.post_message(CartItemActionEditMessage())

    def action_remove(self):
        self.post_message(CartItemActionRemoveMessage())


class CartItemWidget(HorizontalGroup):
    def __init__(self, item: CartItem):
        super().__init__()
        self.item = item

    def compose(self):
        prod = self.item.product
        name = prod.name if prod else f"Product {self.item.product_id}"
        price = f"${prod.price * self.item.quantity:.2f}" if prod else "-"
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(name, id="label-item-name")
                yield Label(str(self.item.quantity), id="label-item-qty")
                yield Label(price, id="label-item-price")
            with Container(id="div-actions"):
                if prod:
                    yield CartItemActionLabel("[@click=edit()]Edit[/]", id="link-item-edit")
                yield CartItemActionLabel("[@click=remove()]Remove[/]", id="link-item-remove")

    @on(CartItemActionEditMessage)
    @work()
    async def handle_edit_item(self):
        if await self.app.push_screen_wait(ProdDetailModal(self.item.product.slug)):
            self.post_message(CartChangedMessage())

    @on(CartItemActionRemoveMessage)
    @work()
    async def handle_remove_item(self):
        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove this item from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        )
        if not remove_confirmed:
            return

        try:
            await self.app.state.api.cart.remove(self.item.id)
        except REQUEST_ERRORS as e:
            self.notify(str(e), severity="error")
            return
        self.post_message(CartChangedMessage())
        self.notify("Item removed from cart.", severity="information")


class CartScreen(BaseScreen):
    """
    Items from cart/list.php, editable one by one, and the way to checkout.
    """

    def __init__(self) -> None:
        super().__init__()
        self._items: list[CartItem] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Subtotal: $0.00", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Refresh", id="btn-refresh")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self):
        self.handle_cart_change()

    @on(CartChangedMessage)
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True)  # exclusive, two reloads would mount the items twice
    async def handle_cart_change(self):
        try:
            items = (await self.app.state.api.cart.list()).data.items
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to load cart")
            return

        self._items = items
        content = self.query_one("#vertscroll-content")
        await content.remove_children()
        await content.mount_all([CartItemWidget(item) for item in items])
        content.set_class(not items, "no-items")

        self.query_one("#label-cart-total", Label).update(
            f"Subtotal: ${cart_subtotal(items):.2f}"
        )

    @on(Button.Pressed, "#btn-clear-cart")
    @work(exclusive=True, group="cart-actions")
    async def handle_clear_cart(self) -> None:
        if not self._items:
            self.app.notify("Cart is empty.", severity="warning")
            return

        if not await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        ):
            return

        # there is no bulk endpoint, remove one by one
        try:
            for item in self._items:
                await self.app.state.api.cart.remove(item.id)
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to clear cart")
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-checkout")
    @work(exclusive=True, group="cart-actions")
    async def handle_checkout(self) -> None:
        if not self._items:
            self.app.notify("Cart is empty.", severity="warning")
            return

        if await self.app.push_screen_wait(CheckoutModal(self._items)):
            self.app.post_message(NewOrderMessage())
        self.post_message(CartChangedMessage())
