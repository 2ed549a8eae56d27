from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from api.endpoints import ShopApi
from api.session import SessionStore, SqliteStore
from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage, UserLogoutMessage
from utils.state import GlobalState
from views.scr_analytics import AnalyticsScreen
from views.scr_cart import CartScreen
from views.scr_customers import CustomersScreen
from views.scr_login import LoginScreen
from views.scr_manage_product import ManageProductScreen
from views.scr_past_orders import PastOrdersScreen
from views.scr_prod_search import ProdSearchScreen
from views.scr_staff import StaffScreen

_logger = get_logger(__name__)


class ShopApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "prod_search": ProdSearchScreen,
        "cart": CartScreen,
        "past_orders": PastOrdersScreen,
        "analytics": AnalyticsScreen,
        "manage_products": ManageProductScreen,
        "customers": CustomersScreen,
        "staff": StaffScreen,
    }

    STAFF_MODES = {
        "analytics": "Analytics",
        "manage_products": "Products",
        "customers": "Customers",
        "staff": "Staff",
    }
    CUSTOMER_MODES = {
        "prod_search": "Browse Products",
        "cart": "Cart",
        "past_orders": "My Orders",
    }

    CSS_PATH = "views/styles/app.tcss"

    state: GlobalState

    def __init__(self, state: GlobalState | None = None):
        super().__init__()
        self.state = state or GlobalState(
            api=ShopApi.create(SessionStore(SqliteStore()))
        )

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.end_session()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        # the session stays stored so the next start skips the login screen
        await self.state.api.aclose()
        self.exit()

    @work
    async def main_flow(self):
        user = await self.state.restore_session()
        if user is None:
            await self.push_screen_wait(LoginScreen())
        else:
            _logger.info(f"Restored session for {user.email}")

        new_mode = "analytics" if self.state.role == "staff" else "prod_search"
        self.post_message(ModeSwitchedMessage(self.current_mode, new_mode))
        await self.switch_mode(new_mode)


def run() -> None:
    ShopApp().run()


if __name__ == "__main__":
    run()
