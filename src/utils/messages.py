from textual.message import Message


class QuitRequestedMessage(Message):
    """Posted by the quit dialog once the user confirmed."""

    bubble = True


class UserLogoutMessage(Message):
    """Posted by the sidebar, the app clears the session and shows the login screen."""

    bubble = True


class CartChangedMessage(Message):
    """
    Something was added, updated or removed in the cart.
    The cart screen reloads from /cart/list.php when it sees this.

    Post it on the app when sending from another screen.
    """

    bubble = True


class NewOrderMessage(Message):
    """An order was created; past orders and analytics reload."""

    bubble = True


class ModeSwitchedMessage(Message):
    """
    Sent right before switch_mode, from app level.
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
