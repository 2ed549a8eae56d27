import logging
import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.endpoints import ShopApi  # noqa: E402
from api.session import SessionStore  # noqa: E402
from backend import BASE_URL, FakeBackend, user_record  # noqa: E402
from utils.logger import TokenMaskingFilter, get_logger  # noqa: E402
from utils.state import GlobalState  # noqa: E402


class GlobalStateTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.backend = FakeBackend()
        self.session = SessionStore()
        self.state = GlobalState(
            api=ShopApi.create(self.session, BASE_URL, transport=self.backend.transport())
        )

    async def asyncTearDown(self):
        await self.state.api.aclose()

    async def test_login_then_start_session(self):
        self.backend.route(
            "POST",
            "/auth/login.php",
            {"success": True, "data": {"user": user_record(role="admin"), "token": "tok-abc"}},
        )

        envelope = await self.state.api.auth.login("jane@example.com", "secret")
        user = await self.state.start_session(envelope)

        self.assertEqual(user.email, "jane@example.com")
        self.assertEqual(self.state.role, "staff")
        self.assertEqual(await self.session.get_token(), "tok-abc")

    async def test_restore_and_end_session(self):
        self.assertIsNone(await self.state.restore_session())
        self.assertIsNone(self.state.role)

        await self.session.set_session("tok-abc", user_record())
        user = await self.state.restore_session()
        self.assertEqual(user.id, "u-1")
        self.assertEqual(self.state.role, "customer")

        await self.state.end_session()
        self.assertIsNone(self.state.user)
        self.assertFalse(await self.session.is_authenticated())


class LoggerTestCase(unittest.TestCase):
    def test_bearer_tokens_are_masked(self):
        record = logging.LogRecord(
            "shop", logging.INFO, __file__, 1, "sent Authorization: Bearer %s", ("tok-abc",), None
        )
        self.assertTrue(TokenMaskingFilter().filter(record))
        self.assertEqual(record.getMessage(), "sent Authorization: Bearer ***")

    def test_plain_messages_untouched(self):
        record = logging.LogRecord("shop", logging.INFO, __file__, 1, "GET %s", ("/a.php",), None)
        TokenMaskingFilter().filter(record)
        self.assertEqual(record.getMessage(), "GET /a.php")

    def test_handler_attached_once(self):
        first = get_logger("shop.test")
        second = get_logger("shop.test")
        self.assertIs(first, second)
        self.assertEqual(len(second.handlers), 1)
        self.assertFalse(second.propagate)


if __name__ == "__main__":
    unittest.main()
