import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.endpoints import ShopApi, build_product_query  # noqa: E402
from api.errors import ApiError, EndpointNotImplementedError  # noqa: E402
from api.models import ProductFilters, ShippingDetails  # noqa: E402
from api.session import SessionStore  # noqa: E402
from backend import (  # noqa: E402
    BASE_URL,
    FakeBackend,
    order_record,
    product_record,
    user_record,
)

SHIPPING = {
    "shipping_address": "1 Main St",
    "shipping_city": "Springfield",
    "shipping_postal_code": "12345",
    "shipping_country": "United States",
    "payment_method": "card",
}


class EndpointTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.backend = FakeBackend()
        self.session = SessionStore()
        self.api = ShopApi.create(self.session, BASE_URL, transport=self.backend.transport())

    async def asyncTearDown(self):
        await self.api.aclose()

    def sent_query(self) -> str:
        return self.backend.last.url.query.decode()


class AuthTestCase(EndpointTestCase):
    async def test_login_returns_envelope_without_storing_session(self):
        self.backend.route(
            "POST",
            "/auth/login.php",
            {
                "success": True,
                "message": "Login successful",
                "data": {"user": user_record(), "token": "tok-abc"},
            },
        )

        envelope = await self.api.auth.login("jane@example.com", "secret")

        self.assertEqual(self.backend.last.method, "POST")
        self.assertEqual(
            self.backend.last_json(), {"email": "jane@example.com", "password": "secret"}
        )
        self.assertEqual(envelope.data.token, "tok-abc")
        self.assertEqual(envelope.data.user.full_name, "Jane Doe")
        # storing it is the caller's job
        self.assertFalse(await self.api.auth.is_authenticated())
        self.assertIsNone(await self.api.auth.get_current_user())

    async def test_register_omits_missing_full_name(self):
        self.backend.route(
            "POST",
            "/auth/register.php",
            {"success": True, "data": {"user": user_record(full_name=None), "token": "t"}},
        )

        await self.api.auth.register("jane@example.com", "secret")
        self.assertEqual(
            self.backend.last_json(), {"email": "jane@example.com", "password": "secret"}
        )

        await self.api.auth.register("jane@example.com", "secret", "Jane Doe")
        self.assertEqual(self.backend.last_json()["full_name"], "Jane Doe")

    async def test_register_conflict(self):
        self.backend.route(
            "POST",
            "/auth/register.php",
            {"success": False, "message": "Email already registered"},
            status=409,
        )

        with self.assertRaises(ApiError) as ctx:
            await self.api.auth.register("jane@example.com", "secret")
        self.assertEqual(ctx.exception.message, "Email already registered")

    async def test_logout_clears_local_session(self):
        await self.session.set_session("tok-abc", user_record())
        self.assertTrue(await self.api.auth.is_authenticated())
        self.assertEqual((await self.api.auth.get_current_user()).id, "u-1")

        await self.api.auth.logout()

        self.assertFalse(await self.api.auth.is_authenticated())
        self.assertIsNone(await self.api.auth.get_current_user())
        self.assertEqual(self.backend.requests, [])


class ProductsTestCase(EndpointTestCase):
    def page(self, products):
        return {
            "success": True,
            "data": {
                "products": products,
                "pagination": {"total": len(products), "limit": 20, "offset": 0},
            },
        }

    async def test_featured_filter_only(self):
        self.backend.route("GET", "/products/list.php", self.page([product_record()]))

        envelope = await self.api.products.list({"featured": True})

        self.assertEqual(self.backend.last.url.path, "/api/products/list.php")
        self.assertEqual(self.sent_query(), "featured=1")
        self.assertEqual(envelope.data.products[0].slug, "wireless-headphones")
        self.assertEqual(envelope.data.pagination.total, 1)

    async def test_limit_and_offset(self):
        self.backend.route("GET", "/products/list.php", self.page([]))

        await self.api.products.list(limit=10, offset=20)

        self.assertEqual(self.sent_query(), "limit=10&offset=20")

    async def test_no_filters_no_query_string(self):
        self.backend.route("GET", "/products/list.php", self.page([]))

        await self.api.products.list()

        self.assertEqual(self.sent_query(), "")
        self.assertEqual(str(self.backend.last.url), f"{BASE_URL}/products/list.php")

    async def test_all_filters_in_fixed_order(self):
        self.backend.route("GET", "/products/list.php", self.page([]))

        await self.api.products.list(
            ProductFilters(offset=5, limit=5, search="lamp", featured=True, category="home")
        )

        self.assertEqual(
            self.sent_query(), "category=home&featured=1&search=lamp&limit=5&offset=5"
        )

    async def test_falsy_filters_are_left_out(self):
        query = build_product_query(
            ProductFilters(category="", featured=False, search=None, limit=0, offset=0)
        )
        self.assertEqual(query, "")
        self.assertEqual(build_product_query(None), "")

    async def test_backend_strings_are_coerced(self):
        self.backend.route(
            "GET",
            "/products/list.php",
            self.page(
                [product_record(id=5, price="12.50", stock_quantity="3", is_featured=0)]
            ),
        )

        product = (await self.api.products.list()).data.products[0]

        self.assertEqual(product.id, "5")
        self.assertEqual(product.price, 12.5)
        self.assertEqual(product.stock_quantity, 3)
        self.assertFalse(product.is_featured)

    async def test_get_by_slug(self):
        self.backend.route(
            "GET",
            "/products/details.php",
            {"success": True, "data": {"product": product_record()}},
        )

        envelope = await self.api.products.get_by_slug("wireless-headphones")

        self.assertEqual(self.sent_query(), "slug=wireless-headphones")
        self.assertEqual(envelope.data.product.name, "Wireless Headphones")

    async def test_get_by_slug_not_found(self):
        self.backend.route(
            "GET",
            "/products/details.php",
            {"success": False, "message": "Product not found"},
            status=404,
        )

        with self.assertRaises(ApiError) as ctx:
            await self.api.products.get_by_slug("nope")
        self.assertEqual(str(ctx.exception), "Product not found")

    async def test_write_operations_are_placeholders(self):
        calls = [
            self.api.products.create({"name": "x"}),
            self.api.products.update("prod-1", {"price": 1}),
            self.api.products.delete("prod-1"),
        ]
        for call in calls:
            with self.assertRaises(EndpointNotImplementedError):
                await call
        self.assertEqual(self.backend.requests, [])


class CartTestCase(EndpointTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        await self.session.set_session("tok-abc", user_record())

    async def test_add_sends_token_and_body(self):
        self.backend.route("POST", "/cart/add.php", {"success": True, "message": "Added"})

        envelope = await self.api.cart.add("prod-123", 2)

        sent = self.backend.last
        self.assertEqual(sent.method, "POST")
        self.assertEqual(sent.url.path, "/api/cart/add.php")
        self.assertEqual(sent.headers["Authorization"], "Bearer tok-abc")
        self.assertEqual(self.backend.last_json(), {"product_id": "prod-123", "quantity": 2})
        self.assertTrue(envelope.success)
        self.assertEqual(envelope.message, "Added")

    async def test_add_defaults_to_one(self):
        self.backend.route("POST", "/cart/add.php", {"success": True, "message": "Added"})

        await self.api.cart.add("prod-123")

        self.assertEqual(self.backend.last_json()["quantity"], 1)

    async def test_list_embeds_products(self):
        item = {
            "id": "ci-1",
            "user_id": "u-1",
            "product_id": "prod-123",
            "quantity": 2,
            "product": product_record(),
            "created_at": "2025-01-05 09:00:00",
            "updated_at": "2025-01-05 09:00:00",
        }
        self.backend.route("GET", "/cart/list.php", {"success": True, "data": {"items": [item]}})

        items = (await self.api.cart.list()).data.items

        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].product.price, 79.99)
        self.assertEqual(items[0].quantity, 2)

    async def test_update_and_remove(self):
        self.backend.route("PUT", "/cart/update.php", {"success": True, "message": "Updated"})
        self.backend.route("DELETE", "/cart/remove.php", {"success": True, "message": "Removed"})

        await self.api.cart.update("ci-1", 0)
        self.assertEqual(self.backend.last.method, "PUT")
        # no client side check on the quantity
        self.assertEqual(self.backend.last_json(), {"item_id": "ci-1", "quantity": 0})

        await self.api.cart.remove("ci-1")
        self.assertEqual(self.backend.last.method, "DELETE")
        self.assertEqual(self.backend.last_json(), {"item_id": "ci-1"})

    async def test_unauthorized(self):
        await self.session.clear_session()
        self.backend.route(
            "GET", "/cart/list.php", {"success": False, "message": "Unauthorized"}, status=401
        )

        with self.assertRaises(ApiError) as ctx:
            await self.api.cart.list()
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertNotIn("Authorization", self.backend.last.headers)


class OrdersTestCase(EndpointTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        await self.session.set_session("tok-abc", user_record())

    async def test_create_with_empty_cart(self):
        self.backend.route(
            "POST", "/orders/create.php", {"success": False, "message": "Cart is empty"}
        )

        with self.assertRaises(ApiError) as ctx:
            await self.api.orders.create(SHIPPING)
        self.assertEqual(str(ctx.exception), "Cart is empty")

    async def test_create_returns_order(self):
        self.backend.route(
            "POST",
            "/orders/create.php",
            {"success": True, "data": {"order": order_record()}},
        )

        envelope = await self.api.orders.create(ShippingDetails(**SHIPPING, notes=""))

        self.assertEqual(self.backend.last_json(), {**SHIPPING, "notes": ""})
        self.assertEqual(envelope.data.order.order_number, "ORD-20250105-0001")
        self.assertEqual(envelope.data.order.shipping, 0.0)

    async def test_create_from_keywords_drops_missing_notes(self):
        self.backend.route(
            "POST",
            "/orders/create.php",
            {"success": True, "data": {"order": order_record()}},
        )

        await self.api.orders.create(**SHIPPING)

        self.assertEqual(self.backend.last_json(), SHIPPING)

    async def test_list_and_details(self):
        self.backend.route(
            "GET",
            "/orders/list.php",
            {"success": True, "data": {"orders": [order_record(), order_record(id="ord-2")]}},
        )
        detailed = order_record(
            items=[
                {
                    "id": "oi-1",
                    "order_id": "ord-1",
                    "product_id": "prod-123",
                    "product_name": "Wireless Headphones",
                    "product_price": "79.99",
                    "quantity": 1,
                    "subtotal": "79.99",
                }
            ]
        )
        self.backend.route(
            "GET", "/orders/details.php", {"success": True, "data": {"order": detailed}}
        )

        orders = (await self.api.orders.list()).data.orders
        self.assertEqual([o.id for o in orders], ["ord-1", "ord-2"])
        self.assertIsNone(orders[0].items)

        order = (await self.api.orders.get_by_id("ord-1")).data.order
        self.assertEqual(self.sent_query(), "id=ord-1")
        self.assertEqual(order.items[0].subtotal, 79.99)


class PlaceholderGroupsTestCase(EndpointTestCase):
    async def test_staff_and_customers_raise_not_implemented(self):
        calls = [
            self.api.staff.list(),
            self.api.staff.add("new@example.com", "product_staff"),
            self.api.staff.update_role("u-2", "admin"),
            self.api.staff.remove("u-2"),
            self.api.customers.list(),
        ]
        for call in calls:
            with self.assertRaises(EndpointNotImplementedError) as ctx:
                await call
            self.assertIn("not yet implemented", str(ctx.exception))
        self.assertEqual(self.backend.requests, [])


if __name__ == "__main__":
    unittest.main()
