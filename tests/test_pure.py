import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.models import CartItem, Order, Product  # noqa: E402
from backend import order_record, product_record  # noqa: E402
from utils.pure import (  # noqa: E402
    cart_subtotal,
    customers_from_orders,
    day_label,
    markdown_table,
    order_totals,
    revenue_by_day,
    store_stats,
    top_products,
)


def cart_item(quantity, price=None):
    return CartItem(
        id=f"ci-{quantity}",
        user_id="u-1",
        product_id="prod-123",
        quantity=quantity,
        product=product_record(price=price) if price is not None else None,
        created_at="2025-01-05 09:00:00",
        updated_at="2025-01-05 09:00:00",
    )


class CheckoutMathTestCase(unittest.TestCase):
    def test_small_order_pays_shipping(self):
        totals = order_totals(40.0)
        self.assertEqual(totals["shipping"], 9.99)
        self.assertAlmostEqual(totals["tax"], 3.2)
        self.assertAlmostEqual(totals["total"], 53.19)

    def test_free_shipping_strictly_over_fifty(self):
        self.assertEqual(order_totals(50.0)["shipping"], 9.99)
        self.assertEqual(order_totals(50.01)["shipping"], 0.0)

    def test_cart_subtotal_skips_items_without_product(self):
        items = [cart_item(2, price=10.0), cart_item(1, price=5.5), cart_item(3)]
        self.assertAlmostEqual(cart_subtotal(items), 25.5)
        self.assertEqual(cart_subtotal([]), 0)


class ReportTestCase(unittest.TestCase):
    def setUp(self):
        self.orders = [
            Order(**order_record(id="o1", user_id="u-1", total=100, created_at="2025-01-05 10:00:00")),
            Order(**order_record(id="o2", user_id="u-2", total=50, created_at="2025-01-05 18:30:00")),
            Order(**order_record(id="o3", user_id="u-1", total=25, created_at="2025-01-07 08:00:00")),
        ]

    def test_store_stats(self):
        products = [Product(**product_record()), Product(**product_record(id="p2"))]
        stats = store_stats(self.orders, products)
        self.assertEqual(stats["total_revenue"], 175)
        self.assertEqual(stats["total_orders"], 3)
        self.assertEqual(stats["total_products"], 2)
        self.assertEqual(stats["total_customers"], 2)
        self.assertAlmostEqual(stats["avg_order_value"], 175 / 3)

    def test_store_stats_without_orders(self):
        stats = store_stats([], [])
        self.assertEqual(stats["avg_order_value"], 0.0)
        self.assertEqual(stats["total_customers"], 0)

    def test_revenue_by_day(self):
        self.assertEqual(
            revenue_by_day(self.orders),
            [
                {"date": "Jan 5", "revenue": 150.0, "orders": 2},
                {"date": "Jan 7", "revenue": 25.0, "orders": 1},
            ],
        )

    def test_day_label_unparseable(self):
        self.assertEqual(day_label("yesterday"), "yesterday")
        self.assertEqual(day_label("2025-03-09T07:00:00"), "Mar 9")

    def test_top_products(self):
        products = [
            Product(**product_record(id="a", name="Short", review_count=3)),
            Product(**product_record(id="b", name="A very long product name here", review_count=10)),
            Product(**product_record(id="c", name="No reviews", review_count=None)),
        ]
        top = top_products(products, k=2)
        self.assertEqual(
            top,
            [
                {"name": "A very long product ...", "quantity": 10},
                {"name": "Short", "quantity": 3},
            ],
        )

    def test_customers_from_orders(self):
        customers = customers_from_orders(self.orders)
        self.assertEqual([c["id"] for c in customers], ["u-1", "u-2"])
        self.assertEqual(customers[0]["order_count"], 2)
        self.assertEqual(customers[0]["total_spent"], 125)
        self.assertEqual(customers[0]["city"], "Springfield")
        self.assertEqual(customers[1]["order_count"], 1)


class MarkdownTableTestCase(unittest.TestCase):
    def test_table(self):
        md = markdown_table(["Name", "Qty"], [["Lamp", 2]], ["l", "r"])
        self.assertEqual(md, "| Name | Qty |\n| :--- | ---: |\n| Lamp | 2 |")

    def test_first_row_as_header(self):
        md = markdown_table(None, [["k", "v"], ["a", 1]])
        self.assertEqual(md.splitlines()[0], "| k | v |")
        self.assertEqual(md.splitlines()[1], "| :---: | :---: |")

    def test_empty_rows(self):
        self.assertEqual(markdown_table(["a"], []), "")

    def test_align_length_mismatch(self):
        with self.assertRaises(ValueError):
            markdown_table(["a", "b"], [[1, 2]], ["l"])


if __name__ == "__main__":
    unittest.main()
