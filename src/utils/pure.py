# side-effect free helpers shared by the screens
from datetime import datetime
from typing import Dict, Iterable, List, Literal, Optional, Sequence

from api.models import CartItem, Order, Product

FREE_SHIPPING_OVER = 50.0
FLAT_SHIPPING = 9.99
TAX_RATE = 0.08


def markdown_table(
    headers: Optional[Sequence[object]],
    rows: Sequence[Sequence[object]],
    aligns: Optional[Sequence[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Render rows as a Markdown table.

    Args:
        headers: column titles; when None the first row is used instead.
        rows: table body, cells are passed through str().
        aligns: 'l', 'c' or 'r' per column, centered by default.
    """
    if not rows:
        return ""
    if not headers:
        headers, rows = rows[0], rows[1:]

    width = len(headers)
    aligns = list(aligns) if aligns is not None else ["c"] * width
    if len(aligns) != width:
        raise ValueError("Length of aligns must match number of headers.")

    markers = {"l": ":---", "c": ":---:", "r": "---:"}

    def line(cells: Iterable[object]) -> str:
        return "| " + " | ".join(str(c) for c in cells) + " |"

    out = [line(headers), line(markers[a] for a in aligns)]
    out.extend(line(row) for row in rows)
    return "\n".join(out)


def order_totals(subtotal: float) -> Dict[str, float]:
    """Shipping and tax as shown at checkout; the backend computes the real ones."""
    shipping = 0.0 if subtotal > FREE_SHIPPING_OVER else FLAT_SHIPPING
    tax = subtotal * TAX_RATE
    return {
        "subtotal": subtotal,
        "shipping": shipping,
        "tax": tax,
        "total": subtotal + shipping + tax,
    }


def cart_subtotal(items: Iterable[CartItem]) -> float:
    # items without an embedded product cannot be priced client side
    return sum(item.product.price * item.quantity for item in items if item.product)


def _parse_created(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def day_label(value: str) -> str:
    """'2025-01-05 10:00:00' -> 'Jan 5'"""
    when = _parse_created(value)
    if when is None:
        return value[:10]
    return f"{when:%b} {when.day}"


def store_stats(orders: Sequence[Order], products: Sequence[Product]) -> Dict[str, float]:
    total_revenue = sum(o.total for o in orders)
    total_orders = len(orders)
    return {
        "total_revenue": total_revenue,
        "total_orders": total_orders,
        "total_products": len(products),
        "total_customers": len({o.user_id for o in orders}),
        "avg_order_value": total_revenue / total_orders if total_orders else 0.0,
    }


def revenue_by_day(orders: Iterable[Order]) -> List[Dict[str, object]]:
    """Revenue and order count per day, days in the order they first appear."""
    buckets: Dict[str, Dict[str, float]] = {}
    for order in orders:
        bucket = buckets.setdefault(day_label(order.created_at), {"revenue": 0.0, "orders": 0})
        bucket["revenue"] += order.total
        bucket["orders"] += 1
    return [
        {"date": day, "revenue": b["revenue"], "orders": int(b["orders"])}
        for day, b in buckets.items()
    ]


def top_products(products: Iterable[Product], k: int = 5) -> List[Dict[str, object]]:
    # no sales per product on the client, review count stands in for popularity
    ranked = sorted(products, key=lambda p: p.review_count or 0, reverse=True)[:k]
    return [
        {
            "name": p.name if len(p.name) <= 20 else p.name[:20] + "...",
            "quantity": p.review_count or 0,
        }
        for p in ranked
    ]


def customers_from_orders(orders: Iterable[Order]) -> List[Dict[str, object]]:
    """
    One entry per ordering user, with order count and amount spent.
    Address fields come from the first order seen for that user.
    """
    customers: Dict[str, Dict[str, object]] = {}
    for order in orders:
        existing = customers.get(order.user_id)
        if existing:
            existing["order_count"] += 1
            existing["total_spent"] += order.total
            continue
        customers[order.user_id] = {
            "id": order.user_id,
            "address": order.shipping_address,
            "city": order.shipping_city,
            "postal_code": order.shipping_postal_code,
            "country": order.shipping_country,
            "created_at": order.created_at,
            "order_count": 1,
            "total_spent": order.total,
        }
    return list(customers.values())
