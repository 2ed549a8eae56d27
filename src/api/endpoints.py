# endpoint groups: fixed backend paths and payload shapes, no state of their own
from __future__ import annotations

from typing import Any, Dict, Optional, Union
from urllib.parse import quote, urlencode

import httpx

from api.client import ApiClient
from api.errors import EndpointNotImplementedError
from api.models import (
    AuthData,
    CartContents,
    Envelope,
    LoginRequest,
    OrderDetail,
    OrderList,
    ProductDetail,
    ProductFilters,
    ProductPage,
    RegisterRequest,
    ShippingDetails,
    UserSummary,
)
from api.session import SessionStore


def build_product_query(filters: Optional[ProductFilters]) -> str:
    """
    Query string for products/list.php, without the leading '?'.

    Keys keep a fixed order and only appear when their filter is truthy, so
    ``offset=0`` is not sent. ``featured`` is sent as the literal "1".
    """
    if filters is None:
        return ""
    params = []
    if filters.category:
        params.append(("category", filters.category))
    if filters.featured:
        params.append(("featured", "1"))
    if filters.search:
        params.append(("search", filters.search))
    if filters.limit:
        params.append(("limit", str(filters.limit)))
    if filters.offset:
        params.append(("offset", str(filters.offset)))
    return urlencode(params)


class _Group:
    def __init__(self, client: ApiClient):
        self._client = client

    @property
    def session(self) -> SessionStore:
        return self._client.session


# ---------------------------
# Auth
# ---------------------------


class AuthEndpoints(_Group):
    """
    register/login only return the envelope, storing the session is up to the
    caller. logout on the other hand clears the local session right away.
    """

    async def register(
        self, email: str, password: str, full_name: Optional[str] = None
    ) -> Envelope[AuthData]:
        body = RegisterRequest(email=email, password=password, full_name=full_name)
        return await self._client.request(
            "/auth/register.php", "POST", body=body, data_model=AuthData
        )

    async def login(self, email: str, password: str) -> Envelope[AuthData]:
        body = LoginRequest(email=email, password=password)
        return await self._client.request(
            "/auth/login.php", "POST", body=body, data_model=AuthData
        )

    async def logout(self) -> None:
        await self.session.clear_session()

    async def get_current_user(self) -> Optional[UserSummary]:
        return await self.session.get_current_user()

    async def is_authenticated(self) -> bool:
        return await self.session.is_authenticated()


# ---------------------------
# Products
# ---------------------------


class ProductEndpoints(_Group):
    async def list(
        self, filters: Union[ProductFilters, Dict[str, Any], None] = None, **kwargs: Any
    ) -> Envelope[ProductPage]:
        """``list(featured=True)``, ``list({"featured": True})`` and
        ``list(ProductFilters(featured=True))`` send the same request."""
        if filters is None and kwargs:
            filters = ProductFilters(**kwargs)
        elif isinstance(filters, dict):
            filters = ProductFilters(**filters)
        query = build_product_query(filters)
        endpoint = "/products/list.php" + (f"?{query}" if query else "")
        return await self._client.request(endpoint, "GET", data_model=ProductPage)

    async def get_by_slug(self, slug: str) -> Envelope[ProductDetail]:
        return await self._client.request(
            f"/products/details.php?slug={quote(slug, safe='')}",
            "GET",
            data_model=ProductDetail,
        )

    async def create(self, product: Dict[str, Any]) -> Envelope:
        raise EndpointNotImplementedError(
            "Product create/update endpoints not yet implemented"
        )

    async def update(self, product_id: str, product: Dict[str, Any]) -> Envelope:
        raise EndpointNotImplementedError(
            "Product create/update endpoints not yet implemented"
        )

    async def delete(self, product_id: str) -> Envelope:
        raise EndpointNotImplementedError("Product delete endpoint not yet implemented")


# ---------------------------
# Cart (the backend checks the token)
# ---------------------------


class CartEndpoints(_Group):
    async def add(self, product_id: str, quantity: int = 1) -> Envelope:
        """Adding a product already in the cart raises its quantity server side."""
        return await self._client.request(
            "/cart/add.php",
            "POST",
            body={"product_id": product_id, "quantity": quantity},
        )

    async def list(self) -> Envelope[CartContents]:
        return await self._client.request(
            "/cart/list.php", "GET", data_model=CartContents
        )

    async def update(self, item_id: str, quantity: int) -> Envelope:
        return await self._client.request(
            "/cart/update.php",
            "PUT",
            body={"item_id": item_id, "quantity": quantity},
        )

    async def remove(self, item_id: str) -> Envelope:
        return await self._client.request(
            "/cart/remove.php", "DELETE", body={"item_id": item_id}
        )


# ---------------------------
# Orders
# ---------------------------


class OrderEndpoints(_Group):
    async def create(
        self,
        shipping: Union[ShippingDetails, Dict[str, Any], None] = None,
        **fields: Any,
    ) -> Envelope[OrderDetail]:
        """
        Turn the current cart into an order.

        The backend reads the cart itself, so calling this twice places two
        orders. Do not retry it blindly after a transport error.
        """
        if shipping is None:
            shipping = ShippingDetails(**fields)
        elif isinstance(shipping, dict):
            shipping = ShippingDetails(**shipping)
        return await self._client.request(
            "/orders/create.php", "POST", body=shipping, data_model=OrderDetail
        )

    async def list(self) -> Envelope[OrderList]:
        return await self._client.request(
            "/orders/list.php", "GET", data_model=OrderList
        )

    async def get_by_id(self, order_id: str) -> Envelope[OrderDetail]:
        return await self._client.request(
            f"/orders/details.php?id={quote(str(order_id), safe='')}",
            "GET",
            data_model=OrderDetail,
        )


# ---------------------------
# Admin placeholders
# ---------------------------


class StaffEndpoints(_Group):
    async def list(self) -> Envelope:
        raise EndpointNotImplementedError("Staff management endpoints not yet implemented")

    async def add(self, email: str, role: str) -> Envelope:
        raise EndpointNotImplementedError("Add staff endpoint not yet implemented")

    async def update_role(self, user_id: str, role: str) -> Envelope:
        raise EndpointNotImplementedError("Update role endpoint not yet implemented")

    async def remove(self, user_id: str) -> Envelope:
        raise EndpointNotImplementedError("Remove staff endpoint not yet implemented")


class CustomerEndpoints(_Group):
    async def list(self) -> Envelope:
        raise EndpointNotImplementedError("Customers list endpoint not yet implemented")


class ShopApi:
    """All endpoint groups over one ApiClient."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.auth = AuthEndpoints(client)
        self.products = ProductEndpoints(client)
        self.cart = CartEndpoints(client)
        self.orders = OrderEndpoints(client)
        self.staff = StaffEndpoints(client)
        self.customers = CustomerEndpoints(client)

    @classmethod
    def create(
        cls,
        session: Optional[SessionStore] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> ShopApi:
        return cls(ApiClient(session or SessionStore(), base_url, transport=transport))

    @property
    def session(self) -> SessionStore:
        return self.client.session

    async def __aenter__(self) -> ShopApi:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()
