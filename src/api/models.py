# pydantic models for everything exchanged with the storefront backend

from typing import Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

STAFF_ROLES = ("super_admin", "admin", "product_staff")
ROLE_LABELS: Dict[str, str] = {
    "customer": "Customer",
    "super_admin": "Super Admin",
    "admin": "Admin",
    "product_staff": "Product Staff",
}

PaymentMethod = Literal["card", "paypal", "cod"]
PAYMENT_METHODS: Dict[str, str] = {
    "card": "Credit / Debit Card",
    "paypal": "PayPal",
    "cod": "Cash on Delivery",
}


class Record(BaseModel):
    # the PHP backend sends numeric ids and decimals-as-strings, accept both
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class UserSummary(Record):
    id: str
    email: str
    full_name: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class Product(Record):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    price: float
    original_price: Optional[float] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    category_slug: Optional[str] = None
    stock_quantity: int = 0
    is_featured: bool = False
    rating: Optional[float] = None
    review_count: Optional[int] = None
    created_at: str
    updated_at: str


class Pagination(Record):
    total: int
    limit: int
    offset: int


class CartItem(Record):
    id: str
    user_id: str
    product_id: str
    quantity: int
    product: Optional[Product] = None
    created_at: str
    updated_at: str


class OrderItem(Record):
    id: str
    order_id: str
    product_id: str
    product_name: str
    product_price: float
    quantity: int
    subtotal: float


class Order(Record):
    id: str
    user_id: str
    order_number: str
    status: str
    subtotal: float
    tax: float
    shipping: float
    total: float
    shipping_address: Optional[str] = None
    shipping_city: Optional[str] = None
    shipping_postal_code: Optional[str] = None
    shipping_country: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str
    items: Optional[List[OrderItem]] = None


DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    """
    Wrapper of every backend response.
    Callers read ``.data`` themselves, it is None when the endpoint sends nothing.
    """

    model_config = ConfigDict(extra="ignore")

    success: bool
    message: Optional[str] = None
    data: Optional[DataT] = None


# ---------------------------
# Response payloads
# ---------------------------


class AuthData(Record):
    user: UserSummary
    token: str


class ProductPage(Record):
    products: List[Product] = Field(default_factory=list)
    pagination: Pagination


class ProductDetail(Record):
    product: Product


class CartContents(Record):
    items: List[CartItem] = Field(default_factory=list)


class OrderDetail(Record):
    order: Order


class OrderList(Record):
    orders: List[Order] = Field(default_factory=list)


# ---------------------------
# Request bodies
# ---------------------------


class RegisterRequest(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class ProductFilters(BaseModel):
    category: Optional[str] = None
    featured: Optional[bool] = None
    search: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


class ShippingDetails(BaseModel):
    """Body of an order creation; the cart itself is read server side."""

    shipping_address: str
    shipping_city: str
    shipping_postal_code: str
    shipping_country: str
    payment_method: PaymentMethod = "card"
    notes: Optional[str] = None


class Session(BaseModel):
    token: Optional[str] = None
    user: Optional[UserSummary] = None
