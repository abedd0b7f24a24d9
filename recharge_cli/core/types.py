"""
Core types for Recharge API resources.

These dataclasses provide type safety and IDE support for API responses.
Unknown fields are ignored; missing fields default to None.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from recharge_cli.core.enums import ChargeStatus, CollectionSortOrder, DiscountStatus, OrderStatus, SubscriptionStatus

E = TypeVar("E", bound=Enum)


def _int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _enum(enum_cls: type[E], value: Any) -> E | None:
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _text(value: Any) -> str | None:
    """Strings pass through; structured values are JSON-encoded."""
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


# =============================================================================
# Customers & Addresses
# =============================================================================


@dataclass
class Customer:
    """A Recharge customer."""

    id: int
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    hash: str | None = None
    external_customer_id: dict[str, Any] | None = None
    subscriptions_active_count: int | None = None
    subscriptions_total_count: int | None = None
    has_valid_payment_method: bool | None = None
    tax_exempt: bool | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Customer":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            email=data.get("email"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            phone=data.get("phone"),
            hash=data.get("hash"),
            external_customer_id=data.get("external_customer_id"),
            subscriptions_active_count=_int(data.get("subscriptions_active_count")),
            subscriptions_total_count=_int(data.get("subscriptions_total_count")),
            has_valid_payment_method=data.get("has_valid_payment_method"),
            tax_exempt=data.get("tax_exempt"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class Address:
    """A shipping address belonging to a customer."""

    id: int
    customer_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    province: str | None = None
    zip: str | None = None
    country_code: str | None = None
    phone: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Address":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            customer_id=_int(data.get("customer_id")),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            address1=data.get("address1"),
            address2=data.get("address2"),
            city=data.get("city"),
            province=data.get("province"),
            zip=data.get("zip"),
            # 2021-01 calls it "country", 2021-11 "country_code"
            country_code=data.get("country_code") or data.get("country"),
            phone=data.get("phone"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


# =============================================================================
# Subscriptions
# =============================================================================


@dataclass
class Subscription:
    """A recurring subscription."""

    id: int
    customer_id: int | None = None
    address_id: int | None = None
    status: SubscriptionStatus | None = None
    product_title: str | None = None
    variant_title: str | None = None
    quantity: int | None = None
    price: str | None = None
    order_interval_unit: str | None = None
    order_interval_frequency: int | None = None
    charge_interval_frequency: int | None = None
    next_charge_scheduled_at: str | None = None
    cancelled_at: str | None = None
    cancellation_reason: str | None = None
    external_product_id: dict[str, Any] | None = None
    external_variant_id: dict[str, Any] | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status is SubscriptionStatus.ACTIVE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subscription":
        """Create from API response dict."""
        price = data.get("price")
        return cls(
            id=_int(data.get("id")) or 0,
            customer_id=_int(data.get("customer_id")),
            address_id=_int(data.get("address_id")),
            status=_enum(SubscriptionStatus, data.get("status")),
            product_title=data.get("product_title") or data.get("title"),
            variant_title=data.get("variant_title"),
            quantity=_int(data.get("quantity")),
            price=str(price) if price is not None else None,
            order_interval_unit=data.get("order_interval_unit"),
            order_interval_frequency=_int(data.get("order_interval_frequency")),
            charge_interval_frequency=_int(data.get("charge_interval_frequency")),
            next_charge_scheduled_at=data.get("next_charge_scheduled_at") or data.get("scheduled_at"),
            cancelled_at=data.get("cancelled_at"),
            cancellation_reason=data.get("cancellation_reason"),
            external_product_id=data.get("external_product_id"),
            external_variant_id=data.get("external_variant_id"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class OneTime:
    """A one-time (non-recurring) line item attached to an address."""

    id: int
    address_id: int | None = None
    customer_id: int | None = None
    product_title: str | None = None
    quantity: int | None = None
    price: str | None = None
    next_charge_scheduled_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OneTime":
        """Create from API response dict."""
        price = data.get("price")
        return cls(
            id=_int(data.get("id")) or 0,
            address_id=_int(data.get("address_id")),
            customer_id=_int(data.get("customer_id")),
            product_title=data.get("product_title") or data.get("title"),
            quantity=_int(data.get("quantity")),
            price=str(price) if price is not None else None,
            next_charge_scheduled_at=data.get("next_charge_scheduled_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


# =============================================================================
# Charges & Orders
# =============================================================================


@dataclass
class Charge:
    """A scheduled or processed charge."""

    id: int
    customer_id: int | None = None
    address_id: int | None = None
    status: ChargeStatus | None = None
    subtotal_price: str | None = None
    total_price: str | None = None
    note: str | None = None
    tags: str | None = None
    error: str | None = None
    error_type: str | None = None
    scheduled_at: str | None = None
    processed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Charge":
        """Create from API response dict."""
        customer = data.get("customer")
        customer_id = customer.get("id") if isinstance(customer, dict) else data.get("customer_id")
        return cls(
            id=_int(data.get("id")) or 0,
            customer_id=_int(customer_id),
            address_id=_int(data.get("address_id")),
            status=_enum(ChargeStatus, data.get("status")),
            subtotal_price=_text(data.get("subtotal_price")),
            total_price=_text(data.get("total_price")),
            note=data.get("note"),
            tags=_text(data.get("tags")),
            error=_text(data.get("error")),
            error_type=data.get("error_type"),
            scheduled_at=data.get("scheduled_at"),
            processed_at=data.get("processed_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class Order:
    """An order created from a processed charge."""

    id: int
    customer_id: int | None = None
    charge_id: int | None = None
    status: OrderStatus | None = None
    total_price: str | None = None
    external_order_id: dict[str, Any] | None = None
    scheduled_at: str | None = None
    processed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Order":
        """Create from API response dict."""
        customer = data.get("customer")
        customer_id = customer.get("id") if isinstance(customer, dict) else data.get("customer_id")
        charge = data.get("charge")
        charge_id = charge.get("id") if isinstance(charge, dict) else data.get("charge_id")
        return cls(
            id=_int(data.get("id")) or 0,
            customer_id=_int(customer_id),
            charge_id=_int(charge_id),
            status=_enum(OrderStatus, data.get("status")),
            total_price=_text(data.get("total_price")),
            external_order_id=data.get("external_order_id"),
            scheduled_at=data.get("scheduled_at"),
            processed_at=data.get("processed_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


# =============================================================================
# Discounts
# =============================================================================


@dataclass
class Discount:
    """A discount code."""

    id: int
    code: str | None = None
    value: float | None = None
    value_type: str | None = None
    status: DiscountStatus | None = None
    usage_limit: int | None = None
    times_used: int | None = None
    starts_at: str | None = None
    ends_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Discount":
        """Create from API response dict."""
        try:
            value = float(data["value"]) if data.get("value") is not None else None
        except (TypeError, ValueError):
            value = None
        return cls(
            id=_int(data.get("id")) or 0,
            code=data.get("code"),
            value=value,
            value_type=data.get("value_type") or data.get("discount_type"),
            status=_enum(DiscountStatus, data.get("status")),
            usage_limit=_int(data.get("usage_limit")),
            times_used=_int(data.get("times_used")),
            starts_at=data.get("starts_at"),
            ends_at=data.get("ends_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class Credit:
    """Store credit held by a customer."""

    id: int
    customer_id: int | None = None
    amount: str | None = None
    currency: str | None = None
    note: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Credit":
        """Create from API response dict."""
        amount = data.get("amount")
        return cls(
            id=_int(data.get("id")) or 0,
            customer_id=_int(data.get("customer_id")),
            amount=str(amount) if amount is not None else None,
            currency=data.get("currency"),
            note=data.get("note"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


# =============================================================================
# Catalog
# =============================================================================


@dataclass
class Product:
    """A product in the subscription catalog."""

    id: int | str
    title: str | None = None
    external_product_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        """Create from API response dict."""
        # 2021-11 products are keyed by external_product_id and have no numeric id
        return cls(
            id=data.get("id") or data.get("external_product_id") or 0,
            title=data.get("title"),
            external_product_id=data.get("external_product_id"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class Plan:
    """A selling plan (2021-11 only)."""

    id: int
    title: str | None = None
    type: str | None = None
    external_product_id: dict[str, Any] | None = None
    discount_amount: str | None = None
    discount_type: str | None = None
    subscription_preferences: dict[str, Any] | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Plan":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            title=data.get("title"),
            type=data.get("type"),
            external_product_id=data.get("external_product_id"),
            discount_amount=_text(data.get("discount_amount")),
            discount_type=data.get("discount_type"),
            subscription_preferences=data.get("subscription_preferences"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class Bundle:
    """A customer's selection for a bundle product."""

    id: int
    bundle_variant_id: int | None = None
    purchase_item_id: int | None = None
    external_product_id: dict[str, Any] | None = None
    external_variant_id: dict[str, Any] | None = None
    items: list[dict[str, Any]] = field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Bundle":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            bundle_variant_id=_int(data.get("bundle_variant_id")),
            purchase_item_id=_int(data.get("purchase_item_id")),
            external_product_id=data.get("external_product_id"),
            external_variant_id=data.get("external_variant_id"),
            items=data.get("items") or [],
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class Collection:
    """A named group of products (2021-11 only)."""

    id: int
    title: str | None = None
    description: str | None = None
    type: str | None = None
    sort_order: CollectionSortOrder | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Collection":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            title=data.get("title"),
            description=data.get("description"),
            type=data.get("type"),
            sort_order=_enum(CollectionSortOrder, data.get("sort_order")),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


# =============================================================================
# Payment methods & metafields
# =============================================================================


@dataclass
class PaymentMethod:
    """A stored payment method (2021-11 only)."""

    id: int
    customer_id: int | None = None
    default: bool = False
    payment_type: str | None = None
    processor_name: str | None = None
    status: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PaymentMethod":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            customer_id=_int(data.get("customer_id")),
            default=bool(data.get("default", False)),
            payment_type=data.get("payment_type"),
            processor_name=data.get("processor_name"),
            status=data.get("status"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class Metafield:
    """A key/value extension attached to a resource."""

    id: int
    owner_resource: str | None = None
    owner_id: int | None = None
    namespace: str | None = None
    key: str | None = None
    value: Any = None
    value_type: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Metafield":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            owner_resource=data.get("owner_resource"),
            owner_id=_int(data.get("owner_id")),
            namespace=data.get("namespace"),
            key=data.get("key"),
            value=data.get("value"),
            value_type=data.get("value_type"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


# =============================================================================
# Webhooks & async batches
# =============================================================================


@dataclass
class Webhook:
    """A webhook subscription."""

    id: int
    address: str = ""
    topic: str | None = None
    topics: list[str] = field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Webhook":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            address=data.get("address") or "",
            topic=data.get("topic"),
            topics=data.get("topics") or ([data["topic"]] if data.get("topic") else []),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class AsyncBatch:
    """A server-side batch of bulk operations."""

    id: int
    batch_type: str | None = None
    status: str | None = None
    total_task_count: int | None = None
    submitted_at: str | None = None
    closed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.status in ("completed", "failed")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AsyncBatch":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            batch_type=data.get("batch_type"),
            status=data.get("status"),
            total_task_count=_int(data.get("total_task_count")),
            submitted_at=data.get("submitted_at"),
            closed_at=data.get("closed_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class AsyncBatchTask:
    """One operation inside an async batch."""

    id: int
    batch_id: int | None = None
    body: dict[str, Any] = field(default_factory=dict)
    status: str | None = None
    result: dict[str, Any] | None = None
    created_at: str | None = None
    completed_at: str | None = None
    updated_at: str | None = None

    @property
    def status_code(self) -> int | None:
        """HTTP status the API recorded for this task's operation."""
        return _int(self.result.get("status_code")) if self.result else None

    @property
    def succeeded(self) -> bool:
        code = self.status_code
        return code is not None and 200 <= code < 300

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AsyncBatchTask":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            batch_id=_int(data.get("batch_id")),
            body=data.get("body") or {},
            status=data.get("status"),
            result=data.get("result"),
            created_at=data.get("created_at"),
            completed_at=data.get("completed_at"),
            updated_at=data.get("updated_at"),
        )


# =============================================================================
# Checkouts
# =============================================================================


@dataclass
class Checkout:
    """A checkout session, addressed by its token rather than a numeric id."""

    token: str
    email: str | None = None
    line_items: list[dict[str, Any]] = field(default_factory=list)
    billing_address: dict[str, Any] | None = None
    shipping_address: dict[str, Any] | None = None
    applied_shipping_rate: dict[str, Any] | None = None
    currency: str | None = None
    note: str | None = None
    charge_id: int | None = None
    completed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Checkout":
        """Create from API response dict."""
        return cls(
            token=str(data.get("token") or ""),
            email=data.get("email"),
            line_items=data.get("line_items") or [],
            billing_address=data.get("billing_address"),
            shipping_address=data.get("shipping_address"),
            applied_shipping_rate=data.get("applied_shipping_rate"),
            currency=data.get("currency"),
            note=data.get("note"),
            charge_id=_int(data.get("charge_id")),
            completed_at=data.get("completed_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


# =============================================================================
# Store
# =============================================================================


@dataclass
class Store:
    """Store-level settings for the authenticated account."""

    id: int
    name: str | None = None
    email: str | None = None
    domain: str | None = None
    currency: str | None = None
    iana_timezone: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Store":
        """Create from API response dict."""
        return cls(
            id=_int(data.get("id")) or 0,
            name=data.get("name") or data.get("shop_name"),
            email=data.get("email"),
            domain=data.get("domain") or data.get("myshopify_domain"),
            currency=data.get("currency"),
            iana_timezone=data.get("iana_timezone"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
