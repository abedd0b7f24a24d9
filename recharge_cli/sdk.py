"""
Recharge SDK - High-level client with nice ergonomics.

This layer provides typed resource accessors built on top of the core
APIClient. List operations validate their sort/status parameters locally
and return lazy Paginators.
"""

import builtins
from collections.abc import Callable
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from recharge_cli.core.client import APIClient, Config, Transport, ValidationError
from recharge_cli.core.enums import (
    AddressSort,
    ApiVersion,
    AsyncBatchSort,
    BundleSort,
    ChargeSort,
    ChargeStatus,
    CustomerSort,
    DiscountSort,
    MetafieldSort,
    OneTimeSort,
    OrderSort,
    OrderStatus,
    PaymentMethodSort,
    PlanSort,
    ProductSort,
    SubscriptionSort,
    SubscriptionStatus,
    WebhookSort,
)
from recharge_cli.core.pagination import Paginator
from recharge_cli.core.sorting import normalize_choice, normalize_sort
from recharge_cli.core.types import (
    Address,
    AsyncBatch,
    AsyncBatchTask,
    Bundle,
    Charge,
    Checkout,
    Collection,
    Credit,
    Customer,
    Discount,
    Metafield,
    OneTime,
    Order,
    PaymentMethod,
    Plan,
    Product,
    Store,
    Subscription,
    Webhook,
)

M = TypeVar("M")

MAX_TASKS_PER_REQUEST = 1000


class RechargeClient:
    """
    High-level Recharge API client with typed methods and nice ergonomics.

    Example:
        client = RechargeClient()  # reads RECHARGE_ACCESS_TOKEN

        for sub in client.subscriptions.list(status="active", sort_by=SubscriptionSort.ID_DESC):
            print(sub.id, sub.product_title)

        recent = client.charges.list(limit=50).take(10)

        with client.using_version("2021-01"):
            total = client.discounts.count()

    """

    def __init__(
        self,
        access_token: str | None = None,
        api_version: ApiVersion | str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
        transport: Transport | None = None,
        config: Config | None = None,
    ):
        """
        Initialize the Recharge client.

        Args:
            access_token: Recharge API token (or RECHARGE_ACCESS_TOKEN env var)
            api_version: "2021-01" or "2021-11" (or RECHARGE_API_VERSION env var)
            base_url: API base URL (or RECHARGE_BASE_URL env var)
            timeout: Request timeout in seconds (or RECHARGE_TIMEOUT env var)
            transport: HTTP transport override (tests, custom sessions)
            config: Fully built Config; takes precedence over the other settings

        """
        config = config or Config.from_env(
            access_token=access_token,
            api_version=api_version,
            base_url=base_url,
            timeout=timeout,
        )
        self._client = APIClient(config, transport=transport)

        # Sub-clients for different resources
        self.subscriptions = SubscriptionOperations(self._client)
        self.customers = CustomerOperations(self._client)
        self.addresses = AddressOperations(self._client)
        self.charges = ChargeOperations(self._client)
        self.orders = OrderOperations(self._client)
        self.discounts = DiscountOperations(self._client)
        self.products = ProductOperations(self._client)
        self.plans = PlanOperations(self._client)
        self.onetimes = OneTimeOperations(self._client)
        self.payment_methods = PaymentMethodOperations(self._client)
        self.metafields = MetafieldOperations(self._client)
        self.webhooks = WebhookOperations(self._client)
        self.async_batches = AsyncBatchOperations(self._client)
        self.bundles = BundleOperations(self._client)
        self.collections = CollectionOperations(self._client)
        self.credits = CreditOperations(self._client)
        self.checkouts = CheckoutOperations(self._client)
        self.store = StoreOperations(self._client)

    @property
    def api(self) -> APIClient:
        """The underlying low-level client."""
        return self._client

    @property
    def api_version(self) -> ApiVersion:
        """Get the current API version."""
        return self._client.api_version

    @api_version.setter
    def api_version(self, value: ApiVersion | str) -> None:
        """Set the API version for all subsequent requests."""
        self._client.set_api_version(value)

    def using_version(self, api_version: ApiVersion | str):
        """Context manager that temporarily switches the API version."""
        return self._client.using_version(api_version)


# =============================================================================
# Base resource
# =============================================================================


class ResourceOperations(Generic[M]):
    """
    Shared CRUD for a Recharge resource.

    Subclasses set the endpoint, the envelope keys and the model class.
    """

    endpoint: ClassVar[str]
    list_key: ClassVar[str]
    item_key: ClassVar[str]
    model: ClassVar[Callable[[dict[str, Any]], Any]]
    sort_enum: ClassVar[type[Enum] | None] = None
    status_enum: ClassVar[type[Enum] | None] = None
    versions: ClassVar[tuple[ApiVersion, ...]] = ()

    def __init__(self, client: APIClient):
        self._client = client

    def _path(self, *parts: int | str) -> str:
        return "/".join([self.endpoint.rstrip("/"), *(str(p).strip("/") for p in parts)])

    def _check_version(self, operation: str) -> None:
        if self.versions:
            self._client.require_version(f"{type(self).__name__}.{operation}", *self.versions)

    def _query(self, params: dict[str, Any]) -> dict[str, Any]:
        query = {k: v for k, v in params.items() if v is not None}
        if self.sort_enum is not None:
            query = normalize_sort(query, self.sort_enum)
        if self.status_enum is not None:
            query = normalize_choice(query, "status", self.status_enum)
        return query

    def _one(self, response: dict[str, Any]) -> M:
        return self.model(response.get(self.item_key) or {})

    def list(self, **params: Any) -> Paginator[M]:
        """
        Lazily iterate every item, across pages.

        Args:
            **params: Query parameters (limit, sort_by, status, filters...)

        Returns:
            Paginator yielding model instances

        Raises:
            ValidationError: If sort_by or status is not legal for this resource

        """
        self._check_version("list")
        return Paginator(
            self._client,
            self.endpoint,
            self._query(params),
            items_key=self.list_key,
            transform=self.model,
        )

    def list_all(self, **params: Any) -> builtins.list[M]:
        """Fetch all items (fetches every page)."""
        return self.list(**params).all()

    def get(self, resource_id: int | str) -> M:
        """Get a single item by ID."""
        self._check_version("get")
        return self._one(self._client.get(self._path(resource_id)))

    def create(self, data: dict[str, Any]) -> M:
        """Create an item."""
        self._check_version("create")
        return self._one(self._client.post(self.endpoint, data))

    def update(self, resource_id: int | str, data: dict[str, Any]) -> M:
        """Update an item."""
        self._check_version("update")
        return self._one(self._client.put(self._path(resource_id), data))

    def delete(self, resource_id: int | str) -> bool:
        """Delete an item."""
        self._check_version("delete")
        self._client.delete(self._path(resource_id))
        return True

    def _action(self, resource_id: int | str, action: str, data: dict[str, Any] | None = None) -> M:
        return self._one(self._client.post(self._path(resource_id, action), data))


# =============================================================================
# Subscriptions & Customers
# =============================================================================


class SubscriptionOperations(ResourceOperations[Subscription]):
    """Operations for recurring subscriptions."""

    endpoint = "/subscriptions"
    list_key = "subscriptions"
    item_key = "subscription"
    model = Subscription.from_dict
    sort_enum = SubscriptionSort
    status_enum = SubscriptionStatus

    def cancel(self, subscription_id: int, reason: str | None = None, comments: str | None = None) -> Subscription:
        """
        Cancel a subscription.

        Args:
            subscription_id: Subscription ID
            reason: Cancellation reason (required by the API)
            comments: Optional free-text comments

        """
        data = {"cancellation_reason": reason, "cancellation_reason_comments": comments}
        return self._action(subscription_id, "cancel", {k: v for k, v in data.items() if v is not None})

    def activate(self, subscription_id: int) -> Subscription:
        """Re-activate a cancelled subscription."""
        return self._action(subscription_id, "activate")

    def set_next_charge_date(self, subscription_id: int, date: str) -> Subscription:
        """Move the next charge to ``date`` (YYYY-MM-DD)."""
        return self._action(subscription_id, "set_next_charge_scheduled_at", {"date": date})

    def change_address(self, subscription_id: int, address_id: int) -> Subscription:
        return self._action(subscription_id, "change_address", {"address_id": address_id})

    def count(self, **params: Any) -> int:
        """Server-side count (2021-01 endpoint)."""
        with self._client.using_version(ApiVersion.V2021_01):
            result = self._client.get(self._path("count"), self._query(params))
        return int(result.get("count") or 0)


class CustomerOperations(ResourceOperations[Customer]):
    """Operations for customers."""

    endpoint = "/customers"
    list_key = "customers"
    item_key = "customer"
    model = Customer.from_dict
    sort_enum = CustomerSort

    def delivery_schedule(self, customer_id: int) -> builtins.list[dict[str, Any]]:
        """Upcoming deliveries for a customer."""
        result = self._client.get(self._path(customer_id, "delivery_schedule"))
        return result.get("deliveries") or result.get("delivery_schedule") or []

    def credit_summary(self, customer_id: int) -> dict[str, Any]:
        result = self._client.get(self._path(customer_id, "credit_summary"))
        return result.get("credit_summary") or {}

    def count(self, **params: Any) -> int:
        """Server-side count (2021-01 endpoint)."""
        with self._client.using_version(ApiVersion.V2021_01):
            result = self._client.get(self._path("count"), self._query(params))
        return int(result.get("count") or 0)


class AddressOperations(ResourceOperations[Address]):
    """Operations for customer addresses."""

    endpoint = "/addresses"
    list_key = "addresses"
    item_key = "address"
    model = Address.from_dict
    sort_enum = AddressSort


# =============================================================================
# Charges & Orders
# =============================================================================


class ChargeOperations(ResourceOperations[Charge]):
    """Operations for charges."""

    endpoint = "/charges"
    list_key = "charges"
    item_key = "charge"
    model = Charge.from_dict
    sort_enum = ChargeSort
    status_enum = ChargeStatus

    def apply_discount(self, charge_id: int, discount_code: str) -> Charge:
        return self._action(charge_id, "apply_discount", {"discount_code": discount_code})

    def remove_discount(self, charge_id: int) -> Charge:
        return self._action(charge_id, "remove_discount")

    def skip(self, charge_id: int, purchase_item_ids: builtins.list[int] | None = None) -> Charge:
        """Skip a queued charge (optionally only some purchase items)."""
        data = {"purchase_item_ids": purchase_item_ids} if purchase_item_ids else None
        return self._action(charge_id, "skip", data)

    def unskip(self, charge_id: int, purchase_item_ids: builtins.list[int] | None = None) -> Charge:
        data = {"purchase_item_ids": purchase_item_ids} if purchase_item_ids else None
        return self._action(charge_id, "unskip", data)

    def refund(self, charge_id: int, amount: str | None = None, full_refund: bool = False) -> Charge:
        """
        Refund a processed charge.

        Args:
            charge_id: Charge ID
            amount: Partial amount to refund, as a decimal string
            full_refund: Refund the entire charge

        """
        data: dict[str, Any] = {"full_refund": full_refund} if full_refund else {}
        if amount is not None:
            data["amount"] = amount
        return self._action(charge_id, "refund", data)

    def process(self, charge_id: int) -> Charge:
        return self._action(charge_id, "process")

    def capture(self, charge_id: int) -> Charge:
        return self._action(charge_id, "capture_payment")


class OrderOperations(ResourceOperations[Order]):
    """Operations for orders."""

    endpoint = "/orders"
    list_key = "orders"
    item_key = "order"
    model = Order.from_dict
    sort_enum = OrderSort
    status_enum = OrderStatus

    def list(self, **params: Any) -> Paginator[Order]:
        # Sorting orders is only honoured by the 2021-01 API
        if params.get("sort_by") is not None:
            self._client.require_version("OrderOperations.list(sort_by=...)", ApiVersion.V2021_01)
        return super().list(**params)

    def clone(self, order_id: int, scheduled_at: str | None = None) -> Order:
        data = {"scheduled_at": scheduled_at} if scheduled_at else None
        return self._action(order_id, "clone", data)

    def delay(self, order_id: int, scheduled_at: str) -> Order:
        return self._action(order_id, "delay", {"scheduled_at": scheduled_at})


# =============================================================================
# Discounts
# =============================================================================


class DiscountOperations(ResourceOperations[Discount]):
    """Operations for discount codes."""

    endpoint = "/discounts"
    list_key = "discounts"
    item_key = "discount"
    model = Discount.from_dict
    sort_enum = DiscountSort

    def count(self, **params: Any) -> int:
        """Server-side count (2021-01 endpoint)."""
        with self._client.using_version(ApiVersion.V2021_01):
            result = self._client.get(self._path("count"), self._query(params))
        return int(result.get("count") or 0)

    def apply_to_address(self, address_id: int, discount_code: str) -> dict[str, Any]:
        return self._client.post(
            self._path("apply_to_address"),
            {"address_id": address_id, "discount_code": discount_code},
        )

    def apply_to_charge(self, charge_id: int, discount_code: str) -> dict[str, Any]:
        return self._client.post(
            self._path("apply_to_charge"),
            {"charge_id": charge_id, "discount_code": discount_code},
        )


class CreditOperations(ResourceOperations[Credit]):
    """Operations for customer store credit."""

    endpoint = "/credits"
    list_key = "credits"
    item_key = "credit"
    model = Credit.from_dict


# =============================================================================
# Catalog
# =============================================================================


class ProductOperations(ResourceOperations[Product]):
    """Operations for catalog products."""

    endpoint = "/products"
    list_key = "products"
    item_key = "product"
    model = Product.from_dict
    sort_enum = ProductSort


class PlanOperations(ResourceOperations[Plan]):
    """Operations for selling plans (2021-11 only)."""

    endpoint = "/plans"
    list_key = "plans"
    item_key = "plan"
    model = Plan.from_dict
    sort_enum = PlanSort
    versions = (ApiVersion.V2021_11,)


class OneTimeOperations(ResourceOperations[OneTime]):
    """Operations for one-time products."""

    endpoint = "/onetimes"
    list_key = "onetimes"
    item_key = "onetime"
    model = OneTime.from_dict
    sort_enum = OneTimeSort


class PaymentMethodOperations(ResourceOperations[PaymentMethod]):
    """Operations for stored payment methods (2021-11 only)."""

    endpoint = "/payment_methods"
    list_key = "payment_methods"
    item_key = "payment_method"
    model = PaymentMethod.from_dict
    sort_enum = PaymentMethodSort
    versions = (ApiVersion.V2021_11,)


class BundleOperations(ResourceOperations[Bundle]):
    """Operations for bundle selections."""

    endpoint = "/bundle_selections"
    list_key = "bundle_selections"
    item_key = "bundle_selection"
    model = Bundle.from_dict
    sort_enum = BundleSort


class CollectionOperations(ResourceOperations[Collection]):
    """Operations for product collections (2021-11 only)."""

    endpoint = "/collections"
    list_key = "collections"
    item_key = "collection"
    model = Collection.from_dict
    versions = (ApiVersion.V2021_11,)

    def list_products(self, collection_id: int, **params: Any) -> Paginator[Product]:
        """Lazily iterate the products in a collection."""
        self._check_version("list_products")
        return Paginator(
            self._client,
            "/collection_products",
            {**self._query(params), "collection_id": collection_id},
            items_key="collection_products",
            transform=Product.from_dict,
        )

    def remove_products(self, collection_id: int, product_ids: builtins.list[int]) -> dict[str, Any]:
        """Bulk-remove products from a collection (at most 250 per call)."""
        self._check_version("remove_products")
        if not product_ids or len(product_ids) > 250:
            raise ValidationError(f"Between 1 and 250 product ids required, got {len(product_ids)}")
        return self._client.post(
            self._path(collection_id, "collection_products-bulk"),
            {"product_ids": product_ids},
        )


class MetafieldOperations(ResourceOperations[Metafield]):
    """Operations for metafields."""

    endpoint = "/metafields"
    list_key = "metafields"
    item_key = "metafield"
    model = Metafield.from_dict
    sort_enum = MetafieldSort

    def list(self, **params: Any) -> Paginator[Metafield]:
        # The API requires owner_resource; sorting is a 2021-01 feature
        if params.get("sort_by") is not None:
            self._client.require_version("MetafieldOperations.list(sort_by=...)", ApiVersion.V2021_01)
        return super().list(**params)


# =============================================================================
# Webhooks & async batches
# =============================================================================


class WebhookOperations(ResourceOperations[Webhook]):
    """Operations for webhook subscriptions."""

    endpoint = "/webhooks"
    list_key = "webhooks"
    item_key = "webhook"
    model = Webhook.from_dict
    sort_enum = WebhookSort

    def test(self, webhook_id: int) -> dict[str, Any]:
        """Ask the API to send a test delivery."""
        return self._client.post(self._path(webhook_id, "test"))


class AsyncBatchOperations(ResourceOperations[AsyncBatch]):
    """Operations for async batches."""

    endpoint = "/async_batches"
    list_key = "async_batches"
    item_key = "async_batch"
    model = AsyncBatch.from_dict
    sort_enum = AsyncBatchSort

    def create(self, data: dict[str, Any] | str) -> AsyncBatch:
        """Create a batch; ``data`` may be just the batch type string."""
        payload = {"batch_type": data} if isinstance(data, str) else data
        return super().create(payload)

    def add_tasks(self, batch_id: int, tasks: builtins.list[dict[str, Any]]) -> builtins.list[AsyncBatchTask]:
        """
        Queue task bodies onto an open batch.

        Args:
            batch_id: Batch ID
            tasks: Task bodies, e.g. ``[{"code": "SAVE10", "value": 10}]``

        Raises:
            ValidationError: If there are no tasks or more than 1000

        """
        if not tasks or len(tasks) > MAX_TASKS_PER_REQUEST:
            raise ValidationError(f"Between 1 and {MAX_TASKS_PER_REQUEST} tasks per request, got {len(tasks)}")
        result = self._client.post(self._path(batch_id, "tasks"), {"tasks": [{"body": t} for t in tasks]})
        return [AsyncBatchTask.from_dict(t) for t in result.get("async_batch_tasks") or []]

    def list_tasks(self, batch_id: int, **params: Any) -> Paginator[AsyncBatchTask]:
        """Lazily iterate a batch's tasks; ``ids`` may be a list of task IDs."""
        if isinstance(params.get("ids"), (list, tuple)):
            params["ids"] = ",".join(str(i) for i in params["ids"])
        return Paginator(
            self._client,
            self._path(batch_id, "tasks"),
            {k: v for k, v in params.items() if v is not None},
            items_key="async_batch_tasks",
            transform=AsyncBatchTask.from_dict,
        )

    def process(self, batch_id: int) -> AsyncBatch:
        """Close a batch and start processing it."""
        return self._action(batch_id, "process", {})


# =============================================================================
# Checkouts & Store
# =============================================================================


class CheckoutOperations:
    """
    Checkouts, addressed by token.

    Only available to BigCommerce and custom storefronts; there is no list
    endpoint.
    """

    endpoint = "/checkouts"

    def __init__(self, client: APIClient):
        self._client = client

    def _path(self, token: str, *parts: str) -> str:
        return "/".join([self.endpoint, token.strip("/"), *parts])

    def create(self, data: dict[str, Any]) -> Checkout:
        result = self._client.post(self.endpoint, data)
        return Checkout.from_dict(result.get("checkout") or {})

    def get(self, token: str) -> Checkout:
        result = self._client.get(self._path(token))
        return Checkout.from_dict(result.get("checkout") or {})

    def update(self, token: str, data: dict[str, Any]) -> Checkout:
        result = self._client.put(self._path(token), data)
        return Checkout.from_dict(result.get("checkout") or {})

    def shipping_rates(self, token: str) -> builtins.list[dict[str, Any]]:
        """Shipping options available for the checkout."""
        result = self._client.get(self._path(token, "shipping_rates"))
        return result.get("shipping_rates") or []

    def charge(self, token: str, data: dict[str, Any] | None = None) -> Checkout:
        """Process payment for the checkout; the result carries ``charge_id``."""
        result = self._client.post(self._path(token, "charge"), data)
        return Checkout.from_dict(result.get("checkout") or {})


class StoreOperations:
    """Store settings (``/store`` on 2021-11, ``/shop`` on 2021-01)."""

    def __init__(self, client: APIClient):
        self._client = client

    def get(self) -> Store:
        if self._client.api_version is ApiVersion.V2021_01:
            result = self._client.get("/shop")
            return Store.from_dict(result.get("shop") or {})
        result = self._client.get("/store")
        return Store.from_dict(result.get("store") or {})
