"""
Enumerations for the Recharge API.

Sort enums list the legal ``sort_by`` tokens per resource. Status enums accept
any letter case on lookup, so ``SubscriptionStatus("active")`` resolves to
``SubscriptionStatus.ACTIVE``.
"""

from enum import Enum

# =============================================================================
# API Version
# =============================================================================


class ApiVersion(str, Enum):
    """Wire dialect selector sent in the X-Recharge-Version header."""

    V2021_01 = "2021-01"
    V2021_11 = "2021-11"

    @classmethod
    def default(cls) -> "ApiVersion":
        return cls.V2021_11

    @classmethod
    def parse(cls, value: "ApiVersion | str") -> "ApiVersion":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            supported = ", ".join(v.value for v in cls)
            raise ValueError(f"Unsupported API version: {value}. Supported versions: {supported}") from None

    @property
    def uses_link_header(self) -> bool:
        """Legacy dialect carries pagination cursors in the Link header."""
        return self is ApiVersion.V2021_01


# =============================================================================
# Statuses
# =============================================================================


class _CaseInsensitiveEnum(str, Enum):
    @classmethod
    def _missing_(cls, value: object) -> "_CaseInsensitiveEnum | None":
        if isinstance(value, str):
            upper = value.upper()
            for member in cls:
                if member.value == upper:
                    return member
        return None


class SubscriptionStatus(_CaseInsensitiveEnum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    PAUSED = "PAUSED"
    QUEUED = "QUEUED"
    SKIPPED = "SKIPPED"
    UNPAID = "UNPAID"


class ChargeStatus(_CaseInsensitiveEnum):
    QUEUED = "QUEUED"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"
    SKIPPED = "SKIPPED"

    @property
    def is_refunded(self) -> bool:
        return self in (ChargeStatus.REFUNDED, ChargeStatus.PARTIALLY_REFUNDED)


class OrderStatus(_CaseInsensitiveEnum):
    """2021-01 reports upper case values, 2021-11 lower case."""

    QUEUED = "QUEUED"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"
    SKIPPED = "SKIPPED"


class DiscountStatus(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    FULLY_DISABLED = "fully_disabled"


# =============================================================================
# Sort orders
# =============================================================================


class SubscriptionSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class CustomerSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class AddressSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class ChargeSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"
    SCHEDULED_AT_ASC = "scheduled_at-asc"
    SCHEDULED_AT_DESC = "scheduled_at-desc"


class OrderSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"
    SCHEDULED_AT_ASC = "scheduled_at-asc"
    SCHEDULED_AT_DESC = "scheduled_at-desc"


class ProductSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"


class PlanSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class OneTimeSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class PaymentMethodSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class MetafieldSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class DiscountSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class WebhookSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class BundleSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class AsyncBatchSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"


class CollectionSortOrder(str, Enum):
    """How a collection orders its products (a field of the collection, not a list sort)."""

    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"


# =============================================================================
# Webhooks
# =============================================================================


class WebhookTopic(str, Enum):
    # Charge events
    CHARGE_CREATED = "charge/created"
    CHARGE_FAILED = "charge/failed"
    CHARGE_PAID = "charge/paid"
    CHARGE_MAX_RETRIES_REACHED = "charge/max_retries_reached"
    CHARGE_REFUNDED = "charge/refunded"
    CHARGE_UPDATED = "charge/updated"
    CHARGE_UPCOMING = "charge/upcoming"
    CHARGE_DELETED = "charge/deleted"
    CHARGE_PROCESSED = "charge/processed"

    # Subscription events
    SUBSCRIPTION_CREATED = "subscription/created"
    SUBSCRIPTION_ACTIVATED = "subscription/activated"
    SUBSCRIPTION_CANCELLED = "subscription/cancelled"
    SUBSCRIPTION_UPDATED = "subscription/updated"
    SUBSCRIPTION_SKIPPED = "subscription/skipped"
    SUBSCRIPTION_UNSKIPPED = "subscription/unskipped"
    SUBSCRIPTION_SWAPPED = "subscription/swapped"
    SUBSCRIPTION_PAUSED = "subscription/paused"
    SUBSCRIPTION_DELETED = "subscription/deleted"

    # Customer events
    CUSTOMER_CREATED = "customer/created"
    CUSTOMER_ACTIVATED = "customer/activated"
    CUSTOMER_DEACTIVATED = "customer/deactivated"
    CUSTOMER_UPDATED = "customer/updated"
    CUSTOMER_PAYMENT_METHOD_UPDATED = "customer/payment_method_updated"

    # Order events
    ORDER_CREATED = "order/created"
    ORDER_UPDATED = "order/updated"
    ORDER_CANCELLED = "order/cancelled"
    ORDER_PAID = "order/paid"
    ORDER_FULFILLED = "order/fulfilled"

    # Address events
    ADDRESS_CREATED = "address/created"
    ADDRESS_UPDATED = "address/updated"
    ADDRESS_DELETED = "address/deleted"

    # Discount events
    DISCOUNT_CREATED = "discount/created"
    DISCOUNT_UPDATED = "discount/updated"
    DISCOUNT_DELETED = "discount/deleted"

    @classmethod
    def grouped_by_resource(cls) -> dict[str, list[str]]:
        """Topic values keyed by the resource prefix before the slash."""
        grouped: dict[str, list[str]] = {}
        for topic in cls:
            resource = topic.value.split("/", 1)[0]
            grouped.setdefault(resource, []).append(topic.value)
        return grouped
