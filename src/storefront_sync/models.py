"""Domain models shared by the feed reader, the Admin API client and the pipeline."""

from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from storefront_sync.errors import InvalidProductRecord

CENTS = Decimal("0.01")


class ProductRecord(BaseModel):
    """A product as read from a storefront feed or submitted by the UI."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    title: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    description: str = ""
    image: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Any:
        # Floats go through str() so 9.99 stays 9.99 instead of its binary expansion
        if isinstance(v, float):
            return str(v)
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("description", "image", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def price_text(self) -> str:
        """Price as the two-decimal string the Admin API expects."""
        return format(self.price.quantize(CENTS, rounding=ROUND_HALF_UP), "f")

    @classmethod
    def parse(cls, raw: Any) -> "ProductRecord":
        """Validate a raw payload, raising InvalidProductRecord on bad input."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidProductRecord(f"Invalid product record ({problems})") from e


@dataclass(frozen=True)
class SyncCredential:
    """Normalized shop domain plus the Admin API access token."""

    shop_domain: str
    access_token: str = field(repr=False)


@dataclass(frozen=True)
class CreatedProduct:
    """What the Admin API echoes back after productCreate."""

    remote_id: str
    title: str
    price: str | None = None
    variant_id: str | None = None

    @property
    def numeric_id(self) -> str:
        """Numeric suffix of the opaque GID (gid://shopify/Product/123 -> 123)."""
        return self.remote_id.rsplit("/", 1)[-1]


class SyncStatus(str, Enum):
    CREATED = "created"
    FAILED = "failed"


class SyncResult(BaseModel):
    """Outcome for one submitted product, keyed by its input position."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    index: int
    status: Literal["created", "failed"]
    title: str | None = None
    price: str | None = None
    remote_id: str | None = None
    variant_id: str | None = None
    error: str | None = None

    @classmethod
    def created(cls, index: int, product: CreatedProduct) -> "SyncResult":
        return cls(
            index=index,
            status=SyncStatus.CREATED.value,
            title=product.title,
            price=product.price,
            remote_id=product.remote_id,
            variant_id=product.variant_id,
        )

    @classmethod
    def failed(cls, index: int, error: str, title: str | None = None) -> "SyncResult":
        return cls(index=index, status=SyncStatus.FAILED.value, title=title, error=error)

    @property
    def ok(self) -> bool:
        return self.status == SyncStatus.CREATED.value


class SyncEventKind(str, Enum):
    """Kinds of events the pipeline emits while running."""

    CHUNK_STARTED = "chunk_started"
    CHUNK_COMPLETED = "chunk_completed"
    ITEM_RETRY = "item_retry"
    ITEM_FAILED = "item_failed"
    IMAGE_ATTACH_FAILED = "image_attach_failed"


@dataclass
class SyncEvent:
    """Structured record of something worth auditing during a run."""

    kind: SyncEventKind
    message: str
    index: int | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["kind"] = self.kind.value
        return payload

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_dict(), default=str)


@dataclass
class SyncSummary:
    """Aggregate result of one pipeline run."""

    results: list[SyncResult] = field(default_factory=list)
    events: list[SyncEvent] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def first_error(self) -> str | None:
        for result in self.results:
            if not result.ok:
                return result.error
        return None

    @property
    def warnings(self) -> list[str]:
        """Soft failures: products that were created without their image."""
        return [
            event.message
            for event in self.events
            if event.kind is SyncEventKind.IMAGE_ATTACH_FAILED
        ]
