"""
TCG Market Watch — TCGplayer API Client

Fetches catalog reference data (groups, rarities, printings, conditions,
languages), products with their nested SKUs, and SKU prices from the
TCGplayer REST API.

Base URL: https://api.tcgplayer.com/{version}/
Auth: bearer token from POST /token (client credentials = public/private key)
Pagination: offset + limit (max 100 per page) on groups and products

Every call is blocking and is attempted exactly once. Failures are logged
and raised as UpstreamError.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Protocol, Sequence, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from market_watch.config import Settings
from market_watch.errors import UpstreamError

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# API Configuration
# ---------------------------------------------------------------------------
DEFAULT_BASE_URL = "https://api.tcgplayer.com"
DEFAULT_API_VERSION = "v1.39.0"
MAX_PAGE_SIZE = 100
# Refresh the bearer token this long before it actually expires
TOKEN_EXPIRY_MARGIN = timedelta(minutes=5)

# ---------------------------------------------------------------------------
# Pydantic Response Models
# ---------------------------------------------------------------------------


class _RemoteModel(BaseModel):
    """Base for TCGplayer payloads: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(populate_by_name=True)


R = TypeVar("R", bound=_RemoteModel)


class RemoteGroup(_RemoteModel):
    """A set / release."""
    id: int = Field(..., alias="groupId")
    name: str = Field(default="")
    abbreviation: str | None = None
    category_id: int | None = Field(default=None, alias="categoryId")


class RemoteRarity(_RemoteModel):
    id: int = Field(..., alias="rarityId")
    name: str = Field(default="", alias="displayText")
    db_value: str | None = Field(default=None, alias="dbValue")


class RemotePrinting(_RemoteModel):
    id: int = Field(..., alias="printingId")
    name: str = Field(default="")


class RemoteCondition(_RemoteModel):
    id: int = Field(..., alias="conditionId")
    name: str = Field(default="")
    abbreviation: str = Field(default="")

    @field_validator("abbreviation", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return "" if v is None else v


class RemoteLanguage(_RemoteModel):
    id: int = Field(..., alias="languageId")
    name: str = Field(default="")
    abbreviation: str | None = Field(default=None, alias="abbr")


class RemoteSKU(_RemoteModel):
    """One purchasable variant nested under a product."""
    id: int = Field(..., alias="skuId")
    product_id: int = Field(..., alias="productId")
    language_id: int = Field(..., alias="languageId")
    printing_id: int = Field(..., alias="printingId")
    condition_id: int = Field(..., alias="conditionId")


class ExtendedData(_RemoteModel):
    """Per-category attribute such as Rarity, Number, Attribute."""
    name: str
    display_name: str | None = Field(default=None, alias="displayName")
    value: str | None = None


class RemoteProduct(_RemoteModel):
    """
    A TCGplayer product with extended fields and nested SKUs.

    cleanName is the card name stripped of punctuation; products sharing it
    share a Detail row locally.
    """
    id: int = Field(..., alias="productId")
    name: str = Field(default="")
    clean_name: str = Field(default="", alias="cleanName")
    image_url: str = Field(default="", alias="imageUrl")
    url: str = Field(default="")
    category_id: int | None = Field(default=None, alias="categoryId")
    group_id: int = Field(default=0, alias="groupId")
    extended_data: list[ExtendedData] = Field(default_factory=list, alias="extendedData")
    skus: list[RemoteSKU] = Field(default_factory=list)

    @field_validator("clean_name", "image_url", "url", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return "" if v is None else v

    @field_validator("extended_data", "skus", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> list:
        return [] if v is None else v

    def get_extended_value(self, name: str) -> str | None:
        """Return the value of the named extended attribute, or None if absent."""
        for item in self.extended_data:
            if item.name == name:
                return item.value
        return None

    @property
    def rarity_label(self) -> str | None:
        return self.get_extended_value("Rarity")


class RemoteSKUPrice(_RemoteModel):
    """Current pricing for one SKU."""
    sku_id: int = Field(..., alias="skuId")
    low_price: float | None = Field(default=None, alias="lowPrice")
    lowest_shipping: float | None = Field(default=None, alias="lowestShipping")
    lowest_listing_price: float | None = Field(default=None, alias="lowestListingPrice")
    market_price: float | None = Field(default=None, alias="marketPrice")
    direct_low_price: float | None = Field(default=None, alias="directLowPrice")


class Envelope(BaseModel):
    """Every TCGplayer response: {success, errors, results}."""
    success: bool = True
    errors: list[str] = Field(default_factory=list)
    results: list[dict[str, Any]] = Field(default_factory=list)
    total_items: int | None = Field(default=None, alias="totalItems")


# ---------------------------------------------------------------------------
# Capability set
# ---------------------------------------------------------------------------


class TCGPlayerAPI(Protocol):
    """
    Operations the pipelines need from the marketplace.

    TCGPlayerClient implements this over HTTP; tests substitute an
    in-memory implementation.
    """

    def list_groups(self, category_id: int, limit: int, offset: int) -> list[RemoteGroup]: ...

    def list_rarities(self, category_id: int) -> list[RemoteRarity]: ...

    def list_printings(self, category_id: int) -> list[RemotePrinting]: ...

    def list_conditions(self, category_id: int) -> list[RemoteCondition]: ...

    def list_languages(self, category_id: int) -> list[RemoteLanguage]: ...

    def list_products(self, category_id: int, limit: int, offset: int) -> list[RemoteProduct]: ...

    def list_product_skus(self, product_id: int) -> list[RemoteSKU]: ...

    def list_sku_prices(self, sku_ids: Sequence[int]) -> list[RemoteSKUPrice]: ...


# ---------------------------------------------------------------------------
# API Client
# ---------------------------------------------------------------------------


class TCGPlayerClient:
    """
    Blocking client for the TCGplayer catalog and pricing API.

    Usage:
        with TCGPlayerClient(public_key, private_key) as client:
            groups = client.list_groups(2, limit=100, offset=0)
            prices = client.list_sku_prices([12345, 12346])
    """

    def __init__(
        self,
        public_key: str,
        private_key: str,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
    ):
        self._public_key = public_key
        self._private_key = private_key
        self._base_url = base_url.rstrip("/")
        self._api_version = api_version
        self._timeout = timeout
        self._client: httpx.Client | None = None
        self._access_token: str | None = None
        self._token_expires_at: datetime = datetime.min.replace(tzinfo=timezone.utc)

    @classmethod
    def from_settings(cls, settings: Settings) -> TCGPlayerClient:
        return cls(
            public_key=settings.TCGPLAYER_PUBLIC_KEY,
            private_key=settings.TCGPLAYER_PRIVATE_KEY,
            base_url=settings.TCGPLAYER_BASE_URL,
            api_version=settings.TCGPLAYER_API_VERSION,
        )

    def __enter__(self) -> TCGPlayerClient:
        self._client = httpx.Client(
            base_url=self._base_url,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )
        return self

    def __exit__(self, *args: Any) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # -----------------------------------------------------------------------
    # Auth
    # -----------------------------------------------------------------------

    def _get_access_token(self) -> str:
        """
        Return a bearer token, requesting a new one when the cached token is
        missing or about to expire.
        """
        assert self._client is not None, "Client not initialized. Use 'with'."

        now = datetime.now(timezone.utc)
        if self._access_token and now < self._token_expires_at - TOKEN_EXPIRY_MARGIN:
            return self._access_token

        try:
            response = self._client.post(
                "/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._public_key,
                    "client_secret": self._private_key,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("tcgplayer_token_http_error", status_code=e.response.status_code)
            raise UpstreamError(
                f"TCGplayer token request failed with status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error("tcgplayer_token_request_error", error=str(e))
            raise UpstreamError("TCGplayer token request failed") from e

        try:
            payload = response.json()
            self._access_token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 0))
        except (ValueError, KeyError, TypeError) as e:
            logger.error("tcgplayer_invalid_payload", path="/token", error=str(e))
            raise UpstreamError(f"TCGplayer token response is malformed: {e!r}") from e

        self._token_expires_at = now + timedelta(seconds=expires_in)

        logger.info("tcgplayer_token_refreshed", expires_at=self._token_expires_at.isoformat())
        return self._access_token

    # -----------------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------------

    def _request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        GET a versioned endpoint and return the envelope's results.

        A 404 means the query matched nothing and yields an empty list.
        """
        assert self._client is not None, "Client not initialized. Use 'with'."

        token = self._get_access_token()
        url = f"/{self._api_version}{path}"

        try:
            response = self._client.get(
                url,
                params=params,
                headers={"Authorization": f"bearer {token}"},
            )
            if response.status_code == 404:
                logger.debug("tcgplayer_no_results", path=path)
                return []
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "tcgplayer_http_error",
                status_code=e.response.status_code,
                path=path,
            )
            raise UpstreamError(
                f"TCGplayer GET {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error("tcgplayer_request_error", error=str(e), path=path)
            raise UpstreamError(f"TCGplayer GET {path} failed: {e}") from e

        # ValidationError is a ValueError subclass, as is JSONDecodeError
        try:
            envelope = Envelope.model_validate(response.json())
        except ValueError as e:
            logger.error("tcgplayer_invalid_payload", path=path, error=str(e))
            raise UpstreamError(f"TCGplayer GET {path} returned a malformed body") from e

        if not envelope.success:
            logger.error("tcgplayer_api_error", path=path, errors=envelope.errors)
            raise UpstreamError(f"TCGplayer GET {path} returned errors: {envelope.errors}")

        return envelope.results

    def _get_list(
        self,
        model: type[R],
        path: str,
        params: dict[str, Any] | None = None,
    ) -> list[R]:
        """GET an endpoint and parse every result record into model."""
        results = self._request(path, params)
        try:
            return [model.model_validate(r) for r in results]
        except ValidationError as e:
            logger.error(
                "tcgplayer_invalid_payload",
                path=path,
                model=model.__name__,
                errors=e.error_count(),
            )
            raise UpstreamError(f"TCGplayer GET {path} returned an invalid {model.__name__}: {e}") from e

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def list_groups(self, category_id: int, limit: int, offset: int) -> list[RemoteGroup]:
        return self._get_list(
            RemoteGroup,
            f"/catalog/categories/{category_id}/groups",
            params={"offset": offset, "limit": limit},
        )

    def list_rarities(self, category_id: int) -> list[RemoteRarity]:
        return self._get_list(RemoteRarity, f"/catalog/categories/{category_id}/rarities")

    def list_printings(self, category_id: int) -> list[RemotePrinting]:
        return self._get_list(RemotePrinting, f"/catalog/categories/{category_id}/printings")

    def list_conditions(self, category_id: int) -> list[RemoteCondition]:
        return self._get_list(RemoteCondition, f"/catalog/categories/{category_id}/conditions")

    def list_languages(self, category_id: int) -> list[RemoteLanguage]:
        return self._get_list(RemoteLanguage, f"/catalog/categories/{category_id}/languages")

    def list_products(self, category_id: int, limit: int, offset: int) -> list[RemoteProduct]:
        """
        List one page of products with extended fields and nested SKUs.

        Args:
            category_id: TCGplayer category (2 = Yu-Gi-Oh!).
            limit: Page size (max 100).
            offset: Number of products to skip.
        """
        return self._get_list(
            RemoteProduct,
            "/catalog/products",
            params={
                "categoryId": category_id,
                "offset": offset,
                "limit": limit,
                "getExtendedFields": "true",
                "includeSkus": "true",
            },
        )

    def list_product_skus(self, product_id: int) -> list[RemoteSKU]:
        return self._get_list(RemoteSKU, f"/catalog/products/{product_id}/skus")

    def list_sku_prices(self, sku_ids: Sequence[int]) -> list[RemoteSKUPrice]:
        """
        Fetch current prices for a batch of SKU ids.

        The ids are sent comma-separated in the path, so callers keep batches
        small (the price ingestor uses 100).
        """
        if not sku_ids:
            return []
        joined = ",".join(str(i) for i in sku_ids)
        prices = self._get_list(RemoteSKUPrice, f"/pricing/sku/{joined}")

        logger.debug("tcgplayer_sku_prices_fetched", requested=len(sku_ids), returned=len(prices))
        return prices
