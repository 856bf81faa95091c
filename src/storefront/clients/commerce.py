"""Commerce Service Client"""

from typing import Any

import httpx
import pybreaker

from ..core.errors import StorefrontError
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class CommerceError(StorefrontError):
    """Commerce backend unreachable or rejected the call."""

    code = "commerce_unavailable"
    status_code = 502


class CommerceClient:
    """
    Client for the cart, discount and form endpoints of the commerce backend,
    with circuit breaker protection.

    Implements the CartService, DiscountService and FormService protocols.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 5.0,
        fail_max: int = 5,
        reset_timeout: int = 30,
    ) -> None:
        """
        Initialize commerce client with circuit breaker.

        Args:
            base_url: Base URL of the commerce backend
            timeout: Request timeout in seconds
            fail_max: Consecutive failures before the breaker opens
            reset_timeout: Seconds before an open breaker is retried
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout)

        class BreakerListener(pybreaker.CircuitBreakerListener):
            """Listener for circuit breaker state changes."""

            def state_change(self, cb, old_state, new_state):
                logger.warning(
                    "breaker_state_change",
                    breaker=cb.name,
                    from_state=str(old_state),
                    to_state=str(new_state),
                )

        self._breaker = pybreaker.CircuitBreaker(
            fail_max=fail_max,
            reset_timeout=reset_timeout,
            name="commerce-http",
            listeners=[BreakerListener()],
        )

        logger.info("client_init", url=self.base_url)

    def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:

            def _make_request():
                return self._client.request(method, url, json=payload)

            response = self._breaker.call(_make_request)
            response.raise_for_status()

            data = response.json()
            if not isinstance(data, dict):
                logger.error("invalid_response", path=path, type=type(data).__name__)
                raise CommerceError(f"Unexpected response from {path}")
            return data

        except pybreaker.CircuitBreakerError as e:
            logger.error("commerce_request_failed", path=path, error="Circuit breaker open")
            raise CommerceError("Circuit breaker open - commerce backend unavailable") from e
        except httpx.HTTPError as e:
            logger.warning("http_error", path=path, error=str(e))
            raise CommerceError(str(e)) from e

    # CartService

    def add_item(self, store_id: str, variant_id: str, quantity: int) -> dict[str, Any]:
        """Add a variant to the store's cart."""
        data = self._request(
            "POST",
            f"/stores/{store_id}/cart/items",
            {"variantId": variant_id, "quantity": quantity},
        )
        logger.info("cart_item_added", store_id=store_id, variant_id=variant_id, quantity=quantity)
        return data

    def set_delivery_mode(self, store_id: str, mode: str) -> dict[str, Any]:
        return self._request("PUT", f"/stores/{store_id}/cart/delivery-mode", {"mode": mode})

    # DiscountService

    def apply_code(self, store_id: str, code: str) -> dict[str, Any]:
        return self._request("POST", f"/stores/{store_id}/discounts/apply", {"code": code})

    # FormService

    def submit(self, store_id: str, form_type: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/stores/{store_id}/forms/{form_type}", {"data": data})

    def health_check(self) -> bool:
        """
        Check if the commerce backend is reachable (bypasses circuit breaker).

        Returns:
            True if backend is healthy
        """
        try:
            response = self._client.get(f"{self.base_url}/health", timeout=2.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def close(self) -> None:
        """Close HTTP client"""
        self._client.close()

    def __enter__(self) -> "CommerceClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
