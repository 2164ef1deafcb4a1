"""HTTP client for the text-generation advisor service.

The advisor is an optional enrichment. Every public method returns an empty
or absent result instead of raising when the service is unconfigured,
unreachable or answers with something that does not match the schema.
"""

from __future__ import annotations

import logging
import time
from typing import Sequence, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ...config import settings
from ...schemas.advisor import (
    DeliveryPrediction,
    ForecastDemandRequest,
    PredictDeliveryTimesRequest,
    ProposeRouteRequest,
    RouteProposal,
    RoutePredictionInput,
    StockRebalance,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

FORECAST_DEMAND_FLOW = "forecastDemandFlow"
PREDICT_DELIVERY_TIMES_FLOW = "predictDeliveryTimesFlow"
PROPOSE_ROUTE_FLOW = "proposeOptimizedRouteFlow"


class AdvisorError(RuntimeError):
    """Raised internally when the advisor cannot produce a usable answer."""


class AdvisorClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.advisor_base_url or "").rstrip("/")
        self.timeout = timeout if timeout is not None else settings.advisor_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.advisor_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.advisor_backoff_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def _run_flow(self, flow: str, payload: BaseModel) -> object:
        """POST the payload to a flow endpoint and return the ``result`` member of the reply."""
        if not self.enabled:
            raise AdvisorError("Advisor base URL is not configured.")

        url = f"{self.base_url}/{flow}"
        body = {"data": payload.model_dump(by_alias=True)}
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.post(url, json=body)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict) or "result" not in data:
                        raise AdvisorError(f"Advisor flow '{flow}' returned no result.")
                    return data["result"]
                except httpx.HTTPStatusError as exc:
                    if exc.response.status_code < 500:
                        raise AdvisorError(
                            f"Advisor flow '{flow}' rejected the request ({exc.response.status_code})."
                        ) from exc
                    attempt += 1
                    if attempt > self.max_retries:
                        raise AdvisorError(f"Advisor flow '{flow}' failed: {exc}") from exc
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.RequestError as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise AdvisorError(f"Advisor service at {self.base_url} is not reachable: {exc}") from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Advisor request failed, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except ValueError as exc:
                    raise AdvisorError(f"Advisor flow '{flow}' returned invalid JSON.") from exc
                except httpx.InvalidURL as exc:
                    raise AdvisorError(f"Advisor base URL is invalid: {exc}") from exc
        finally:
            client.close()

    def _call(self, flow: str, payload: BaseModel, adapter: TypeAdapter[T], fallback: T) -> T:
        try:
            return adapter.validate_python(self._run_flow(flow, payload))
        except AdvisorError as exc:
            logger.warning(f"Advisor unavailable for {flow}: {exc}")
        except ValidationError as exc:
            logger.warning(f"Advisor returned an unexpected {flow} payload: {exc.error_count()} error(s)")
        return fallback

    def forecast_demand(self, request: ForecastDemandRequest) -> list[StockRebalance]:
        """Stock rebalancing suggestions derived from recent orders."""
        return self._call(FORECAST_DEMAND_FLOW, request, TypeAdapter(list[StockRebalance]), [])

    def predict_delivery_times(self, routes: Sequence[RoutePredictionInput]) -> list[DeliveryPrediction]:
        if not routes:
            return []
        request = PredictDeliveryTimesRequest(routes=list(routes))
        return self._call(PREDICT_DELIVERY_TIMES_FLOW, request, TypeAdapter(list[DeliveryPrediction]), [])

    def propose_route(self, request: ProposeRouteRequest) -> RouteProposal | None:
        return self._call(PROPOSE_ROUTE_FLOW, request, TypeAdapter(RouteProposal), None)


def check_health(base_url: str | None = None) -> bool:
    """Return True when the advisor answers an HTTP request at its base URL."""
    base = base_url or settings.advisor_base_url
    if not base:
        return False
    try:
        response = httpx.get(base, timeout=5.0)
        return response.status_code < 500
    except (httpx.HTTPError, httpx.InvalidURL):
        return False
