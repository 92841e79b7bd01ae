"""Client implementation for the Librato metrics API."""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import httpx
import pandas as pd

from . import __version__
from .errors import ConfigurationError, TransportError, ValidationError
from .types import Measurement, Metric, measurement_from_dict, measurement_to_dict

logger = logging.getLogger(__name__)

METRICS_URL = "https://metrics-api.librato.com/v1/metrics"
CONTENT_TYPE = "application/json"
USER_AGENT = f"librato-client-python/{__version__}"
DEFAULT_TIMEOUT = 10.0

MeasurementLike = Union[Measurement, Mapping[str, Any]]
MetricLike = Union[Metric, Mapping[str, Any]]


def group_measurements(measurements: Iterable[Measurement]) -> Dict[str, List[Dict[str, Any]]]:
    """Build the POST body: one "<kind>s" array per kind, in first-seen order."""
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for measurement in measurements:
        body = measurement_to_dict(measurement)
        grouped.setdefault(measurement.type + "s", []).append(body)
    return grouped


class MetricsClient:
    """Client for submitting measurements and managing metrics on Librato."""

    def __init__(self, user: str, api_token: str,
                 transport: Optional[httpx.BaseTransport] = None,
                 timeout: Optional[float] = DEFAULT_TIMEOUT):
        """Initialize the client with account credentials.

        ``transport`` replaces the default pooled HTTP transport, which is
        mostly useful for tests.
        """
        if not user or not api_token:
            raise ConfigurationError("User and API token are required")
        self.user = user
        self._http = httpx.Client(
            auth=httpx.BasicAuth(user, api_token),
            headers={"User-Agent": USER_AGENT, "Content-Type": CONTENT_TYPE},
            transport=transport,
            timeout=timeout,
        )

    def close(self):
        """Release pooled connections."""
        self._http.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def submit_measurement(self, measurement: Optional[MeasurementLike]) -> None:
        """Submit a single measurement; None is ignored."""
        if measurement is None:
            return
        self.submit_measurements([measurement])

    def submit_measurements(self, measurements: Optional[Iterable[MeasurementLike]]) -> None:
        """Submit a batch of measurements in one POST.

        Measurements are grouped by kind, keeping the order in which each
        kind first appears and the order of measurements within a kind.
        """
        if not measurements:
            return

        records = [
            m if not isinstance(m, Mapping) else measurement_from_dict(m)
            for m in measurements
        ]
        if not records:
            return

        logger.debug("Submitting %d measurements", len(records))
        self._send("POST", METRICS_URL, group_measurements(records))

    def submit_dataframe(self, frame: pd.DataFrame) -> None:
        """Submit every row of a DataFrame as one batch.

        Columns are named after the API fields plus an optional ``type``
        column; empty cells are treated as absent fields.
        """
        if frame.empty:
            return
        self.submit_measurements(frame.to_dict(orient="records"))

    def create_metric(self, metric: Optional[MetricLike]) -> None:
        """Create or update a metric definition."""
        metric = self._require_metric(metric)
        self._send("PUT", self._metric_url(metric), metric.to_dict())

    def delete_metric(self, metric: Optional[MetricLike]) -> None:
        """Delete a metric and all of its measurements."""
        metric = self._require_metric(metric)
        self._send("DELETE", self._metric_url(metric), None)

    @staticmethod
    def _require_metric(metric: Optional[MetricLike]) -> Metric:
        if metric is None:
            raise ValidationError("metric is required")
        if isinstance(metric, Mapping):
            return Metric.from_dict(metric)
        return metric

    @staticmethod
    def _metric_url(metric: Metric) -> str:
        return f"{METRICS_URL}/{metric.name}"

    def _send(self, method: str, url: str, payload: Optional[Dict[str, Any]]) -> httpx.Response:
        content = json.dumps(payload, allow_nan=False).encode("utf-8") if payload is not None else b""
        logger.debug("%s %s (%d bytes)", method, url, len(content))

        response = self._http.request(method, url, content=content)
        if not response.is_success:
            logger.warning("%s %s returned HTTP %d", method, url, response.status_code)
            raise TransportError(response.status_code, method, url, response.text)
        return response
