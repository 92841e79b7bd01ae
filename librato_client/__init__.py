"""
Python client library for submitting measurements to the Librato metrics API.
"""

__version__ = "0.1.0"

from .client import MetricsClient
from .errors import ConfigurationError, LibratoError, TransportError, ValidationError
from .types import CounterMeasurement, GaugeMeasurement, Metric, measurement_from_dict

__all__ = [
    "MetricsClient",
    "Metric",
    "CounterMeasurement",
    "GaugeMeasurement",
    "measurement_from_dict",
    "LibratoError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
]
