"""Type definitions for the Librato client."""

import math
import numbers
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Union

import pandas as pd

from .errors import ValidationError

Number = Union[int, float]

COUNTER = "counter"
GAUGE = "gauge"
KINDS = (COUNTER, GAUGE)


def _check_name(name: Optional[str]) -> None:
    """Reject missing or empty metric names."""
    if not name:
        raise ValidationError("name must be a non-empty string")


def _check_period(period: Optional[int]) -> None:
    """Reject periods that are not non-negative whole seconds."""
    if period is not None and (
            isinstance(period, bool) or not isinstance(period, numbers.Integral) or period < 0):
        raise ValidationError(f"period must be a non-negative integer, got {period!r}")


def _check_number(owner: str, field: str, value: Any, integral: bool = False) -> None:
    """Reject values that are not finite numbers (NaN and infinity are not valid JSON)."""
    kind = numbers.Integral if integral else numbers.Real
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ValidationError(f"{owner}: {field} must be {'an integer' if integral else 'a number'}, "
                              f"got {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"{owner}: {field} must be finite, got {value!r}")


def _present(value: Any) -> bool:
    """True unless the value is None or a pandas missing marker (NaN, NaT, NA)."""
    if value is None:
        return False
    return not (pd.api.types.is_scalar(value) and pd.isna(value))


def _clean(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy a mapping without its absent values."""
    return {key: value for key, value in data.items() if _present(value)}


def _as_int(field: str, value: Any) -> int:
    """Convert a whole number, including integral floats such as 60.0, to int."""
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be an integer, got {value!r}") from exc
    if not number.is_integer():
        raise ValidationError(f"{field} must be an integer, got {value!r}")
    return int(number)


def _as_datetime(value: Any) -> Optional[datetime]:
    """Accept datetimes and ISO strings; read numbers and numeric strings as Unix seconds (UTC)."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        if isinstance(value, str):
            try:
                seconds = float(value)
            except ValueError:
                return datetime.fromisoformat(value)
        else:
            seconds = float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        raise ValidationError(f"measurement_time is not a valid timestamp: {value!r}") from exc


def unix_timestamp(moment: datetime) -> int:
    """Whole seconds since the epoch; naive datetimes are read as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return math.floor(moment.timestamp())


def _metric_info(record: Any, include_name: bool) -> Dict[str, Any]:
    """Fields shared by metrics and measurements, skipping the unset ones."""
    info: Dict[str, Any] = {}
    if include_name:
        info["name"] = record.name
    if record.display_name is not None:
        info["display_name"] = record.display_name
    if record.description is not None:
        info["description"] = record.description
    if record.period is not None:
        info["period"] = record.period
    return info


@dataclass(frozen=True)
class Metric:
    """A metric definition as stored by the metrics API."""
    name: str
    type: str = GAUGE
    display_name: Optional[str] = None
    description: Optional[str] = None
    period: Optional[int] = None

    def __post_init__(self):
        _check_name(self.name)
        if self.type not in KINDS:
            raise ValidationError(f"unknown metric type {self.type!r}")
        _check_period(self.period)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Metric':
        """Create a Metric from a dictionary, ignoring empty fields.

        Keys that are not metric fields are rejected, as for measurements.
        """
        data = _clean(data)
        if 'period' in data:
            data['period'] = _as_int('period', data['period'])
        try:
            return cls(**data)
        except TypeError as exc:
            raise ValidationError(f"invalid metric: {exc}") from exc

    def to_dict(self) -> Dict[str, Any]:
        """Request body for creating the metric; the name travels in the URL."""
        body: Dict[str, Any] = {"type": self.type}
        body.update(_metric_info(self, include_name=False))
        return body


@dataclass(frozen=True)
class CounterMeasurement:
    """A single counter reading."""
    type: ClassVar[str] = COUNTER

    name: str
    value: Number
    source: Optional[str] = None
    measurement_time: Optional[datetime] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    period: Optional[int] = None

    def __post_init__(self):
        _check_name(self.name)
        _check_period(self.period)
        if self.value is None:
            raise ValidationError(f"counter measurement {self.name!r} needs a value")
        _check_number(self.name, "value", self.value)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as one entry of the "counters" array."""
        return measurement_to_dict(self)


@dataclass(frozen=True)
class GaugeMeasurement:
    """Aggregated gauge statistics gathered over one reporting interval."""
    type: ClassVar[str] = GAUGE

    name: str
    count: int
    sum: Number
    max: Optional[Number] = None
    min: Optional[Number] = None
    sum_squares: Optional[Number] = None
    source: Optional[str] = None
    measurement_time: Optional[datetime] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    period: Optional[int] = None

    def __post_init__(self):
        _check_name(self.name)
        _check_period(self.period)
        if self.count is None or self.sum is None:
            raise ValidationError(f"gauge measurement {self.name!r} needs count and sum")
        _check_number(self.name, "count", self.count, integral=True)
        for field in ("sum", "max", "min", "sum_squares"):
            value = getattr(self, field)
            if value is not None:
                _check_number(self.name, field, value)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as one entry of the "gauges" array."""
        return measurement_to_dict(self)


Measurement = Union[CounterMeasurement, GaugeMeasurement]


def _counter_fields(measurement: CounterMeasurement) -> Dict[str, Any]:
    """Counter value, written as a string as the API expects."""
    return {"value": str(measurement.value)}


def _gauge_fields(measurement: GaugeMeasurement) -> Dict[str, Any]:
    """Gauge statistics as JSON numbers, leaving out the unset ones."""
    fields: Dict[str, Any] = {"count": measurement.count, "sum": measurement.sum}
    for key in ("max", "min", "sum_squares"):
        value = getattr(measurement, key)
        if value is not None:
            fields[key] = value
    return fields


_VALUE_FIELDS: Dict[str, Callable[[Any], Dict[str, Any]]] = {
    COUNTER: _counter_fields,
    GAUGE: _gauge_fields,
}

_VARIANTS = {
    COUNTER: CounterMeasurement,
    GAUGE: GaugeMeasurement,
}


def measurement_to_dict(measurement: Measurement) -> Dict[str, Any]:
    """Serialize one measurement in the field order the API documents."""
    kind = getattr(measurement, 'type', None)
    value_fields = _VALUE_FIELDS.get(kind)
    if value_fields is None:
        raise ValidationError(f"unknown measurement type {kind!r}")

    body = _metric_info(measurement, include_name=True)
    moment = measurement.measurement_time
    if moment is not None and moment != datetime.min:
        body["measurement_time"] = str(unix_timestamp(moment))
    if measurement.source is not None:
        body["source"] = measurement.source
    body.update(value_fields(measurement))
    return body


def measurement_from_dict(data: Mapping[str, Any]) -> Measurement:
    """Create the measurement variant named by the 'type' key (default counter).

    Keys holding None, NaN or NaT are treated as absent, so rows read from a
    DataFrame with sparse columns convert cleanly.
    """
    data = _clean(data)
    kind = data.pop('type', COUNTER)
    variant = _VARIANTS.get(kind)
    if variant is None:
        raise ValidationError(f"unknown measurement type {kind!r}")

    if 'measurement_time' in data:
        data['measurement_time'] = _as_datetime(data['measurement_time'])
    if 'period' in data:
        data['period'] = _as_int('period', data['period'])
    if kind == GAUGE and 'count' in data:
        data['count'] = _as_int('count', data['count'])

    try:
        return variant(**data)
    except TypeError as exc:
        raise ValidationError(f"invalid {kind} measurement: {exc}") from exc
