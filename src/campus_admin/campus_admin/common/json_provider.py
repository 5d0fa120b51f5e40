from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum

from flask.json.provider import DefaultJSONProvider


class DomainJSONProvider(DefaultJSONProvider):
    """JSON provider that understands the domain models.

    Objects exposing ``to_json()`` control their own representation, other
    dataclasses are dumped field by field, dates are ISO formatted.
    """

    sort_keys = False

    @staticmethod
    def default(o):
        if hasattr(o, "to_json"):
            return o.to_json()
        if is_dataclass(o) and not isinstance(o, type):
            return asdict(o)
        if isinstance(o, Enum):
            return o.value
        if isinstance(o, (datetime, date, time)):
            return o.isoformat()
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, (set, frozenset)):
            return sorted(o)
        return DefaultJSONProvider.default(o)
