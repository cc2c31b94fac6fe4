"""Activation, chase and QSO records in the SOTA database wire format.

Dates may be given as ``date`` objects or any string accepted by
:func:`sota_client.dates.parse_date`; they are normalised on every
assignment and always serialised as ``DD/MM/YYYY``.

Example::

    qso = Qso(date="2025-05-29", time="23:23", callsign="W1AW",
              s2s_summit_code="JA/NN-181", mode="CW", band="14.310MHz")
    activation = Activation(date="2025-05-29", summit="W3/PW-024",
                            own_callsign="W0KEH", qsos=[qso])
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date as Date
from typing import Any

from .dates import format_date, parse_date
from .errors import InvalidArgument


def _field_str(data: Mapping[str, Any], key: str, record: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidArgument(
            f"{record} field {key!r} must be a string, got {type(value).__name__}"
        )
    return value


def _validated(record: str, name: str, value: Any) -> Any:
    if name == "date":
        return parse_date(value)
    if name == "qsos":
        return _checked_qsos(value)
    if not isinstance(value, str):
        raise InvalidArgument(
            f"{record} field {name!r} must be a string, got {type(value).__name__}"
        )
    return value


def _require_mapping(data: Any, record: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidArgument(f"{record} must be an object, got {type(data).__name__}")
    if data.get("date") in (None, ""):
        raise InvalidArgument(f"{record} is missing required field 'date'")
    return data


@dataclass(slots=True)
class Qso:
    """A single contact logged during an activation."""

    date: Date
    time: str = ""
    callsign: str = ""
    s2s_summit_code: str = ""
    mode: str = ""
    band: str = ""
    comments: str = ""

    def __setattr__(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, _validated("QSO", name, value))

    @property
    def is_s2s(self) -> bool:
        return bool(self.s2s_summit_code)

    def to_dict(self) -> dict[str, str]:
        return {
            "date": format_date(self.date),
            "time": self.time,
            "callsign": self.callsign,
            "s2sSummitCode": self.s2s_summit_code,
            "mode": self.mode,
            "band": self.band,
            "comments": self.comments,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Qso:
        data = _require_mapping(data, "QSO")
        return cls(
            date=data["date"],
            time=_field_str(data, "time", "QSO"),
            callsign=_field_str(data, "callsign", "QSO"),
            s2s_summit_code=_field_str(data, "s2sSummitCode", "QSO"),
            mode=_field_str(data, "mode", "QSO"),
            band=_field_str(data, "band", "QSO"),
            comments=_field_str(data, "comments", "QSO"),
        )


@dataclass(slots=True)
class Activation:
    """A summit visit and the contacts made from it.

    ``qsos`` is checked every time it is assigned: each element must be a
    :class:`Qso`. A rejected assignment leaves the previous value in place,
    as for every other field.
    """

    date: Date
    summit: str = ""
    own_callsign: str = ""
    qsos: list[Qso] = field(default_factory=list)

    def __setattr__(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, _validated("Activation", name, value))

    def add_qso(self, qso: Qso) -> None:
        if not isinstance(qso, Qso):
            raise InvalidArgument(f"Expected a Qso, got {type(qso).__name__}")
        self.qsos.append(qso)

    def s2s_qsos(self) -> list[Qso]:
        return [qso for qso in self.qsos if qso.is_s2s]

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": format_date(self.date),
            "summit": self.summit,
            "ownCallsign": self.own_callsign,
            "qsos": [qso.to_dict() for qso in self.qsos],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Activation:
        data = _require_mapping(data, "Activation")
        raw_qsos = data.get("qsos") or []
        if not isinstance(raw_qsos, list):
            raise InvalidArgument("Activation field 'qsos' must be a list")
        return cls(
            date=data["date"],
            summit=_field_str(data, "summit", "Activation"),
            own_callsign=_field_str(data, "ownCallsign", "Activation"),
            qsos=[Qso.from_dict(item) for item in raw_qsos],
        )


def _checked_qsos(value: Iterable[Any]) -> list[Qso]:
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise InvalidArgument("qsos must be a list of Qso instances")
    items = list(value)
    for index, item in enumerate(items):
        if not isinstance(item, Qso):
            raise InvalidArgument(
                f"All items must be instances of Qso (item {index} is {type(item).__name__})"
            )
    return items


@dataclass(slots=True)
class Chase:
    """A contact made with an activator, from the chaser's side.

    ``summit_code`` is where the chaser was (S2S chases only);
    ``s2s_summit_code`` is the other station's summit.
    """

    date: Date
    time_str: str = ""
    own_callsign: str = ""
    other_callsign: str = ""
    summit_code: str = ""
    s2s_summit_code: str = ""
    mode: str = ""
    band: str = ""
    comments: str = ""

    def __setattr__(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, _validated("Chase", name, value))

    def to_dict(self) -> dict[str, str]:
        return {
            "date": format_date(self.date),
            "timeStr": self.time_str,
            "otherCallsign": self.other_callsign,
            "ownCallsign": self.own_callsign,
            "s2sSummitCode": self.s2s_summit_code,
            "summitCode": self.summit_code,
            "mode": self.mode,
            "band": self.band,
            "comments": self.comments,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Chase:
        data = _require_mapping(data, "Chase")
        return cls(
            date=data["date"],
            time_str=_field_str(data, "timeStr", "Chase"),
            own_callsign=_field_str(data, "ownCallsign", "Chase"),
            other_callsign=_field_str(data, "otherCallsign", "Chase"),
            summit_code=_field_str(data, "summitCode", "Chase"),
            s2s_summit_code=_field_str(data, "s2sSummitCode", "Chase"),
            mode=_field_str(data, "mode", "Chase"),
            band=_field_str(data, "band", "Chase"),
            comments=_field_str(data, "comments", "Chase"),
        )
