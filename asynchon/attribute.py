"""Live attribute values reported by an appliance."""

from __future__ import annotations

import datetime
from typing import Any, Mapping, Optional, Union

from asynchon.config import settings
from asynchon.utils.helper import str_to_float

__all__ = ["HonAttribute"]


class HonAttribute:
    """A reported value that a local write can shield from device pushes.

    After :meth:`update` with ``shield=True`` the attribute ignores
    unshielded updates for ``settings.attribute_lock_timeout`` seconds, so
    an optimistic local echo is not overwritten by a stale push that was
    already in flight.
    """

    def __init__(self, data: Union[str, Mapping[str, Any]], lock_timeout: Optional[float] = None) -> None:
        self._value: str = ""
        self._last_update: Optional[datetime.datetime] = None
        self._lock_timestamp: Optional[datetime.datetime] = None
        self._lock_timeout = settings.attribute_lock_timeout if lock_timeout is None else lock_timeout
        self.update(data)

    @property
    def value(self) -> Union[float, int, str]:
        """The value as a number when it parses as one, else the raw string."""
        try:
            return str_to_float(self._value)
        except ValueError:
            return self._value

    @value.setter
    def value(self, value: str) -> None:
        self._value = value

    @property
    def last_update(self) -> Optional[datetime.datetime]:
        return self._last_update

    @property
    def lock(self) -> bool:
        """Whether a shielded update is still protecting the value."""
        if self._lock_timestamp is None:
            return False
        lock_until = self._lock_timestamp + datetime.timedelta(seconds=self._lock_timeout)
        return lock_until >= _utcnow()

    def update(self, data: Union[str, Mapping[str, Any]], shield: bool = False) -> bool:
        """Apply *data*; return ``False`` if a shield rejected it."""
        if self.lock and not shield:
            return False
        if shield:
            self._lock_timestamp = _utcnow()
        if isinstance(data, str):
            self.value = data
            return True
        self.value = str(data.get("parNewVal", ""))
        last_update = data.get("lastUpdate")
        if last_update:
            try:
                self._last_update = datetime.datetime.fromisoformat(str(last_update).replace("Z", "+00:00"))
            except ValueError:
                self._last_update = None
        return True

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"HonAttribute({self._value!r})"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)
