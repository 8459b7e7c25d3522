from __future__ import annotations

from typing import Any, List, Mapping

from asynchon.parameters.base import HonParameter, ParameterKind


class HonParameterFixed(HonParameter):
    """A single preset value.

    The vendor treats "fixed" values as overridable, so the setter accepts
    anything.
    """

    kind = ParameterKind.FIXED

    def __init__(self, key: str, attributes: Mapping[str, Any], group: str) -> None:
        super().__init__(key, attributes, group)
        self._value: Any = self._attributes.get("fixedValue", "")

    def reset(self) -> None:
        super().reset()
        self._value = self._attributes.get("fixedValue", "")

    @property
    def value(self) -> Any:
        return self._value if self._value != "" else "0"

    @value.setter
    def value(self, value: Any) -> None:
        self._value = value
        self.check_trigger(value)

    @property
    def values(self) -> List[str]:
        return [str(self.value)]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} (<{self.key}> fixed)"
