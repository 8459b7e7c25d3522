from __future__ import annotations

from typing import Any, List, Mapping

from asynchon.exceptions import ValidationError
from asynchon.parameters.base import HonParameter, ParameterKind


def clean_value(value: Any) -> str:
    """Normalize an option the way the vendor's apps compare them.

    ``"[Cottons|Synthetic]"`` → ``"cottons_synthetic"``
    """
    return str(value).strip("[]").replace("|", "_").lower().strip()


class HonParameterEnum(HonParameter):
    """A value picked from a closed list of options."""

    kind = ParameterKind.ENUM

    def __init__(self, key: str, attributes: Mapping[str, Any], group: str) -> None:
        super().__init__(key, attributes, group)
        self._default: str = ""
        self._value: str = ""
        self._values: List[str] = []
        self._set_options()

    def _set_options(self) -> None:
        self._default = str(self._attributes.get("defaultValue", "") or "")
        self._value = self._default or "0"
        self._values = [str(option) for option in self._attributes.get("enumValues", []) or []]
        if self._default and clean_value(self._default) not in self.values:
            self._values.append(self._default)

    def reset(self) -> None:
        super().reset()
        self._set_options()

    @property
    def default(self) -> str:
        return self._default

    @property
    def values(self) -> List[str]:
        return [clean_value(value) for value in self._values]

    @values.setter
    def values(self, values: List[Any]) -> None:
        self._values = [str(value) for value in values]

    @property
    def intern_value(self) -> str:
        if self._value is not None:
            return str(self._value)
        return self.values[0] if self._values else "0"

    @property
    def value(self) -> str:
        if self._value is not None:
            return clean_value(self._value)
        return self.values[0] if self._values else "0"

    @value.setter
    def value(self, value: Any) -> None:
        # the candidate is compared as given; callers normalize with clean_value
        if value in self.values:
            self._value = value
            self.check_trigger(value)
        else:
            raise ValidationError(self.key, value, ", ".join(self.values))

    def _copy_payload(self, new: HonParameter) -> None:
        new._values = list(self._values)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} (<{self.key}> {self.values})"
