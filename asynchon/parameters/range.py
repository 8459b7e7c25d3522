from __future__ import annotations

from typing import Any, List, Mapping

from asynchon.exceptions import ValidationError
from asynchon.parameters.base import HonParameter, ParameterKind
from asynchon.utils.helper import Number, from_decimal, str_to_float, to_decimal


class HonParameterRange(HonParameter):
    """A number in ``[min, max]`` aligned to ``step``."""

    kind = ParameterKind.RANGE

    def __init__(self, key: str, attributes: Mapping[str, Any], group: str) -> None:
        super().__init__(key, attributes, group)
        self._min: Number = 0
        self._max: Number = 0
        self._step: Number = 0
        self._default: Number = 0
        self._value: Number = 0
        self._set_bounds()

    def _set_bounds(self) -> None:
        self._min = str_to_float(self._attributes.get("minimumValue", 0) or 0)
        self._max = str_to_float(self._attributes.get("maximumValue", 0) or 0)
        self._step = str_to_float(self._attributes.get("incrementValue", 0) or 0)
        self._default = str_to_float(self._attributes.get("defaultValue", self._min) or self._min)
        self._value = self._default

    def reset(self) -> None:
        super().reset()
        self._set_bounds()

    @property
    def min(self) -> Number:
        return self._min

    @min.setter
    def min(self, mini: Number) -> None:
        self._min = str_to_float(mini)

    @property
    def max(self) -> Number:
        return self._max

    @max.setter
    def max(self, maxi: Number) -> None:
        self._max = str_to_float(maxi)

    @property
    def step(self) -> Number:
        """Increment between legal values, ``1`` when the vendor sends none."""
        return self._step or 1

    @step.setter
    def step(self, step: Number) -> None:
        self._step = str_to_float(step)

    @property
    def default(self) -> Number:
        return self._default

    @property
    def value(self) -> Number:
        return self._value if self._value is not None else self.min

    @value.setter
    def value(self, value: Any) -> None:
        try:
            number = str_to_float(value)
        except ValueError as exc:
            raise ValidationError(self.key, value, self._allowed()) from exc
        if not self._is_legal(number):
            raise ValidationError(self.key, number, self._allowed())
        self._value = number
        self.check_trigger(number)

    def _is_legal(self, number: Number) -> bool:
        if not self.min <= number <= self.max:
            return False
        offset = to_decimal(number) - to_decimal(self.min)
        return offset % to_decimal(self.step) == 0

    def _allowed(self) -> str:
        return f"min {self.min} max {self.max} step {self.step}"

    @property
    def values(self) -> List[Number]:
        """Every legal value from ``min`` to ``max``.

        The list has ``(max - min) / step + 1`` entries; use :attr:`min`,
        :attr:`max` and :attr:`step` when only the bounds are needed.
        """
        result = []
        current, maximum, step = to_decimal(self.min), to_decimal(self.max), to_decimal(self.step)
        if step <= 0:
            return [self.min]
        while current <= maximum:
            result.append(from_decimal(current))
            current += step
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} (<{self.key}> [{self.min} - {self.max}])"
