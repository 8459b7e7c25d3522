"""Common parameter behaviour shared by every parameter kind.

A parameter is a single typed, validated value inside a command. The four
concrete kinds (fixed, enum, range, program) are a closed set; callers
discriminate them through :attr:`HonParameter.kind` rather than by class.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


class ParameterKind(str, Enum):
    """Discriminant of the parameter sum type."""

    FIXED = "fixed"
    ENUM = "enum"
    RANGE = "range"
    PROGRAM = "program"


TriggerCallback = Callable[[Any], None]


@dataclass
class Trigger:
    """A side effect bound to one value of a parameter."""

    callback: TriggerCallback
    data: Any = None

    def __call__(self) -> None:
        self.callback(self.data)


class HonParameter:
    """Base class holding the attributes every parameter kind has.

    Subclasses set :attr:`kind` and own their value payload entirely; the
    base never initialises or touches variant data.
    """

    kind: ParameterKind

    def __init__(self, key: str, attributes: Mapping[str, Any], group: str) -> None:
        self._key = key
        self._attributes: Dict[str, Any] = dict(attributes)
        self._group = group
        self._category: str = ""
        self._typology: str = ""
        self._mandatory: int = 0
        self._triggers: Dict[str, List[Trigger]] = {}
        self._set_common_attributes()

    def _set_common_attributes(self) -> None:
        self._category = str(self._attributes.get("category", "") or "")
        self._typology = str(self._attributes.get("typology", "") or "")
        try:
            self._mandatory = int(self._attributes.get("mandatory", 0) or 0)
        except (TypeError, ValueError):
            self._mandatory = 0

    # ------------------------------------------------------------------
    # Common attributes

    @property
    def key(self) -> str:
        return self._key

    @property
    def group(self) -> str:
        """Parameter bag the value is sent in (``parameters``, ``ancillaryParameters``...)."""
        return self._group

    @property
    def category(self) -> str:
        return self._category

    @property
    def typology(self) -> str:
        return self._typology

    @property
    def mandatory(self) -> int:
        return self._mandatory

    @property
    def attributes(self) -> Dict[str, Any]:
        """Raw attributes the parameter was parsed from."""
        return self._attributes

    # ------------------------------------------------------------------
    # Value interface, implemented per kind

    @property
    def value(self) -> Any:
        raise NotImplementedError

    @value.setter
    def value(self, value: Any) -> None:
        raise NotImplementedError

    @property
    def values(self) -> List[Any]:
        raise NotImplementedError

    @property
    def intern_value(self) -> str:
        """Value as sent on the wire."""
        return str(self.value)

    def reset(self) -> None:
        """Restore the value parsed from the raw attributes."""
        self._set_common_attributes()

    # ------------------------------------------------------------------
    # Triggers

    def add_trigger(self, value: Any, func: TriggerCallback, data: Any = None) -> None:
        """Run *func(data)* whenever the parameter is set to *value*.

        If the parameter already holds *value* the callback runs right away.
        """
        trigger = Trigger(func, data)
        if _trigger_key(self.value) == _trigger_key(value):
            trigger()
        self._triggers.setdefault(_trigger_key(value), []).append(trigger)

    def check_trigger(self, value: Any) -> None:
        """Run the triggers registered for *value*, in registration order."""
        for trigger in tuple(self._triggers.get(_trigger_key(value), ())):
            trigger()

    @property
    def triggers(self) -> Dict[str, List[Any]]:
        """Payloads registered per trigger value."""
        return {value: [t.data for t in triggers] for value, triggers in self._triggers.items()}

    # ------------------------------------------------------------------
    # Copying

    def clone(self) -> "HonParameter":
        """Return an independent copy of this parameter.

        The raw attributes and the variant payload are deep-copied, the
        trigger lists are copied so later registrations stay local.
        """
        new = copy.copy(self)
        new._attributes = copy.deepcopy(self._attributes)
        new._triggers = {value: list(triggers) for value, triggers in self._triggers.items()}
        self._copy_payload(new)
        return new

    def validate(self, value: Any) -> None:
        """Raise :class:`ValidationError` if *value* would be rejected.

        Nothing is committed and no trigger runs.
        """
        trial = self.clone()
        trial._triggers = {}
        trial.value = value

    def _copy_payload(self, new: "HonParameter") -> None:
        """Deep-copy variant data into *new*; overridden by kinds with containers."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} (<{self.key}> {self.kind.value})"


def _trigger_key(value: Any) -> str:
    return str(value).lower()
