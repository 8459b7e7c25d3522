from __future__ import annotations

import copy
import re
from typing import TYPE_CHECKING, Any, Dict, List

from asynchon.exceptions import ValidationError
from asynchon.parameters.base import HonParameter, ParameterKind
from asynchon.utils.helper import clean_category_name, str_to_float

if TYPE_CHECKING:
    from asynchon.commands.command import HonCommand

# prefixes the vendor puts in front of program identifiers
VENDOR_PREFIXES = ("iot_", "special_", "hqd_")

# connector words kept lower case when formatting program names
SMALL_WORDS = frozenset({"a", "an", "and", "at", "by", "for", "in", "of", "on", "or", "the", "to", "with"})


class HonParameterProgram(HonParameter):
    """Selection among the sibling categories of a command.

    The legal values are the names in the owning command's category map,
    read live so categories registered after construction (favourites)
    are included.
    """

    kind = ParameterKind.PROGRAM

    def __init__(self, key: str, command: "HonCommand", group: str) -> None:
        super().__init__(key, {"typology": "enum"}, group)
        self._command = command
        self._value: str = clean_category_name(command.category)

    def reset(self) -> None:
        super().reset()
        self._value = clean_category_name(self._command.category)

    @property
    def command(self) -> "HonCommand":
        return self._command

    @property
    def value(self) -> str:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        if value in self.values:
            self._value = value
            self.check_trigger(value)
        else:
            raise ValidationError(self.key, value, ", ".join(self.values))

    @property
    def values(self) -> List[str]:
        return list(self._command.categories)

    @property
    def ids(self) -> Dict[int, str]:
        """Program code → category name, ordered by code.

        Synthetic ``iot_`` categories, categories without a ``prCode`` and
        favourites are left out.
        """
        result: Dict[int, str] = {}
        for name, command in self._command.categories.items():
            if name.startswith("iot_"):
                continue
            pr_code = command.parameters.get("prCode")
            if pr_code is None:
                continue
            favourite = command.parameters.get("favourite")
            if favourite is not None and str(favourite.value) == "1":
                continue
            try:
                result[int(str_to_float(pr_code.value))] = name
            except ValueError:
                continue
        return dict(sorted(result.items()))

    @staticmethod
    def format_program_name(raw: str) -> str:
        """Turn an identifier such as ``iot_rapid_14_min`` into ``Rapid 14 Min``."""
        name = str(raw or "").strip()
        if "." in name:
            name = name.split(".")[-1]
        lowered = name.lower()
        for prefix in VENDOR_PREFIXES:
            if lowered.startswith(prefix):
                name = name[len(prefix):]
                break
        words = [word for word in re.split(r"[_\-\s]+", name) if word]
        formatted = []
        for index, word in enumerate(words):
            word = word.lower()
            if index and word in SMALL_WORDS:
                formatted.append(word)
            else:
                formatted.append(word[:1].upper() + word[1:])
        return " ".join(formatted)

    def rebind(self, command: "HonCommand") -> "HonParameterProgram":
        """Copy of this parameter owned by *command* (used when cloning commands)."""
        new = copy.copy(self)
        new._attributes = copy.deepcopy(self._attributes)
        new._triggers = {value: list(triggers) for value, triggers in self._triggers.items()}
        new._command = command
        return new

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} (<{self.key}> {self.values})"
