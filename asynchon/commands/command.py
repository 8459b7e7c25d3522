"""Sendable appliance commands.

A :class:`HonCommand` groups the typed parameters of one vendor command
(``startProgram``, ``settings``...) and knows its sibling *categories*:
alternative parameter sets sharing the command name, such as the wash
programs of ``startProgram``.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, cast

from asynchon.exceptions import MissingCredentialsError, TransmissionError, ValidationError
from asynchon.exceptions.network import NetworkException
from asynchon.models.result import SendResult
from asynchon.parameters import (
    HonParameter,
    HonParameterFixed,
    HonParameterProgram,
    ParameterKind,
    create_parameter,
)
from asynchon.utils.helper import clean_category_name

if TYPE_CHECKING:
    from asynchon.api.client import HonAPI
    from asynchon.appliance import HonAppliance

__all__ = ["HonCommand"]

logger = logging.getLogger(__name__)

# keys of a command node that describe the node itself
COMMAND_MARKERS = ("description", "protocolType")

# selectors that pick a sibling category instead of carrying a value
CATEGORY_SELECTORS = ("program", "category")


class HonCommand:
    """A named command composed of typed parameters."""

    def __init__(
        self,
        name: str,
        attributes: Mapping[str, Any],
        appliance: Optional["HonAppliance"],
        categories: Optional[Dict[str, "HonCommand"]] = None,
        category_name: str = "",
    ) -> None:
        self._name = name
        self._appliance = appliance
        self._categories = categories
        self._category_name = category_name
        self._parameters: Dict[str, HonParameter] = {}
        self._data: Dict[str, Any] = {}
        self._rules: Dict[str, Any] = {}

        attributes = dict(attributes)
        self.description = attributes.pop("description", None)
        self.protocol_type = attributes.pop("protocolType", None)
        self._load_parameters(attributes)

    def __repr__(self) -> str:
        return f"{self._name} command"

    # ------------------------------------------------------------------
    # Parsing

    def _load_parameters(self, attributes: Mapping[str, Any]) -> None:
        for group, items in attributes.items():
            if not isinstance(items, Mapping):
                self.logger.debug("Loading attributes - skipping %s=%r", group, items)
                self._data[group] = items
                continue
            for name, data in items.items():
                self._create_parameter(data, name, group)

        if self._category_name:
            name = "program" if "PROGRAM" in self._category_name else "category"
            self._parameters[name] = HonParameterProgram(name, self, "custom")

    def _create_parameter(self, data: Any, name: str, group: str) -> None:
        if not isinstance(data, Mapping):
            self._data[name] = data
            return

        if name == "zoneMap" and self.zone:
            data = dict(data, defaultValue=str(self.zone), fixedValue=str(self.zone))

        if data.get("category") == "rule":
            self._add_rule(name, data)
            return

        parameter = create_parameter(name, data, group)
        if parameter is None:
            self._data[name] = data
            return
        self._parameters[name] = parameter

    def _add_rule(self, name: str, data: Mapping[str, Any]) -> None:
        """Keep a ``rule`` entry without evaluating it.

        Rules are not wired into the trigger system; they are stored so
        callers can inspect them through :attr:`rules`.
        """
        self.logger.debug("Rule %s of %s is stored but not evaluated", name, self._name)
        self._rules[name] = data

    # ------------------------------------------------------------------
    # Basic attributes

    @property
    def name(self) -> str:
        return self._name

    @property
    def appliance(self) -> Optional["HonAppliance"]:
        return self._appliance

    @property
    def logger(self) -> logging.Logger:
        if self._appliance is not None:
            return self._appliance.logger
        return logger

    @property
    def zone(self) -> int:
        if self._appliance is None:
            return 0
        return self._appliance.zone

    @property
    def api(self) -> "HonAPI":
        """API session of the owning appliance.

        Raises
        ------
        MissingCredentialsError
            If no session has been attached.
        """
        if self._appliance is None:
            raise MissingCredentialsError()
        return self._appliance.api

    @property
    def data(self) -> Dict[str, Any]:
        """Non-parameter entries passed through unparsed."""
        return self._data

    @property
    def rules(self) -> Dict[str, Any]:
        return self._rules

    @property
    def parameters(self) -> Dict[str, HonParameter]:
        return self._parameters

    @property
    def settings(self) -> Dict[str, HonParameter]:
        return self._parameters

    @property
    def parameter_groups(self) -> Dict[str, Dict[str, str]]:
        """Wire values grouped by parameter bag."""
        result: Dict[str, Dict[str, str]] = {}
        for name, parameter in self._parameters.items():
            result.setdefault(parameter.group, {})[name] = parameter.intern_value
        return result

    @property
    def mandatory_parameter_groups(self) -> Dict[str, Dict[str, str]]:
        result: Dict[str, Dict[str, str]] = {}
        for name, parameter in self._parameters.items():
            if parameter.mandatory:
                result.setdefault(parameter.group, {})[name] = parameter.intern_value
        return result

    @property
    def parameter_value(self) -> Dict[str, Any]:
        return {name: parameter.value for name, parameter in self._parameters.items()}

    # ------------------------------------------------------------------
    # Categories

    @property
    def categories(self) -> Dict[str, "HonCommand"]:
        """Sibling commands keyed by cleaned category name."""
        if self._categories is None:
            self._categories = {"_": self}
        return self._categories

    @property
    def category(self) -> str:
        return self._category_name

    @category.setter
    def category(self, category: str) -> None:
        """Expose the sibling *category* under this command's name in the catalog.

        The name is validated either way. A command without an appliance has
        no catalog, so nothing else happens; use :meth:`categories` to reach
        the sibling directly.
        """
        target = self._find_category(category)
        if self._appliance is not None:
            self._appliance.commands[self._name] = target

    def _find_category(self, category: str) -> "HonCommand":
        categories = self.categories
        target = categories.get(category) or categories.get(clean_category_name(category))
        if target is None and category == self._category_name:
            target = self
        if target is None:
            raise ValidationError(self._name, category, ", ".join(categories))
        return target

    @property
    def setting_keys(self) -> List[str]:
        """Parameter keys of every sibling category, first occurrence order."""
        keys: Dict[str, None] = {}
        for command in self.categories.values():
            for key in command.parameters:
                keys.setdefault(key)
        return list(keys)

    @property
    def available_settings(self) -> Dict[str, HonParameter]:
        """The most permissive parameter for every key across siblings."""
        result: Dict[str, HonParameter] = {}
        for command in self.categories.values():
            for name, parameter in command.parameters.items():
                if name in result:
                    result[name] = self._more_options(result[name], parameter)
                else:
                    result[name] = parameter
        return result

    @staticmethod
    def _more_options(first: HonParameter, second: HonParameter) -> HonParameter:
        # option count only; equal counts keep the first seen
        if first.kind is ParameterKind.FIXED and second.kind is not ParameterKind.FIXED:
            return second
        if second.kind is ParameterKind.FIXED and first.kind is not ParameterKind.FIXED:
            return first
        if len(second.values) > len(first.values):
            return second
        return first

    def clone(self) -> "HonCommand":
        """Independent copy sharing only the sibling map and the appliance."""
        new = copy.copy(self)
        new._parameters = {}
        for name, parameter in self._parameters.items():
            if parameter.kind is ParameterKind.PROGRAM:
                new._parameters[name] = cast(HonParameterProgram, parameter).rebind(new)
            else:
                new._parameters[name] = parameter.clone()
        new._data = copy.deepcopy(self._data)
        new._rules = copy.deepcopy(self._rules)
        return new

    def add_favourite_marker(self) -> None:
        self._parameters["favourite"] = HonParameterFixed(
            "favourite", {"fixedValue": "1", "mandatory": 1}, "custom"
        )

    # ------------------------------------------------------------------
    # Sending

    @property
    def label(self) -> str:
        """Localized program name, or the upper-cased category key."""
        localized = None
        if self._appliance is not None and self._category_name:
            localized = self._appliance.get_localized_program_name(
                clean_category_name(self._category_name), self._category_name
            )
        return localized or self._category_name.upper()

    async def send(self, overrides: Optional[Mapping[str, Any]] = None, only_mandatory: bool = False) -> SendResult:
        """Validate and transmit this command.

        Parameters
        ----------
        overrides
            Values to assign before sending. ``program`` (or ``category``)
            selects a sibling category; every parameter of that sibling not
            overridden is sent with its current value.
        only_mandatory
            Send only the mandatory parameters.

        Raises
        ------
        MissingCredentialsError
            No API session is attached (raised before anything is sent).
        ValidationError
            An override is unknown or outside its parameter's domain.
        TransmissionError
            The transport failed or the appliance rejected the command.
        """
        api = self.api
        overrides = dict(overrides or {})
        source: HonCommand = self
        for selector in CATEGORY_SELECTORS:
            selected = overrides.pop(selector, None)
            if selected is not None:
                source = self._find_category(str(selected))

        source._assign(overrides)
        groups = source.mandatory_parameter_groups if only_mandatory else source.parameter_groups
        return await source._send_parameters(api, dict(groups.get("parameters", {})))

    async def send_specific(self, keys: Iterable[str]) -> SendResult:
        """Send the parameters named in *keys* plus every mandatory one."""
        api = self.api
        keys = set(keys)
        params = {
            key: parameter.intern_value
            for key, parameter in self._parameters.items()
            if parameter.group == "parameters" and (key in keys or parameter.mandatory)
        }
        return await self._send_parameters(api, params)

    def _assign(self, values: Mapping[str, Any]) -> None:
        """Set several parameters, committing nothing unless all are valid."""
        for key, value in values.items():
            parameter = self._parameters.get(key)
            if parameter is None:
                raise ValidationError(key, value, ", ".join(self._parameters))
            parameter.validate(value)
        for key, value in values.items():
            self._parameters[key].value = value

    async def _send_parameters(self, api: "HonAPI", params: Dict[str, Any]) -> SendResult:
        ancillary = dict(self.parameter_groups.get("ancillaryParameters", {}))
        ancillary.pop("programRules", None)

        label = self.label
        if "prStr" in params:
            params["prStr"] = label

        params = {key: str(value) for key, value in params.items()}
        ancillary = {key: str(value) for key, value in ancillary.items()}

        if self._appliance is not None:
            self._appliance.echo_parameters(params)

        try:
            result = await api.send_command(self._appliance, self._name, params, ancillary, label)
        except MissingCredentialsError:
            raise
        except NetworkException as exc:
            self.logger.error("Sending %s failed: %s", self._name, exc)
            raise TransmissionError(self._name, str(exc)) from exc

        if not result:
            self.logger.error("Command %s was rejected: %r", self._name, result)
            raise TransmissionError(self._name, "rejected by the hOn cloud")

        return SendResult(
            command_name=self._name,
            category=clean_category_name(self._category_name),
            label=label,
            parameters=params,
            ancillary_parameters=ancillary,
        )
