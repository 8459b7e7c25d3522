"""Appliance proxy owning the command catalog and the live attribute store.

Besides identity helpers, :class:`HonAppliance` exposes the operations that
keep three things consistent: the parameters of its commands, the
parameters shared between sibling commands, and the attribute values the
device reports.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union, cast

from asynchon.attribute import HonAttribute
from asynchon.commands import CommandLoader, HonCommand
from asynchon.config import settings
from asynchon.exceptions import MissingCredentialsError, ValidationError
from asynchon.parameters import HonParameter, HonParameterEnum, HonParameterRange, ParameterKind, clean_value
from asynchon.utils.helper import str_to_float

__all__ = ["HonAppliance"]


class HonAppliance:
    """Proxy bound to a single appliance of an hOn account."""

    def __init__(
        self,
        api: Optional[Any],
        info: Mapping[str, Any],
        zone: int = 0,
        *,
        translations: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the proxy.

        Parameters
        ----------
        api : HonAPI, optional
            Transport used to load and send commands. Without it every
            network operation raises :class:`MissingCredentialsError`.
        info : Mapping[str, Any]
            Appliance description as returned by ``load_appliances``.
        zone : int, optional
            Zone index for multi-zone appliances (0 means unzoned).
        translations : Mapping[str, str], optional
            Translation key → localized text, used for program labels.
        logger : logging.Logger, optional
            Log sink for this appliance, its commands and its loader.
        """
        info = dict(info)
        attributes = info.get("attributes")
        if isinstance(attributes, list):
            info["attributes"] = {
                item["parName"]: item.get("parValue")
                for item in attributes
                if isinstance(item, Mapping) and "parName" in item
            }
        self._info: Dict[str, Any] = info
        self._api = api
        self._zone = zone
        self._translations: Dict[str, str] = dict(translations or {})
        self._logger = logger or logging.getLogger(__name__)

        self._commands: Dict[str, HonCommand] = {}
        self._appliance_model: Dict[str, Any] = {}
        self._additional_data: Dict[str, Any] = {}
        self._attributes: Dict[str, Any] = {"parameters": {}}
        self._statistics: Dict[str, Any] = {}
        self._last_update: Optional[float] = None

    def __repr__(self) -> str:
        return f"{self.brand} {self.model_name}".strip() or "HonAppliance"

    # ------------------------------------------------------------------
    # Identity

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def api(self) -> Any:
        if self._api is None:
            raise MissingCredentialsError()
        return self._api

    @property
    def info(self) -> Dict[str, Any]:
        return self._info

    @property
    def zone(self) -> int:
        return self._zone

    def _check_name_zone(self, name: str, frontend: bool = True) -> str:
        zone = " Z" if frontend else "_z"
        attribute = str(self._info.get(name, "") or "")
        if attribute and self._zone:
            return f"{attribute}{zone}{self._zone}"
        return attribute

    @property
    def appliance_model_id(self) -> str:
        return str(self._info.get("applianceModelId", ""))

    @property
    def appliance_type(self) -> str:
        return str(self._info.get("applianceTypeName", "") or self._info.get("applianceType", ""))

    @property
    def mac_address(self) -> str:
        return str(self._info.get("macAddress", "") or self._info.get("serialNumber", ""))

    @property
    def unique_id(self) -> str:
        default_mac = "xx-xx-xx-xx-xx-xx"
        import_name = f"{self.appliance_type.lower()}_{self.appliance_model_id}"
        return self._check_name_zone("macAddress", frontend=False).replace(default_mac, import_name)

    @property
    def model_name(self) -> str:
        return self._check_name_zone("modelName")

    @property
    def brand(self) -> str:
        brand = self._check_name_zone("brand")
        return brand[:1].upper() + brand[1:]

    @property
    def nick_name(self) -> str:
        result = self._check_name_zone("nickName")
        if not result or not result.strip("xX1- "):
            return self.model_name
        return result

    @property
    def code(self) -> str:
        code = str(self._info.get("code", "") or "")
        if code:
            return code
        serial_number = str(self._info.get("serialNumber", "") or "")
        return serial_number[:8] if len(serial_number) < 18 else serial_number[:11]

    @property
    def model_id(self) -> int:
        try:
            return int(self._info.get("applianceModelId", 0) or 0)
        except (TypeError, ValueError):
            return 0

    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._appliance_model.get("options", {}) or {})

    # ------------------------------------------------------------------
    # Catalog and state

    @property
    def commands(self) -> Dict[str, HonCommand]:
        """The catalog: command name → currently active category."""
        return self._commands

    @property
    def attributes(self) -> Dict[str, Any]:
        return self._attributes

    @property
    def statistics(self) -> Dict[str, Any]:
        return self._statistics

    @property
    def additional_data(self) -> Dict[str, Any]:
        return self._additional_data

    @property
    def appliance_model(self) -> Dict[str, Any]:
        return self._appliance_model

    @property
    def command_parameters(self) -> Dict[str, Dict[str, Any]]:
        return {name: command.parameter_value for name, command in self._commands.items()}

    @property
    def settings(self) -> Dict[str, HonParameter]:
        """``"<command>.<key>"`` → parameter of the active category."""
        result: Dict[str, HonParameter] = {}
        for name, command in self._commands.items():
            available = command.available_settings
            for key in command.setting_keys:
                setting = command.settings.get(key) or available[key]
                result[f"{name}.{key}"] = setting
        return result

    @property
    def available_settings(self) -> List[str]:
        return [f"{name}.{key}" for name, command in self._commands.items() for key in command.setting_keys]

    @property
    def data(self) -> Dict[str, Any]:
        return {
            "attributes": self._attributes,
            "appliance": self._info,
            "statistics": self._statistics,
            "additionalData": self._additional_data,
            **self.command_parameters,
            **self._attributes,
        }

    def get(self, item: str, default: Any = None) -> Any:
        """Look *item* up in the attribute store, the catalog values and the info.

        Dotted keys walk nested mappings/lists of :attr:`data`; zoned
        appliances look up ``<item>Z<zone>``.
        """
        key = f"{item}Z{self._zone}" if self._zone else item
        if "." in key:
            result: Any = self.data
            for part in key.split("."):
                if isinstance(result, list) and part.isdigit() and int(part) < len(result):
                    result = result[int(part)]
                elif isinstance(result, Mapping) and part in result:
                    result = result[part]
                else:
                    result = None
                    break
            if result is not None:
                return result
        parameters = self._attributes.get("parameters", {})
        if key in parameters:
            return parameters[key].value
        data = self.data
        if key in data:
            return data[key]
        return self._info.get(key, default)

    def get_localized_program_name(self, code: Optional[str], label: Optional[str] = None) -> Optional[str]:
        """Localized text for a program, ``None`` when nothing is known.

        *label* is the vendor translation key (e.g. ``PROGRAMS.WM_WD.COTTONS``),
        *code* the cleaned category name (e.g. ``cottons``).
        """
        for key in (label, code):
            if key and key in self._translations:
                translated = self._translations[key]
                if translated and translated != key:
                    return translated
        return None

    # ------------------------------------------------------------------
    # Loading

    async def load_commands(self) -> None:
        """Rebuild the catalog from the hOn cloud."""
        loader = CommandLoader(self.api, self, logger=self._logger)
        await loader.load_commands()
        self._commands = loader.commands
        self._additional_data = loader.additional_data
        self._appliance_model = loader.appliance_data
        self.sync_params_to_command("settings")

    async def load_attributes(self) -> None:
        """Fetch the reported state and merge it into the attribute store."""
        attributes = dict(await self.api.load_attributes(self) or {})
        shadow = attributes.pop("shadow", {}) or {}
        self.apply_attributes(shadow.get("parameters", {}) or {})
        attributes.pop("parameters", None)
        self._attributes.update(attributes)

    async def load_statistics(self) -> None:
        self._statistics = dict(await self.api.load_statistics(self) or {})

    def apply_attributes(self, parameters: Mapping[str, Any]) -> List[str]:
        """Merge reported parameter values; return the keys that changed.

        Values shielded by a recent local write are left untouched.
        """
        store: Dict[str, HonAttribute] = self._attributes.setdefault("parameters", {})
        changed = []
        for name, values in parameters.items():
            if name in store:
                if store[name].update(values):
                    changed.append(name)
            else:
                store[name] = HonAttribute(values)
                changed.append(name)
        return changed

    async def update(self, force: bool = False) -> bool:
        """Reload attributes unless they are younger than the minimal interval."""
        now = time.monotonic()
        if not force and self._last_update is not None:
            if now - self._last_update < settings.minimal_update_interval:
                return False
        self._last_update = now
        await self.load_attributes()
        self.sync_params_to_command("settings")
        return True

    # ------------------------------------------------------------------
    # Synchronization

    def echo_parameters(self, values: Mapping[str, Any]) -> None:
        """Write *values* into the attribute store ahead of device confirmation.

        Only keys the store already knows are written; each write shields
        the attribute against concurrently arriving device pushes.
        """
        store: Dict[str, HonAttribute] = self._attributes.get("parameters", {})
        for key, value in values.items():
            if key in store:
                store[key].update(str(value), shield=True)

    def sync_command_to_params(self, command_name: str) -> None:
        """Push the named command's values into the attribute store."""
        command = self._commands.get(command_name)
        if command is None:
            return
        store: Dict[str, HonAttribute] = self._attributes.get("parameters", {})
        self.echo_parameters(
            {key: command.parameters[key].intern_value for key in store if key in command.parameters}
        )

    def sync_params_to_command(self, command_name: str) -> None:
        """Assign reported attribute values to the named command's parameters.

        Values the parameter rejects are logged and skipped.
        """
        command = self._commands.get(command_name)
        if command is None:
            return
        store: Dict[str, HonAttribute] = self._attributes.get("parameters", {})
        for key in command.setting_keys:
            attribute = store.get(key)
            setting = command.settings.get(key)
            if attribute is None or setting is None or str(attribute) == "":
                continue
            try:
                if setting.kind is ParameterKind.RANGE:
                    setting.value = str_to_float(str(attribute))
                else:
                    setting.value = str(attribute)
            except ValueError as exc:
                self._logger.warning("Can't set %s.%s - %s", command_name, key, exc)

    def sync_command(
        self,
        main: str,
        target: Optional[Union[str, Sequence[str]]] = None,
        to_sync: Optional[Union[bool, Iterable[str]]] = None,
    ) -> None:
        """Copy parameters of command *main* to every other command sharing their keys.

        Parameters
        ----------
        main : str
            Source command name.
        target : str or sequence of str, optional
            Restrict the commands written to.
        to_sync : bool or iterable of str, optional
            ``True`` copies only the source's mandatory parameters, an
            iterable copies only the listed keys.
        """
        base = self._commands.get(main)
        if base is None:
            return
        if isinstance(target, str):
            target = [target]
        allowed = None if to_sync is None or isinstance(to_sync, bool) else set(to_sync)

        for command_name, command in self._commands.items():
            if command_name == main or (target and command_name not in target):
                continue
            for name, target_param in command.parameters.items():
                base_param = base.parameters.get(name)
                if base_param is None:
                    continue
                if to_sync is True and not base_param.mandatory:
                    continue
                if allowed is not None and name not in allowed:
                    continue
                try:
                    self.sync_parameter(base_param, target_param)
                except ValueError as exc:
                    self._logger.warning("Can't sync %s.%s from %s - %s", command_name, name, main, exc)

    @staticmethod
    def sync_parameter(main: HonParameter, target: HonParameter) -> None:
        """Make *target* accept and hold the value of *main*."""
        if target.kind is ParameterKind.RANGE:
            target_range = cast(HonParameterRange, target)
            if main.kind is ParameterKind.RANGE:
                main_range = cast(HonParameterRange, main)
                target_range.min = main_range.min
                target_range.max = main_range.max
                target_range.step = main_range.step
            else:
                value = str_to_float(main.value)
                target_range.min = value
                target_range.max = value
                target_range.step = 1
        elif target.kind is ParameterKind.ENUM:
            options = [str(value) for value in main.values]
            value = clean_value(main.value)
            if value not in [clean_value(option) for option in options]:
                raise ValidationError(target.key, main.value, ", ".join(options))
            cast(HonParameterEnum, target).values = options
            target.value = value
            return
        target.value = main.value
