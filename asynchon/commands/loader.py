"""Build an appliance's command catalog from the vendor payload.

The hOn cloud describes commands as an arbitrarily nested tree. A node
carrying both a ``description`` and a ``protocolType`` is a command;
any other mapping is a set of categories whose children are parsed the
same way. Favourites and the last sent command of each name are merged
into the resulting catalog before it is handed out.

Example
-------
>>> loader = CommandLoader(api, appliance)
>>> await loader.load_commands()
>>> loader.commands["startProgram"].parameters["temp"].value
40
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError as ModelValidationError

from asynchon.commands.command import COMMAND_MARKERS, HonCommand
from asynchon.exceptions import HonException, MissingCredentialsError, ValidationError
from asynchon.models.favourite import Favourite, HistoryEntry
from asynchon.parameters import ParameterKind
from asynchon.utils.helper import clean_category_name

if TYPE_CHECKING:
    from asynchon.api.client import HonAPI
    from asynchon.appliance import HonAppliance

__all__ = ["CommandLoader"]


class CommandLoader:
    """Turns commands, favourites and history into a catalog of commands."""

    def __init__(
        self,
        api: Optional["HonAPI"],
        appliance: "HonAppliance",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._api = api
        self._appliance = appliance
        self._logger = logger or getattr(appliance, "logger", None) or logging.getLogger(__name__)
        self._api_commands: Dict[str, Any] = {}
        self._favourites: List[Favourite] = []
        self._command_history: List[HistoryEntry] = []
        self._commands: Dict[str, HonCommand] = {}
        self._appliance_data: Dict[str, Any] = {}
        self._additional_data: Dict[str, Any] = {}

    @property
    def api(self) -> "HonAPI":
        if self._api is None:
            raise MissingCredentialsError()
        return self._api

    @property
    def appliance(self) -> "HonAppliance":
        return self._appliance

    @property
    def commands(self) -> Dict[str, HonCommand]:
        return self._commands

    @property
    def appliance_data(self) -> Dict[str, Any]:
        """The ``applianceModel`` section of the command payload."""
        return self._appliance_data

    @property
    def additional_data(self) -> Dict[str, Any]:
        """Top-level entries of the command payload that are not commands."""
        return self._additional_data

    # ------------------------------------------------------------------
    # Loading

    async def load_commands(self) -> None:
        """Fetch everything and build the catalog."""
        await self._load_data()
        self.build()

    def build(
        self,
        api_commands: Optional[Mapping[str, Any]] = None,
        favourites: Optional[List[Any]] = None,
        history: Optional[List[Any]] = None,
    ) -> Dict[str, HonCommand]:
        """Build the catalog from already fetched data.

        Arguments left as ``None`` fall back to what :meth:`load_commands`
        fetched.
        """
        if api_commands is not None:
            self._api_commands = dict(api_commands)
        if favourites is not None:
            self._favourites = self._parse_models(Favourite, favourites)
        if history is not None:
            self._command_history = self._parse_models(HistoryEntry, history)

        commands = dict(self._api_commands)
        self._appliance_data = commands.pop("applianceModel", {}) or {}
        self._get_commands(commands)
        self._add_favourites()
        self._recover_last_command_states()
        self._logger.info(
            "Loaded %d commands (%d favourites, %d history entries)",
            len(self._commands),
            len(self._favourites),
            len(self._command_history),
        )
        return self._commands

    async def _load_data(self) -> None:
        api = self.api
        commands, favourites, history = await asyncio.gather(
            api.load_commands(self._appliance),
            api.load_favourites(self._appliance),
            api.load_command_history(self._appliance),
        )
        self._api_commands = dict(commands or {})
        self._favourites = self._parse_models(Favourite, favourites or [])
        self._command_history = self._parse_models(HistoryEntry, history or [])

    def _parse_models(self, model, items: List[Any]) -> List[Any]:
        result = []
        for item in items:
            if isinstance(item, model):
                result.append(item)
                continue
            try:
                result.append(model.model_validate(item))
            except ModelValidationError as exc:
                self._logger.warning("Skipping malformed %s: %s", model.__name__, exc)
        return result

    # ------------------------------------------------------------------
    # Command tree

    @staticmethod
    def _is_command(data: Mapping[str, Any]) -> bool:
        return all(marker in data for marker in COMMAND_MARKERS)

    def _get_commands(self, api_commands: Mapping[str, Any]) -> None:
        self._commands = {}
        self._additional_data = {}
        for name, data in api_commands.items():
            command = self._parse_command(data, name)
            if command is not None:
                self._commands[command.name] = command

    def _parse_command(
        self,
        data: Any,
        command_name: str,
        categories: Optional[Dict[str, HonCommand]] = None,
        category_name: str = "",
    ) -> Optional[HonCommand]:
        if not isinstance(data, Mapping):
            self._additional_data[command_name] = data
            return None
        if self._is_command(data):
            try:
                return HonCommand(command_name, data, self._appliance, categories, category_name)
            except (HonException, TypeError, ValueError, KeyError, AttributeError) as exc:
                self._logger.warning(
                    "Skipping command %s (%s): %s", command_name, category_name or "-", exc
                )
                return None
        return self._parse_categories(data, command_name)

    def _parse_categories(self, data: Mapping[str, Any], command_name: str) -> Optional[HonCommand]:
        categories: Dict[str, HonCommand] = {}
        for category, value in data.items():
            command = self._parse_command(value, command_name, categories, category)
            if command is not None:
                categories[clean_category_name(category)] = command
        if not categories:
            return None
        # setParameters has to be the default category
        if "setParameters" in categories:
            return categories["setParameters"]
        return next(iter(categories.values()))

    # ------------------------------------------------------------------
    # History

    def _get_last_command(self, name: str) -> Optional[HistoryEntry]:
        for entry in self._command_history:
            if entry.command_name == name:
                return entry
        return None

    def _set_last_category(self, command: HonCommand, name: str, parameters: Dict[str, Any]) -> HonCommand:
        program = parameters.pop("program", None)
        category = parameters.pop("category", None)
        selected = program or category
        if not selected:
            return command
        target = command.categories.get(clean_category_name(str(selected)))
        if target is None:
            self._logger.debug("Can't restore category %s of %s", selected, name)
            return command
        self._commands[name] = target
        return target

    def _recover_last_command_states(self) -> None:
        for name, command in list(self._commands.items()):
            last_command = self._get_last_command(name)
            if last_command is None:
                continue
            parameters = dict(last_command.command.parameters)
            command = self._set_last_category(command, name, parameters)
            for key, parameter in command.settings.items():
                if key not in parameters:
                    continue
                try:
                    parameter.value = parameters[key]
                except ValidationError as exc:
                    self._logger.debug("Can't restore %s.%s: %s", name, key, exc)

    # ------------------------------------------------------------------
    # Favourites

    def _add_favourites(self) -> None:
        for favourite in self._favourites:
            name, command_name, base = self._get_favourite_info(favourite)
            if base is None:
                self._logger.debug("No base program for favourite %r", name)
                continue
            base_command = base.clone()
            self._update_base_command_with_data(base_command, favourite)
            base_command.add_favourite_marker()
            self._update_program_categories(command_name, name, base_command)

    def _get_favourite_info(self, favourite: Favourite) -> Tuple[str, str, Optional[HonCommand]]:
        name = favourite.name
        command_name = favourite.command.command_name
        program_name = clean_category_name(favourite.command.program_name)
        command = self._commands.get(command_name)
        if command is None or not name:
            return name, command_name, None
        return name, command_name, command.categories.get(program_name)

    def _update_base_command_with_data(self, base_command: HonCommand, favourite: Favourite) -> None:
        for values in favourite.command.parameter_groups().values():
            for key, value in values.items():
                parameter = base_command.parameters.get(key)
                if parameter is None or parameter.kind is ParameterKind.PROGRAM:
                    continue
                try:
                    parameter.value = value
                except ValidationError as exc:
                    self._logger.debug("Favourite %r: skipping %s: %s", favourite.name, key, exc)

    def _update_program_categories(self, command_name: str, name: str, base_command: HonCommand) -> None:
        categories = self._commands[command_name].categories
        categories[name] = base_command
        program = base_command.parameters.get("program")
        if program is not None and program.kind is ParameterKind.PROGRAM:
            program.value = name
