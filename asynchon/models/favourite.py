"""
Models for favourites and command history returned by the hOn cloud.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CommandSnapshot(BaseModel):
    """A command as it was stored by the vendor (favourite or history)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    command_name: str = Field(default="", alias="commandName")
    program_name: str = Field(default="", alias="programName")
    parameters: Dict[str, Any] = Field(default_factory=dict)
    ancillary_parameters: Dict[str, Any] = Field(default_factory=dict, alias="ancillaryParameters")

    def parameter_groups(self) -> Dict[str, Dict[str, Any]]:
        """Return the stored parameter bags keyed like the vendor payload."""
        return {
            "parameters": self.parameters,
            "ancillaryParameters": self.ancillary_parameters,
        }


class Favourite(BaseModel):
    """A saved preset overriding parameters of a base program."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(default="", alias="favouriteName")
    command: CommandSnapshot = Field(default_factory=CommandSnapshot)


class HistoryEntry(BaseModel):
    """A command previously sent to the appliance."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    command: CommandSnapshot = Field(default_factory=CommandSnapshot)
    timestamp: Optional[str] = None

    @property
    def command_name(self) -> str:
        return self.command.command_name
