"""
Result model returned by :meth:`asynchon.commands.HonCommand.send`.
"""

from typing import Dict

from pydantic import BaseModel, Field


class SendResult(BaseModel):
    """Outcome of a successfully transmitted command."""

    success: bool = True
    command_name: str
    category: str = Field(default="", description="Cleaned name of the category that was sent")
    label: str = Field(default="", description="Localized program name or upper-cased category key")
    parameters: Dict[str, str] = Field(default_factory=dict)
    ancillary_parameters: Dict[str, str] = Field(default_factory=dict)
