"""
Asynchon - Async Python client core for hOn connected appliances.

This package turns the command catalog published by the hOn cloud into typed,
validated commands and keeps them consistent with the appliance's reported state.
"""

__version__ = "0.1.0"

from asynchon.api.client import HonAPI
from asynchon.appliance import HonAppliance
from asynchon.attribute import HonAttribute
from asynchon.commands import CommandLoader, HonCommand
from asynchon.config import Settings, settings
from asynchon.exceptions import (
    HonException,
    MissingCredentialsError,
    ParseError,
    TransmissionError,
    ValidationError,
)
from asynchon.exceptions.network import NetworkException, NetworkConnectionError, NetworkTimeoutError, ResponseError
from asynchon.models import CommandSnapshot, Favourite, HistoryEntry, SendResult
from asynchon.parameters import (
    HonParameter,
    HonParameterEnum,
    HonParameterFixed,
    HonParameterProgram,
    HonParameterRange,
    ParameterKind,
)
