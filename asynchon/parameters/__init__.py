"""Typed command parameters."""

from typing import Any, Mapping, Optional, Type

from asynchon.parameters.base import HonParameter, ParameterKind, Trigger
from asynchon.parameters.enum import HonParameterEnum, clean_value
from asynchon.parameters.fixed import HonParameterFixed
from asynchon.parameters.program import HonParameterProgram
from asynchon.parameters.range import HonParameterRange

__all__ = [
    "HonParameter",
    "HonParameterEnum",
    "HonParameterFixed",
    "HonParameterProgram",
    "HonParameterRange",
    "ParameterKind",
    "Trigger",
    "clean_value",
    "create_parameter",
]

# typologies the vendor schema declares for plain parameters
PARAMETER_TYPES: Mapping[str, Type[HonParameter]] = {
    "range": HonParameterRange,
    "enum": HonParameterEnum,
    "fixed": HonParameterFixed,
}


def create_parameter(key: str, attributes: Mapping[str, Any], group: str) -> Optional[HonParameter]:
    """Build the parameter declared by ``attributes["typology"]``.

    Returns ``None`` for typologies that are not parameters.
    """
    parameter_type = PARAMETER_TYPES.get(str(attributes.get("typology", "")))
    if parameter_type is None:
        return None
    return parameter_type(key, attributes, group)
