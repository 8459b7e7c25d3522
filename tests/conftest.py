import copy
from unittest.mock import AsyncMock, MagicMock

import pytest

from asynchon.appliance import HonAppliance
from asynchon.commands import CommandLoader


WASHER_INFO = {
    "applianceTypeName": "WM",
    "applianceModelId": "1234",
    "macAddress": "aa-bb-cc-dd-ee-ff",
    "modelName": "HW80",
    "brand": "haier",
    "nickName": "Washer",
    "code": "31010001",
}


def _program(pr_code, temp_max="60", spin=("400", "800", "1200"), spin_default="800"):
    return {
        "description": "start program",
        "protocolType": "mqtt",
        "parameters": {
            "temp": {
                "typology": "range",
                "minimumValue": "20",
                "maximumValue": temp_max,
                "incrementValue": "20",
                "defaultValue": "40",
                "mandatory": 1,
            },
            "spinSpeed": {
                "typology": "enum",
                "enumValues": list(spin),
                "defaultValue": spin_default,
                "mandatory": 1,
            },
            "prCode": {"typology": "fixed", "fixedValue": pr_code, "mandatory": 1},
            "prStr": {"typology": "fixed", "fixedValue": "PROGRAM", "mandatory": 1},
            "delayTime": {
                "typology": "range",
                "minimumValue": "0",
                "maximumValue": "120",
                "incrementValue": "30",
                "defaultValue": "0",
                "mandatory": 0,
            },
        },
        "ancillaryParameters": {
            "programRules": {"typology": "fixed", "fixedValue": "{}"},
            "remoteActionable": {"typology": "fixed", "fixedValue": "1"},
            "energyLabel": {"typology": "enum", "enumValues": ["A", "B"], "defaultValue": "A"},
        },
    }


WASHER_COMMANDS = {
    "applianceModel": {"options": {"remoteControl": "1"}},
    "resultSummary": "ok",
    "startProgram": {
        "PROGRAMS.WM_WD.COTTONS": _program("1"),
        "PROGRAMS.WM_WD.SYNTHETIC": _program("2", temp_max="40", spin=("400", "800"), spin_default="400"),
        "PROGRAMS.WM_WD.IOT_RAPID": _program("99"),
    },
    "settings": {
        "description": "settings",
        "protocolType": "mqtt",
        "parameters": {
            "tempUnit": {"typology": "enum", "enumValues": ["0", "1"], "defaultValue": "0", "mandatory": 1},
            "childLock": {"typology": "enum", "enumValues": ["0", "1"], "defaultValue": "0", "mandatory": 0},
        },
    },
    "stopProgram": {
        "description": "stop program",
        "protocolType": "mqtt",
        "parameters": {
            "onOffStatus": {"typology": "fixed", "fixedValue": "0", "mandatory": 1},
            "temp": {"typology": "fixed", "fixedValue": "30", "mandatory": 0},
        },
        "label": "stop",
    },
}

FAVOURITE = {
    "favouriteName": "Quick Cottons",
    "command": {
        "commandName": "startProgram",
        "programName": "PROGRAMS.WM_WD.COTTONS",
        "parameters": {"temp": "60", "spinSpeed": "1200", "program": "PROGRAMS.WM_WD.COTTONS"},
        "ancillaryParameters": {"remoteActionable": "0"},
    },
}


@pytest.fixture
def washer_commands():
    return copy.deepcopy(WASHER_COMMANDS)


@pytest.fixture
def api():
    api = MagicMock()
    api.load_commands = AsyncMock(return_value=copy.deepcopy(WASHER_COMMANDS))
    api.load_favourites = AsyncMock(return_value=[])
    api.load_command_history = AsyncMock(return_value=[])
    api.load_attributes = AsyncMock(return_value={})
    api.load_statistics = AsyncMock(return_value={})
    api.send_command = AsyncMock(return_value=True)
    return api


@pytest.fixture
def appliance(api):
    return HonAppliance(api, WASHER_INFO)


@pytest.fixture
def build_catalog(appliance):
    """Build a catalog into *appliance* without touching the network."""

    def _build(commands=None, favourites=None, history=None):
        loader = CommandLoader(appliance.api, appliance)
        loader.build(
            copy.deepcopy(WASHER_COMMANDS) if commands is None else commands,
            favourites or [],
            history or [],
        )
        appliance.commands.clear()
        appliance.commands.update(loader.commands)
        return loader

    return _build
