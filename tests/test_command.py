import copy

import pytest

from asynchon.appliance import HonAppliance
from asynchon.commands import HonCommand
from asynchon.exceptions import MissingCredentialsError, TransmissionError, ValidationError
from asynchon.exceptions.network import NetworkConnectionError
from asynchon.models import SendResult
from asynchon.parameters import ParameterKind

from conftest import WASHER_COMMANDS, WASHER_INFO


def _node(parameters, group="parameters"):
    return {"description": "d", "protocolType": "p", group: parameters}


@pytest.fixture
def catalog(build_catalog, appliance):
    build_catalog()
    return appliance.commands


def test_setting_own_category_is_idempotent(catalog, appliance):
    command = catalog["startProgram"]
    keys = command.setting_keys

    command.category = command.category
    assert appliance.commands["startProgram"] is command
    assert appliance.commands["startProgram"].setting_keys == keys

    command.category = "cottons"
    assert appliance.commands["startProgram"] is command


def test_switching_category_replaces_catalog_entry(catalog, appliance):
    cottons = catalog["startProgram"]
    cottons.category = "synthetic"

    synthetic = appliance.commands["startProgram"]
    assert synthetic is not cottons
    assert synthetic is cottons.categories["synthetic"]
    assert synthetic.parameters["spinSpeed"].values == ["400", "800"]
    assert cottons.parameters["spinSpeed"].values == ["400", "800", "1200"]


def test_unknown_category_is_rejected(catalog, appliance):
    command = catalog["startProgram"]
    with pytest.raises(ValidationError):
        command.category = "eco_40_60"
    assert appliance.commands["startProgram"] is command


def test_setting_keys_spans_all_categories(build_catalog, appliance):
    build_catalog(
        {
            "startProgram": {
                "PROGRAMS.WM.A": _node({"temp": {"typology": "range", "maximumValue": "90"}}),
                "PROGRAMS.WM.B": _node({"dryLevel": {"typology": "enum", "enumValues": ["1", "2"]}}),
            }
        }
    )
    command = appliance.commands["startProgram"]
    assert set(command.parameters) == {"temp", "program"}
    assert command.setting_keys == ["temp", "program", "dryLevel"]


def test_available_settings_prefers_more_options(catalog):
    command = catalog["startProgram"]
    synthetic = command.categories["synthetic"]
    cottons = command.categories["cottons"]

    available = synthetic.available_settings
    assert available["spinSpeed"] is cottons.parameters["spinSpeed"]
    assert available["temp"] is cottons.parameters["temp"]
    # same option count: the first sibling seen wins
    assert available["energyLabel"] is cottons.parameters["energyLabel"]


def test_available_settings_fixed_loses(build_catalog, appliance):
    build_catalog(
        {
            "startProgram": {
                "PROGRAMS.WM.A": _node({"mode": {"typology": "fixed", "fixedValue": "1"}}),
                "PROGRAMS.WM.B": _node({"mode": {"typology": "enum", "enumValues": ["1"]}}),
            }
        }
    )
    command = appliance.commands["startProgram"]
    assert command.available_settings["mode"].kind is ParameterKind.ENUM


def test_non_parameter_entries_are_kept_as_data(catalog):
    command = catalog["stopProgram"]
    assert command.data["label"] == "stop"
    assert command.description == "stop program"
    assert command.protocol_type == "mqtt"
    assert "label" not in command.parameters


def test_rule_entries_are_stored_not_parsed():
    command = HonCommand(
        "startProgram",
        _node({"tempRule": {"typology": "fixed", "category": "rule", "fixedValue": "x"}}),
        None,
    )
    assert "tempRule" not in command.parameters
    assert command.rules["tempRule"]["fixedValue"] == "x"


def test_zone_map_defaults_to_appliance_zone(api):
    appliance = HonAppliance(api, WASHER_INFO, zone=2)
    command = HonCommand("settings", _node({"zoneMap": {"typology": "fixed", "fixedValue": "1"}}), appliance)
    assert command.parameters["zoneMap"].value == "2"


def test_clone_is_independent(catalog):
    cottons = catalog["startProgram"]
    clone = cottons.clone()
    clone.parameters["temp"].value = 60
    clone.parameters["spinSpeed"].value = "1200"

    assert cottons.parameters["temp"].value == 40
    assert cottons.parameters["spinSpeed"].value == "800"
    assert clone.parameters["program"].command is clone
    assert cottons.parameters["program"].command is cottons
    assert clone.categories is cottons.categories


@pytest.mark.asyncio
async def test_send_transmits_string_values(catalog, api, appliance):
    result = await catalog["startProgram"].send()

    assert isinstance(result, SendResult)
    assert result.success
    assert result.category == "cottons"
    api.send_command.assert_awaited_once()
    args = api.send_command.await_args.args
    assert args[0] is appliance
    assert args[1] == "startProgram"
    assert args[2] == {
        "temp": "40",
        "spinSpeed": "800",
        "prCode": "1",
        "prStr": "PROGRAMS.WM_WD.COTTONS",
        "delayTime": "0",
    }
    assert args[3] == {"remoteActionable": "1", "energyLabel": "A"}
    assert args[4] == "PROGRAMS.WM_WD.COTTONS"


@pytest.mark.asyncio
async def test_send_uses_localized_label(api, washer_commands):
    appliance = HonAppliance(api, WASHER_INFO, translations={"PROGRAMS.WM_WD.COTTONS": "Cottons 60"})
    api.load_commands.return_value = washer_commands
    await appliance.load_commands()

    result = await appliance.commands["startProgram"].send()
    assert result.label == "Cottons 60"
    assert api.send_command.await_args.args[2]["prStr"] == "Cottons 60"


@pytest.mark.asyncio
async def test_send_program_override_fills_from_sibling(catalog, api):
    result = await catalog["startProgram"].send({"program": "synthetic", "temp": 20})

    params = api.send_command.await_args.args[2]
    assert params["temp"] == "20"
    assert params["spinSpeed"] == "400"
    assert params["prCode"] == "2"
    assert result.category == "synthetic"


@pytest.mark.asyncio
async def test_send_invalid_override_commits_nothing(catalog, api):
    command = catalog["startProgram"]
    with pytest.raises(ValidationError):
        await command.send({"temp": 60, "spinSpeed": "999"})

    assert command.parameters["temp"].value == 40
    api.send_command.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_unknown_override_is_rejected(catalog, api):
    with pytest.raises(ValidationError):
        await catalog["startProgram"].send({"turbo": "1"})
    api.send_command.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_only_mandatory(catalog, api):
    await catalog["startProgram"].send(only_mandatory=True)
    assert "delayTime" not in api.send_command.await_args.args[2]


@pytest.mark.asyncio
async def test_send_specific_adds_mandatory(catalog, api):
    command = catalog["startProgram"]
    command.parameters["delayTime"].value = 30

    await command.send_specific([])
    assert "delayTime" not in api.send_command.await_args.args[2]

    await command.send_specific(["delayTime"])
    params = api.send_command.await_args.args[2]
    assert params["delayTime"] == "30"
    assert params["temp"] == "40"


@pytest.mark.asyncio
async def test_send_rejected_raises_transmission_error(catalog, api):
    api.send_command.return_value = False
    with pytest.raises(TransmissionError) as excinfo:
        await catalog["stopProgram"].send()
    assert excinfo.value.command_name == "stopProgram"


@pytest.mark.asyncio
async def test_send_network_failure_raises_transmission_error(catalog, api):
    api.send_command.side_effect = NetworkConnectionError("unreachable")
    with pytest.raises(TransmissionError):
        await catalog["stopProgram"].send()


@pytest.mark.asyncio
async def test_send_without_session_raises_before_network():
    appliance = HonAppliance(None, WASHER_INFO)
    command = HonCommand("stopProgram", copy.deepcopy(WASHER_COMMANDS["stopProgram"]), appliance)
    with pytest.raises(MissingCredentialsError):
        await command.send()

    detached = HonCommand("stopProgram", copy.deepcopy(WASHER_COMMANDS["stopProgram"]), None)
    with pytest.raises(MissingCredentialsError):
        await detached.send_specific(["onOffStatus"])


@pytest.mark.asyncio
async def test_send_echoes_known_attributes(catalog, appliance):
    appliance.apply_attributes({"temp": {"parNewVal": "20"}})

    await catalog["startProgram"].send()

    store = appliance.attributes["parameters"]
    assert store["temp"].value == 40
    assert store["temp"].lock
    assert "spinSpeed" not in store


@pytest.mark.asyncio
async def test_send_override_runs_trigger_once(catalog, api):
    command = catalog["startProgram"]
    calls = []
    command.parameters["temp"].add_trigger(60, calls.append, "hit")

    await command.send({"temp": 60})

    assert calls == ["hit"]
    assert api.send_command.await_args.args[2]["temp"] == "60"


@pytest.mark.asyncio
async def test_send_invalid_override_runs_no_trigger(catalog, api):
    command = catalog["startProgram"]
    calls = []
    command.parameters["temp"].add_trigger(60, calls.append, "hit")

    with pytest.raises(ValidationError):
        await command.send({"temp": 60, "spinSpeed": "999"})
    assert calls == []


def test_category_without_appliance_only_validates():
    command = HonCommand("settings", _node({"a": {"typology": "fixed", "fixedValue": "1"}}), None, {}, "setParameters")
    command.categories["setParameters"] = command

    command.category = "setParameters"
    with pytest.raises(ValidationError):
        command.category = "other"
