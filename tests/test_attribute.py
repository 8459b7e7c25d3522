import datetime
from unittest.mock import patch

import pytest

from asynchon.attribute import HonAttribute
from asynchon.config import Settings


def test_value_is_numeric_when_possible():
    assert HonAttribute({"parNewVal": "40"}).value == 40
    assert HonAttribute({"parNewVal": "2.5"}).value == 2.5
    assert HonAttribute("eco").value == "eco"
    assert str(HonAttribute({"parNewVal": "40"})) == "40"


def test_last_update_is_parsed():
    attribute = HonAttribute({"parNewVal": "1", "lastUpdate": "2024-03-01T08:30:00Z"})
    assert attribute.last_update == datetime.datetime(2024, 3, 1, 8, 30, tzinfo=datetime.timezone.utc)


def test_shield_blocks_device_pushes():
    attribute = HonAttribute({"parNewVal": "20"}, lock_timeout=10)
    assert attribute.update("40", shield=True)
    assert attribute.lock

    assert attribute.update({"parNewVal": "20"}) is False
    assert attribute.value == 40

    assert attribute.update("60", shield=True)
    assert attribute.value == 60


def test_shield_expires():
    attribute = HonAttribute("20", lock_timeout=10)
    attribute.update("40", shield=True)

    later = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(seconds=11)
    with patch("asynchon.attribute._utcnow", return_value=later):
        assert not attribute.lock
        assert attribute.update({"parNewVal": "20"})
    assert attribute.value == 20


def test_settings_from_env():
    settings = Settings.from_env({"ASYNCHON_REQUEST_TIMEOUT": "5", "ASYNCHON_OS": "ios", "OTHER": "x"})
    assert settings.request_timeout == 5.0
    assert settings.os == "ios"
    assert settings.attribute_lock_timeout == 10.0


def test_settings_reject_invalid_values():
    with pytest.raises(ValueError):
        Settings.from_env({"ASYNCHON_REQUEST_TIMEOUT": "0"})
