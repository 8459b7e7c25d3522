"""
Async client for the hOn cloud command API.

The client expects tokens that were already issued by the hOn identity
provider; obtaining and refreshing them is not its job.
"""

import json
import datetime
from typing import Dict, Any, Optional, List, TYPE_CHECKING

import aiohttp
import asyncio
import logging
from pydantic import ValidationError as ModelValidationError

from asynchon.config import settings
from asynchon.exceptions import MissingCredentialsError, ParseError
from asynchon.exceptions.network import (
    NetworkException,
    ResponseError,
    NetworkConnectionError,
    NetworkTimeoutError,
)
from asynchon.models.favourite import Favourite, HistoryEntry
from asynchon.utils.http_consts import ACCEPT_HEADER, USER_AGENT, CONTENT_TYPE_JSON

if TYPE_CHECKING:
    from asynchon.appliance import HonAppliance

logger = logging.getLogger(__name__)


class HonAPI:
    """Async client for the hOn cloud API."""

    def __init__(
        self,
        cognito_token: str,
        id_token: str,
        mobile_id: str,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the hOn API client.

        Args:
            cognito_token: Cognito token of the logged in account
            id_token: Identity token of the logged in account
            mobile_id: Identifier of this client, reported as the mobile device
            timeout: Timeout for API requests in seconds (default from settings)
            session: Optional externally managed aiohttp session
        """
        if not cognito_token or not id_token:
            raise MissingCredentialsError("hOn tokens are required")
        self.cognito_token = cognito_token
        self.id_token = id_token
        self.mobile_id = mobile_id
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.api_url = settings.api_url.rstrip("/")

        self._session: aiohttp.ClientSession | None = session
        self._owns_session = session is None

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        return {
            "Accept": ACCEPT_HEADER,
            "User-Agent": USER_AGENT,
            "Content-Type": CONTENT_TYPE_JSON,
            "cognito-token": self.cognito_token,
            "id-token": self.id_token,
        }

    @property
    def device(self) -> Dict[str, Any]:
        """Mobile device description the hOn cloud expects in command bodies."""
        return {
            "appVersion": settings.app_version,
            "mobileId": self.mobile_id,
            "mobileOs": settings.os,
            "osVersion": settings.os_version,
            "deviceModel": settings.device_model,
        }

    async def _get_session(self) -> aiohttp.ClientSession:
        """Return an open *aiohttp* session, creating it on first use."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the underlying *aiohttp* session if this client created it (idempotent)."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    # Async-context manager convenience
    async def __aenter__(self):
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # ------------------------------------------------------------------
    # Unified request implementation

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Low-level request helper returning the decoded JSON document.

        Raises
        ------
        NetworkConnectionError
            If the API cannot be reached
        NetworkTimeoutError
            If the request times out
        ResponseError
            If the API answers with a non-2xx status
        ParseError
            If the body is not a JSON object
        """
        url = f"{self.api_url}{path}"
        session = await self._get_session()

        try:
            async with session.request(
                method.upper(),
                url,
                params=params,
                data=json.dumps(body, separators=(",", ":")) if body is not None else None,
                headers=self._get_headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                if resp.status not in (200, 201, 204):
                    raise ResponseError(resp.status, f"API error for {path}")
                if resp.status == 204:
                    return {}
                raw = await resp.read()

        except asyncio.TimeoutError as exc:
            raise NetworkTimeoutError(str(exc))
        except aiohttp.ClientConnectorError as exc:
            raise NetworkConnectionError(str(exc))
        except aiohttp.ClientError as exc:
            raise ResponseError(500, str(exc))

        try:
            decoded = raw.decode("utf-8").strip()
            data = json.loads(decoded) if decoded else {}
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ParseError(f"Failed to parse response: {exc}")
        if not isinstance(data, dict):
            raise ParseError(f"Unexpected response type {type(data).__name__} for {path}")
        return data

    async def _get_payload(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data = await self._request("GET", path, params=params)
        return data.get("payload", {}) or {}

    # ------------------------------------------------------------------
    # Appliances

    async def load_appliances(self) -> List[Dict[str, Any]]:
        """Return the raw description of every appliance of the account."""
        payload = await self._get_payload("/commands/v1/appliance")
        return list(payload.get("appliances", []))

    async def load_commands(self, appliance: "HonAppliance") -> Dict[str, Any]:
        """Return the raw command tree of *appliance* (empty if unsupported)."""
        params: Dict[str, Any] = {
            "applianceType": appliance.appliance_type,
            "code": appliance.code,
            "applianceModelId": appliance.appliance_model_id,
            "macAddress": appliance.mac_address,
            "os": settings.os,
            "appVersion": settings.app_version,
        }
        for key, info_key in (("firmwareId", "eepromId"), ("fwVersion", "fwVersion"), ("series", "series")):
            if appliance.info.get(info_key):
                params[key] = appliance.info[info_key]
        if not params["applianceModelId"]:
            params.pop("applianceModelId")

        payload = await self._get_payload("/commands/v1/retrieve", params)
        if payload.get("resultCode") != "0":
            logger.warning("No commands for %s (resultCode %s)", appliance.mac_address, payload.get("resultCode"))
            return {}
        payload = dict(payload)
        payload.pop("resultCode")
        return payload

    async def load_command_history(self, appliance: "HonAppliance") -> List[HistoryEntry]:
        """Return the commands last sent to *appliance*, newest first."""
        try:
            payload = await self._get_payload(f"/commands/v1/appliance/{appliance.mac_address}/history")
        except NetworkException as exc:
            logger.warning("Failed to load command history of %s: %s", appliance.mac_address, exc)
            return []
        return self._parse_items(HistoryEntry, payload.get("history", []) or [])

    async def load_favourites(self, appliance: "HonAppliance") -> List[Favourite]:
        """Return the favourites saved for *appliance*."""
        try:
            payload = await self._get_payload(f"/commands/v1/appliance/{appliance.mac_address}/favourite")
        except NetworkException as exc:
            logger.warning("Failed to load favourites of %s: %s", appliance.mac_address, exc)
            return []
        return self._parse_items(Favourite, payload.get("favourites", []) or [])

    @staticmethod
    def _parse_items(model, items: List[Any]) -> List[Any]:
        """Validate *items* as *model*, skipping (and logging) malformed entries."""
        result = []
        for item in items:
            try:
                result.append(model.model_validate(item))
            except ModelValidationError as exc:
                logger.warning("Skipping malformed %s: %s", model.__name__, exc)
        return result

    async def load_attributes(self, appliance: "HonAppliance") -> Dict[str, Any]:
        """Return the reported state (``shadow``) of *appliance*."""
        params = {
            "macAddress": appliance.mac_address,
            "applianceType": appliance.appliance_type,
            "category": "CYCLE",
        }
        return await self._get_payload("/commands/v1/context", params)

    async def load_statistics(self, appliance: "HonAppliance") -> Dict[str, Any]:
        params = {
            "macAddress": appliance.mac_address,
            "applianceType": appliance.appliance_type,
        }
        return await self._get_payload("/commands/v1/statistics", params)

    # ------------------------------------------------------------------
    # Sending

    @staticmethod
    def _timestamp() -> str:
        """ISO-8601 UTC timestamp with milliseconds, e.g. ``2024-01-01T10:00:00.000Z``."""
        now = datetime.datetime.now(datetime.timezone.utc)
        return now.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    async def send_command(
        self,
        appliance: "HonAppliance",
        command: str,
        parameters: Dict[str, str],
        ancillary_parameters: Dict[str, str],
        program_name: str = "",
    ) -> bool:
        """Send *command* and return whether the hOn cloud accepted it.

        Args:
            appliance: Target appliance
            command: Command name (``startProgram``, ``settings``...)
            parameters: Parameter values, already converted to strings
            ancillary_parameters: Ancillary parameter values
            program_name: Program label, sent upper-cased for ``startProgram``
        """
        timestamp = self._timestamp()
        data: Dict[str, Any] = {
            "macAddress": appliance.mac_address,
            "timestamp": timestamp,
            "commandName": command,
            "transactionId": f"{appliance.mac_address}_{timestamp}",
            "applianceOptions": appliance.options,
            "device": self.device,
            "attributes": {
                "channel": "mobileApp",
                "origin": "standardProgram",
                "energyLabel": "0",
            },
            "ancillaryParameters": ancillary_parameters,
            "parameters": parameters,
            "applianceType": appliance.appliance_type,
        }
        if "prStr" in parameters:
            data["attributes"]["prStr"] = parameters["prStr"]
        if command == "startProgram" and program_name:
            data["programName"] = program_name.upper()

        logger.debug("Sending %s to %s", command, appliance.mac_address)
        result = await self._request("POST", "/commands/v1/send", body=data)
        result_code = (result.get("payload", {}) or {}).get("resultCode")
        if result_code == "0":
            return True
        logger.error("Command %s failed with resultCode %s", command, result_code)
        return False
