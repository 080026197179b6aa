"""Minimal Home Assistant REST API client."""

import enum
import logging
from typing import Any, Optional

import requests

from ..core.exceptions import HomeAssistantError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds

URL_BASE = "/api/"
URL_STATES = URL_BASE + "states"
URL_SERVICES = URL_BASE + "services"
URL_STATES_ENTITY = URL_BASE + "states/{entity_id}"
URL_SERVICES_SERVICE = URL_BASE + "services/{domain}/{service}"


class ApiStatus(str, enum.Enum):
    """Result of the API connectivity check."""
    OK = "ok"
    INVALID_PASSWORD = "invalid_password"
    CANNOT_CONNECT = "cannot_connect"
    UNKNOWN = "unknown"


class HomeAssistantApi:
    """Talks to a Home Assistant instance using a long-lived access token."""

    def __init__(self, base_url: str, token: str, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        })

    def _request(self, method: str, path: str, data: Optional[dict] = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(method, url, json=data, timeout=self.timeout)
        except requests.RequestException as e:
            raise HomeAssistantError(f"Error executing request for {url}: {e}") from e

    def _json(self, path: str) -> Any:
        response = self._request("GET", path)
        if response.status_code != 200:
            raise HomeAssistantError(
                f"Error fetching {path}: {response.status_code}", status_code=response.status_code
            )
        return response.json()

    def get_status(self) -> ApiStatus:
        """Check whether the API is reachable and the token is accepted."""
        try:
            response = self._request("GET", URL_BASE)
        except HomeAssistantError:
            logger.debug("Home Assistant unreachable", exc_info=True)
            return ApiStatus.CANNOT_CONNECT

        if response.status_code == 200:
            return ApiStatus.OK
        if response.status_code == 401:
            return ApiStatus.INVALID_PASSWORD
        return ApiStatus.UNKNOWN

    def set_state(
        self,
        entity_id: str,
        state: str,
        attributes: Optional[dict] = None,
        force_update: bool = True,
    ) -> None:
        """Set an entity's state.

        Raises:
            HomeAssistantError: If the request fails or is rejected.
        """
        data: dict[str, Any] = {"state": state}
        if attributes:
            data["attributes"] = attributes
        data["force_update"] = force_update

        response = self._request("POST", URL_STATES_ENTITY.format(entity_id=entity_id), data)
        # 201 when the entity is created by this call
        if response.status_code not in (200, 201):
            raise HomeAssistantError(
                f"Error setting state: {response.status_code}", status_code=response.status_code
            )
        logger.debug("Set %s to %r", entity_id, state)

    def get_state(self, entity_id: str) -> dict:
        return self._json(URL_STATES_ENTITY.format(entity_id=entity_id))

    def get_states(self) -> list:
        return self._json(URL_STATES)

    def get_services(self) -> list:
        return self._json(URL_SERVICES)

    def is_state(self, entity_id: str, state: str) -> bool:
        return self.get_state(entity_id).get("state") == state

    def call_service(self, domain: str, service: str, data: Optional[dict] = None) -> None:
        """Call a service, e.g. ``light.turn_on``.

        Raises:
            HomeAssistantError: If the request fails or is rejected.
        """
        response = self._request(
            "POST", URL_SERVICES_SERVICE.format(domain=domain, service=service), data
        )
        if response.status_code != 200:
            raise HomeAssistantError(
                f"Error calling service {service}: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
