# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Docker registry client for checking repository access.
Implements the token and basic auth challenge flow of the Registry HTTP API V2.
"""

import base64
import json
import logging
import re
from typing import Dict, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from ..errors import ConfigurationError, EngineError
from ..MODELS.engine_types import AuthConfig
from .image_reference import ImageReference

logger = logging.getLogger(__name__)

ACCESS_ACTIONS = {
    "read": "pull",
    "write": "pull,push",
}

_CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')


def _is_transport_error(exc: BaseException) -> bool:
    return isinstance(exc, URLError) and not isinstance(exc, HTTPError)


class RegistryClient:
    """
    Client for probing what a set of credentials may do on a registry.
    Supports Docker Hub and OCI-compatible registries.
    """

    def __init__(self, timeout: float = 30):
        """
        Initialize the registry client.

        Args:
            timeout: Seconds to wait for each HTTP request.
        """
        self.timeout = timeout

    @retry(
        retry=retry_if_exception(_is_transport_error),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        reraise=True,
    )
    def _request(self, url: str, headers: Dict[str, str]) -> Tuple[int, Dict[str, str], bytes]:
        """Make a request, returning status, lower-cased headers and body."""
        request = Request(url, headers=headers)
        try:
            with urlopen(request, timeout=self.timeout) as response:
                return response.status, self._headers(response.headers), response.read()
        except HTTPError as e:
            return e.code, self._headers(e.headers), b""

    @staticmethod
    def _headers(raw) -> Dict[str, str]:
        if raw is None:
            return {}
        return {key.lower(): value for key, value in raw.items()}

    @staticmethod
    def _basic_auth(auth: AuthConfig) -> Optional[str]:
        if auth.is_empty:
            return None
        token = base64.b64encode(f"{auth.username}:{auth.password}".encode()).decode()
        return f"Basic {token}"

    def _bearer_token(self, challenge: str, scope: str, auth: AuthConfig) -> Optional[str]:
        """Get a bearer token from the realm named in the challenge."""
        params = dict(_CHALLENGE_PARAM.findall(challenge))
        realm = params.get("realm")
        if not realm:
            return None

        query = {"scope": scope}
        if params.get("service"):
            query["service"] = params["service"]

        headers = {}
        basic = self._basic_auth(auth)
        if basic:
            headers["Authorization"] = basic

        status, _, body = self._request(f"{realm}?{urlencode(query)}", headers)
        if status != 200:
            logger.debug("Token request to %s returned %s", realm, status)
            return None

        try:
            data = json.loads(body.decode() or "{}")
        except ValueError:
            logger.debug("Token response from %s is not JSON", realm)
            return None
        token = data.get("token") or data.get("access_token")
        return f"Bearer {token}" if token else None

    def check_access(self, auth: AuthConfig, access: str, repository: str, registry: str = "") -> bool:
        """
        Check whether the credentials grant the given access to a repository.

        Args:
            auth: Registry credentials, may be empty for anonymous access.
            access: 'read' or 'write'.
            repository: Repository name, e.g. 'wercker/redis'.
            registry: Registry host or URL. Defaults to Docker Hub.

        Returns:
            True if the registry allows the access.
        """
        if access not in ACCESS_ACTIONS:
            raise ConfigurationError(f"Unknown access level: {access}")

        ref = ImageReference(repository=repository, registry=registry)
        url = f"{ref.registry_url}/v2/{ref.registry_repository}/tags/list"
        scope = f"repository:{ref.registry_repository}:{ACCESS_ACTIONS[access]}"

        try:
            status, headers, _ = self._request(url, {})
            if status == 401:
                challenge = headers.get("www-authenticate", "")
                if challenge.lower().startswith("bearer"):
                    authorization = self._bearer_token(challenge, scope, auth)
                else:
                    authorization = self._basic_auth(auth)
                if not authorization:
                    return False
                status, _, _ = self._request(url, {"Authorization": authorization})
        except URLError as e:
            raise EngineError(f"Registry {ref.registry_host} unreachable: {e.reason}", "check access") from e

        if status in (401, 403, 404):
            return False
        if status >= 400:
            raise EngineError(f"Registry {ref.registry_host} returned {status}", "check access")
        return True
