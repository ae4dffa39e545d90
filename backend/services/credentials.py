"""
Credential providers for third-party routing and geocoding APIs.

The planner never reads API keys from the environment itself. A configured
provider is passed into each service, which calls get_api_key() right before
an outbound request. Supported sources:

- StaticCredentialProvider: a key known at startup (e.g. from config.py)
- KeyEndpointCredentialProvider: a key-retrieval endpoint returning
  {"apiKey": "..."} (the deployment's serverless key proxy)
"""

import logging
from typing import Optional

import requests

from services.errors import AuthenticationFailure

logger = logging.getLogger(__name__)


class StaticCredentialProvider:
    """Provider for a key supplied directly by the caller."""

    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key

    def get_api_key(self) -> str:
        if not self.api_key:
            raise AuthenticationFailure("API key not configured")
        return self.api_key


class KeyEndpointCredentialProvider:
    """
    Fetch an API key from a key-retrieval endpoint.

    The endpoint answers 200 with {"apiKey": "...", "message": "..."} or a
    non-200 status with {"error": "..."} when the key is not configured.
    The key is fetched on every call so a rotated key is picked up without a
    restart.
    """

    TIMEOUT_SECONDS = 5

    def __init__(self, endpoint_url: str, bearer_token: Optional[str] = None,
                 timeout: float = TIMEOUT_SECONDS):
        self.endpoint_url = endpoint_url
        self.bearer_token = bearer_token
        self.timeout = timeout

    def get_api_key(self) -> str:
        headers = {'Accept': 'application/json'}
        if self.bearer_token:
            headers['Authorization'] = f"Bearer {self.bearer_token}"

        try:
            response = requests.post(self.endpoint_url, json={}, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Key endpoint request failed: {e}")
            raise AuthenticationFailure("Could not reach the credential endpoint") from e

        if response.status_code != 200:
            logger.error(f"Key endpoint returned status {response.status_code}")
            raise AuthenticationFailure(f"Credential endpoint returned status {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise AuthenticationFailure("Credential endpoint returned an invalid body") from e

        if not isinstance(body, dict):
            raise AuthenticationFailure("Credential endpoint returned an invalid body")

        api_key = body.get('apiKey')

        if not api_key:
            raise AuthenticationFailure("Credential endpoint returned no apiKey")

        logger.debug("Fetched API key from credential endpoint")
        return api_key
