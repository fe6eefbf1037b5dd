"""
CYAI Detection Service Client

Calls the remote detection functions (``/functions/v1/<name>``) exposed by
the API server.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp
import requests

from .exceptions import DetectionServiceError

logger = logging.getLogger(__name__)

THREAT_DETECTION_FUNCTION = 'ai-threat-detection'
ADVANCED_DETECTION_FUNCTION = 'ai-advanced-detection'


class DetectionServiceClient:
    """Async client for the detection functions"""

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: float = 30.0):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> 'DetectionServiceClient':
        """Build from a DetectionServiceConfig"""
        return cls(config.base_url, config.api_key, config.timeout_seconds)

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f"Bearer {self.api_key}"
            headers['apikey'] = self.api_key
        return headers

    def function_url(self, name: str) -> str:
        return f"{self.base_url}/functions/v1/{name}"

    async def invoke(self, name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST ``body`` to a detection function and return its JSON envelope"""
        url = self.function_url(name)
        try:
            async with aiohttp.ClientSession(headers=self._headers()) as session:
                async with session.post(
                    url, json=body, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    text = await resp.text()
                    status = resp.status
        except asyncio.TimeoutError:
            raise DetectionServiceError(f"Timeout calling {name} after {self.timeout}s")
        except aiohttp.ClientError as e:
            raise DetectionServiceError(f"Error calling {name}: {e}")

        try:
            data = json.loads(text) if text else {}
        except json.JSONDecodeError:
            raise DetectionServiceError(f"{name} returned invalid JSON (HTTP {status})")

        if isinstance(data, dict) and data.get('error'):
            raise DetectionServiceError(f"{name} failed: {data['error']}")
        if status >= 400:
            raise DetectionServiceError(f"{name} failed with HTTP {status}")
        if not isinstance(data, dict):
            raise DetectionServiceError(f"{name} returned an unexpected payload")

        return data

    async def detect_threats(self, network_data, analysis_type: str) -> Dict[str, Any]:
        return await self.invoke(THREAT_DETECTION_FUNCTION, {
            'networkData': network_data,
            'analysisType': analysis_type,
        })

    async def detect_advanced(self, simulation_data, category: str) -> Dict[str, Any]:
        return await self.invoke(ADVANCED_DETECTION_FUNCTION, {
            'simulationData': simulation_data,
            'category': category,
        })

    def ping(self) -> bool:
        """Check that the service answers its health endpoint"""
        try:
            response = requests.get(f"{self.base_url}/api/health", headers=self._headers(), timeout=5)
            return response.status_code == 200
        except requests.RequestException as e:
            logger.warning(f"[DetectionClient] Health check failed: {e}")
            return False
