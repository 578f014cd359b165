"""
Model Client Layer for Fusion Service

This module provides HTTP clients for the voice-tone and text-sentiment
classifier services. Both services answer POST /classify with
{"emotion": "<free-form emotion text>"}.
Each client implements retry logic and graceful error handling: a failed
classification yields None so the channel is simply left out of fusion.
"""

import httpx
import logging
from typing import Optional, Dict, Any

from fusion.config_loader import load_config

logger = logging.getLogger(__name__)

# Load configuration
_config = load_config()
_classifier_config = _config.get("classifier_service_urls", {})
_timeout_config = _config.get("classifier_timeout_seconds", 10.0)


class BaseClassifierClient:
    """Base class for classifier service clients with retry logic."""

    def __init__(
        self,
        service_url: str,
        service_name: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize base classifier client.

        Args:
            service_url: Base URL of the classifier service
            service_name: Name of the service (for logging)
            timeout: Read timeout in seconds (defaults to config value)
            transport: Optional httpx transport (used by tests)
        """
        self.service_url = service_url.rstrip("/")
        self.service_name = service_name
        self.timeout = timeout or _timeout_config
        self.transport = transport
        self.classify_endpoint = f"{self.service_url}/classify"

        logger.info(f"{service_name}Client initialized with URL: {self.service_url}")

    async def _classify(self, payload: Dict[str, Any]) -> Optional[str]:
        """
        Classify a payload, retrying once on failure.

        Returns:
            Raw emotion text from the service, or None on failure
        """
        result = await self._make_request(payload)
        if result is not None:
            return result

        logger.info(f"Retrying {self.service_name} classification request...")
        result = await self._make_request(payload)
        if result is not None:
            return result

        logger.warning(f"{self.service_name} classification failed after retry, returning None")
        return None

    async def _make_request(self, payload: Dict[str, Any]) -> Optional[str]:
        """
        Make HTTP request to the classifier service.

        Returns:
            Emotion text if successful, None on failure
        """
        try:
            timeout_config = httpx.Timeout(
                connect=5.0,
                read=self.timeout,
                write=5.0,
                pool=5.0
            )

            async with httpx.AsyncClient(timeout=timeout_config, transport=self.transport) as client:
                response = await client.post(
                    self.classify_endpoint,
                    json=payload,
                    headers={"Content-Type": "application/json"}
                )
                response.raise_for_status()

                data = response.json()
                emotion = data.get("emotion") if isinstance(data, dict) else None
                if not isinstance(emotion, str) or not emotion.strip():
                    logger.warning(f"{self.service_name} returned no emotion: {data}")
                    return None

                logger.debug(f"{self.service_name} returned emotion '{emotion}'")
                return emotion

        except httpx.TimeoutException:
            logger.warning(f"{self.service_name} request timed out after {self.timeout}s")
            return None
        except httpx.HTTPStatusError as e:
            logger.warning(f"{self.service_name} returned HTTP {e.response.status_code}: {e}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"{self.service_name} request failed: {e}")
            return None


class VoiceToneClient(BaseClassifierClient):
    """Client for the voice-tone emotion classifier."""

    def __init__(
        self,
        service_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        url = service_url or _classifier_config.get("voice", "http://localhost:8011")
        super().__init__(url, "VoiceTone", timeout, transport)

    async def classify(self, audio_data_uri: str) -> Optional[str]:
        """
        Classify the emotional tone of a recording.

        Args:
            audio_data_uri: Base64 data URI ("data:<mimetype>;base64,<data>")

        Returns:
            Free-form emotion text, or None on failure
        """
        return await self._classify({"audio_data_uri": audio_data_uri})


class TextSentimentClient(BaseClassifierClient):
    """Client for the text-sentiment emotion classifier."""

    def __init__(
        self,
        service_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        url = service_url or _classifier_config.get("text", "http://localhost:8012")
        super().__init__(url, "TextSentiment", timeout, transport)

    async def classify(self, text: str) -> Optional[str]:
        """Classify the emotional content of a piece of text."""
        return await self._classify({"text": text})
