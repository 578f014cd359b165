"""
Unit Tests: Classifier service clients

Requests are served by httpx.MockTransport, so no classifier service is needed.

Run with: pytest testing/test_model_clients.py -v
"""

import asyncio
import json
import httpx
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fusion.model_clients import TextSentimentClient, VoiceToneClient


# =============================================================================
# Test Fixtures & Helpers
# =============================================================================

class ScriptedService:
    """Mock classifier service answering with a scripted list of responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses[min(len(self.requests), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def text_client(service: ScriptedService) -> TextSentimentClient:
    return TextSentimentClient(service_url="http://classifier.test/", timeout=1.0, transport=service.transport)


# =============================================================================
# Test Suite: Successful Requests
# =============================================================================

class TestClassify:

    def test_text_client_returns_emotion(self):
        service = ScriptedService(httpx.Response(200, json={"emotion": "Happy"}))

        emotion = asyncio.run(text_client(service).classify("What a lovely day"))

        assert emotion == "Happy"
        assert len(service.requests) == 1
        assert str(service.requests[0].url) == "http://classifier.test/classify"
        assert json.loads(service.requests[0].content) == {"text": "What a lovely day"}

    def test_voice_client_sends_audio(self):
        service = ScriptedService(httpx.Response(200, json={"emotion": "The tone sounds anxious."}))
        client = VoiceToneClient(service_url="http://voice.test", transport=service.transport)

        emotion = asyncio.run(client.classify("data:audio/wav;base64,UklGRg=="))

        assert emotion == "The tone sounds anxious."
        assert json.loads(service.requests[0].content) == {"audio_data_uri": "data:audio/wav;base64,UklGRg=="}


# =============================================================================
# Test Suite: Failures & Retry
# =============================================================================

class TestRetry:

    def test_retries_once_after_server_error(self):
        service = ScriptedService(
            httpx.Response(500, json={"detail": "busy"}),
            httpx.Response(200, json={"emotion": "Sad"})
        )

        emotion = asyncio.run(text_client(service).classify("I miss home"))

        assert emotion == "Sad"
        assert len(service.requests) == 2

    def test_returns_none_after_second_failure(self):
        service = ScriptedService(httpx.Response(503))

        assert asyncio.run(text_client(service).classify("hello")) is None
        assert len(service.requests) == 2

    def test_timeout_returns_none(self):
        service = ScriptedService(httpx.ReadTimeout("timed out"))

        assert asyncio.run(text_client(service).classify("hello")) is None
        assert len(service.requests) == 2

    def test_connection_error_returns_none(self):
        service = ScriptedService(httpx.ConnectError("refused"))

        assert asyncio.run(text_client(service).classify("hello")) is None

    def test_empty_emotion_is_a_failure(self):
        service = ScriptedService(httpx.Response(200, json={"emotion": "  "}))

        assert asyncio.run(text_client(service).classify("hello")) is None

    def test_invalid_json_is_a_failure(self):
        service = ScriptedService(httpx.Response(200, content=b"not json"))

        assert asyncio.run(text_client(service).classify("hello")) is None
