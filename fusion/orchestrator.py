"""
Orchestrator Layer for Fusion Service

This module orchestrates one user turn:
1. Gather the facial, voice and text channels concurrently
2. Drop channels whose classifier failed or detected nothing
3. Run fusion logic
4. Format the summary line
5. Return the interaction result
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from fusion.facial_aggregator import aggregate_frames_async
from fusion.formatter import format_emotion_result
from fusion.fusion_logic import fuse_emotions, resolve_strategy
from fusion.models import (
    AnalyzeRequest,
    EmotionScore,
    FusionStrategy,
    InteractionResult,
    MultiModalEmotionInput
)
from fusion.model_clients import TextSentimentClient, VoiceToneClient

logger = logging.getLogger(__name__)

# Zero-argument callable returning the raw emotion text (sync or async)
LabelClassifier = Callable[[], Union[Optional[str], Awaitable[Optional[str]]]]


async def _call_label_classifier(classifier: Optional[LabelClassifier]) -> Optional[str]:
    if classifier is None:
        return None
    label = classifier()
    if inspect.isawaitable(label):
        label = await label
    return label


async def _resolved(value: Any) -> Any:
    return value


def _channel_result(name: str, outcome: Any) -> Any:
    """Turn a gathered outcome into a channel value; exceptions mark the channel unavailable."""
    if isinstance(outcome, BaseException):
        logger.warning(f"{name} channel unavailable, classifier raised: {outcome}")
        return None
    if outcome is None:
        logger.debug(f"{name} channel returned nothing")
    return outcome


async def process_interaction(
    facial_emotion: Optional[EmotionScore] = None,
    frame_classifier: Optional[Callable[[], Any]] = None,
    voice_classifier: Optional[LabelClassifier] = None,
    text_classifier: Optional[LabelClassifier] = None,
    strategy: Union[FusionStrategy, str, None] = None,
    frame_count: Optional[int] = None,
    interval_ms: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None
) -> InteractionResult:
    """
    Process one interaction.

    The facial channel is either given directly (facial_emotion, e.g. detected on
    the client) or sampled through frame_classifier with temporal aggregation.
    Classifier failures never fail the turn; the failing channel is omitted.

    Args:
        facial_emotion: Already-detected facial emotion
        frame_classifier: Per-frame facial classifier, used when facial_emotion is None
        voice_classifier: Returns the raw voice-tone emotion text
        text_classifier: Returns the raw text-sentiment emotion text
        strategy: Fusion strategy; None uses the configured default
        frame_count: Frames to sample for facial aggregation
        interval_ms: Pause between frames
        cancel_event: Stops facial sampling early, keeping collected frames

    Returns:
        InteractionResult with raw channel values, fused result and summary

    Raises:
        ValueError: If strategy is not supported
    """
    strategy = resolve_strategy(strategy)

    logger.info(
        f"Processing interaction (facial: {'given' if facial_emotion else 'sampled' if frame_classifier else 'none'}, "
        f"voice: {voice_classifier is not None}, text: {text_classifier is not None})"
    )

    if facial_emotion is None and frame_classifier is not None:
        facial_task = aggregate_frames_async(
            frame_classifier,
            frame_count=frame_count,
            interval_ms=interval_ms,
            cancel_event=cancel_event
        )
    else:
        facial_task = _resolved(None)

    facial_outcome, voice_outcome, text_outcome = await asyncio.gather(
        facial_task,
        _call_label_classifier(voice_classifier),
        _call_label_classifier(text_classifier),
        return_exceptions=True
    )

    facial_aggregate = _channel_result("Facial", facial_outcome)
    voice_emotion = _channel_result("Voice", voice_outcome)
    text_emotion = _channel_result("Text", text_outcome)

    if facial_aggregate is not None:
        facial_emotion = EmotionScore(emotion=facial_aggregate.emotion, confidence=facial_aggregate.confidence)

    emotion_input = MultiModalEmotionInput(
        facial_emotion=facial_emotion,
        voice_emotion=voice_emotion,
        text_emotion=text_emotion
    )
    fused = fuse_emotions(emotion_input, strategy)
    summary = format_emotion_result(fused)

    logger.info(f"Interaction result: {summary} (confidence: {fused.confidence:.3f}, method: {fused.fusion_method})")

    return InteractionResult(
        facial_emotion=facial_emotion,
        voice_emotion=voice_emotion,
        text_emotion=text_emotion,
        facial_aggregate=facial_aggregate,
        fused=fused,
        summary=summary
    )


async def process_analyze_request(
    request: AnalyzeRequest,
    voice_client: Optional[VoiceToneClient] = None,
    text_client: Optional[TextSentimentClient] = None
) -> InteractionResult:
    """
    Run the voice/text classifier services for an analyze request and fuse the results.

    Voice is classified only when audio is present, text only when text is present.
    """
    voice_classifier = None
    if request.audio_data_uri:
        voice_client = voice_client or VoiceToneClient()
        voice_classifier = lambda: voice_client.classify(request.audio_data_uri)

    text_classifier = None
    if request.text and request.text.strip():
        text_client = text_client or TextSentimentClient()
        text_classifier = lambda: text_client.classify(request.text)

    return await process_interaction(
        facial_emotion=request.facial_emotion,
        voice_classifier=voice_classifier,
        text_classifier=text_classifier,
        strategy=request.strategy
    )
