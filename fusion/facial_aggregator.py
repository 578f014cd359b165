"""
Temporal Facial Aggregation

Single facial-detector frames are noisy. This module samples an external
per-frame classifier several times, spaced in time, and reduces the samples
to one stable facial estimate for the interaction.

Frame classifier contract:
- returns None when no face was detected in the frame (a raised exception
  counts the same way)
- otherwise returns one of
    * an EmotionScore
    * a {"emotion": str, "confidence": float} mapping
    * an expression map {"happy": 0.91, "sad": 0.02, ...} (reduced to its dominant entry)

Samples without a detection are dropped, never counted as zero confidence.
"""

import asyncio
import inspect
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from fusion.config_loader import load_config
from fusion.models import EmotionScore, FacialAggregate, FrameSample
from fusion.normalizer import normalize_emotion

logger = logging.getLogger(__name__)

# Load configuration
_config = load_config()
_aggregation_config = _config.get("facial_aggregation", {})
DEFAULT_FRAME_COUNT = _aggregation_config.get("frame_count", 5)
DEFAULT_INTERVAL_MS = _aggregation_config.get("interval_ms", 200)

# face-api.js expression names
FACE_API_EMOTION_MAP = {
    "neutral": "Neutral",
    "happy": "Happy",
    "sad": "Sad",
    "angry": "Angry",
    "fearful": "Fearful",
    "disgusted": "Disgusted",
    "surprised": "Surprised"
}


def map_face_api_emotion(face_api_emotion: str) -> str:
    """Map a face-api expression name to the standard label, passing unknown names through."""
    return FACE_API_EMOTION_MAP.get(face_api_emotion, face_api_emotion)


def dominant_expression(expressions: Mapping[str, float]) -> Optional[FrameSample]:
    """Reduce a per-emotion confidence map to its highest entry (first maximum wins)."""
    if not expressions:
        return None
    emotion, confidence = max(expressions.items(), key=lambda item: item[1])
    return FrameSample(emotion=emotion, confidence=confidence)


def to_frame_sample(detection: Any) -> Optional[FrameSample]:
    """
    Coerce a frame classifier result into a FrameSample.

    Raises:
        TypeError: If the result has none of the supported shapes
    """
    if detection is None:
        return None
    if isinstance(detection, EmotionScore):
        return detection
    if isinstance(detection, Mapping):
        if "emotion" in detection and "confidence" in detection:
            return FrameSample(emotion=detection["emotion"], confidence=detection["confidence"])
        return dominant_expression(detection)
    raise TypeError(f"Unsupported frame classifier result: {type(detection).__name__}")


def _validate_sampling(frame_count: int, interval_ms: float) -> None:
    if frame_count < 1:
        raise ValueError(f"frame_count must be at least 1, got {frame_count}")
    if interval_ms < 0:
        raise ValueError(f"interval_ms must not be negative, got {interval_ms}")


def summarize_samples(
    samples: List[FrameSample],
    frames_requested: int,
    cancelled: bool = False
) -> Optional[FacialAggregate]:
    """
    Average confidence per raw label and pick the dominant one.

    Ties go to the label encountered first. The dominant label is normalized;
    all_emotions keeps the raw labels.

    Returns:
        FacialAggregate, or None when no sample was collected
    """
    if not samples:
        logger.info(f"No face detected in {frames_requested} frames")
        return None

    grouped: Dict[str, List[float]] = {}
    for sample in samples:
        grouped.setdefault(sample.emotion, []).append(sample.confidence)

    averages = {
        emotion: sum(confidences) / len(confidences)
        for emotion, confidences in grouped.items()
    }
    dominant, confidence = max(averages.items(), key=lambda item: item[1])

    logger.info(
        f"Facial aggregate: {dominant} ({confidence:.3f}) from "
        f"{len(samples)}/{frames_requested} frames{' (cancelled)' if cancelled else ''}"
    )
    logger.debug(f"Averaged facial emotions: {averages}")

    return FacialAggregate(
        emotion=normalize_emotion(dominant),
        confidence=confidence,
        all_emotions=averages,
        frames_requested=frames_requested,
        frames_detected=len(samples),
        cancelled=cancelled
    )


def aggregate_frames(
    classifier: Callable[[], Any],
    frame_count: Optional[int] = None,
    interval_ms: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
    sleep: Callable[[float], None] = time.sleep
) -> Optional[FacialAggregate]:
    """
    Sample a frame classifier sequentially and aggregate the detections.

    Args:
        classifier: Zero-argument callable classifying the current video frame
        frame_count: Number of classifier invocations (default from config: 5)
        interval_ms: Pause between invocations in milliseconds (default from config: 200)
        cancel_event: When set, stop scheduling samples and aggregate what was collected
        sleep: Pause function, seconds

    Returns:
        FacialAggregate, or None if no frame had a detection
    """
    frame_count = DEFAULT_FRAME_COUNT if frame_count is None else frame_count
    interval_ms = DEFAULT_INTERVAL_MS if interval_ms is None else interval_ms
    _validate_sampling(frame_count, interval_ms)

    samples: List[FrameSample] = []
    cancelled = False

    for i in range(frame_count):
        if cancel_event is not None and cancel_event.is_set():
            cancelled = True
            break

        try:
            detection = classifier()
        except Exception as e:
            logger.warning(f"Frame {i + 1}/{frame_count}: classifier failed, treating as no detection: {e}")
            detection = None

        sample = to_frame_sample(detection)
        if sample is not None:
            samples.append(sample)
        else:
            logger.debug(f"Frame {i + 1}/{frame_count}: no face detected")

        if i < frame_count - 1:
            if cancel_event is not None:
                # wait() returns early once the event is set
                cancel_event.wait(interval_ms / 1000)
            else:
                sleep(interval_ms / 1000)

    return summarize_samples(samples, frame_count, cancelled)


async def aggregate_frames_async(
    classifier: Callable[[], Any],
    frame_count: Optional[int] = None,
    interval_ms: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None
) -> Optional[FacialAggregate]:
    """
    Async variant of aggregate_frames.

    The classifier may be a plain callable or a coroutine function. Samples are
    still taken one after another; each must finish before the next is scheduled.
    """
    frame_count = DEFAULT_FRAME_COUNT if frame_count is None else frame_count
    interval_ms = DEFAULT_INTERVAL_MS if interval_ms is None else interval_ms
    _validate_sampling(frame_count, interval_ms)

    samples: List[FrameSample] = []
    cancelled = False

    for i in range(frame_count):
        if cancel_event is not None and cancel_event.is_set():
            cancelled = True
            break

        try:
            detection = classifier()
            if inspect.isawaitable(detection):
                detection = await detection
        except Exception as e:
            logger.warning(f"Frame {i + 1}/{frame_count}: classifier failed, treating as no detection: {e}")
            detection = None

        sample = to_frame_sample(detection)
        if sample is not None:
            samples.append(sample)
        else:
            logger.debug(f"Frame {i + 1}/{frame_count}: no face detected")

        if i < frame_count - 1:
            if cancel_event is not None:
                try:
                    await asyncio.wait_for(cancel_event.wait(), timeout=interval_ms / 1000)
                except asyncio.TimeoutError:
                    pass
            else:
                await asyncio.sleep(interval_ms / 1000)

    return summarize_samples(samples, frame_count, cancelled)
