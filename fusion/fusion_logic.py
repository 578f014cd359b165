"""
Core Fusion Logic for Fusion Service

This module implements the two fusion strategies that reduce the facial,
voice and text channels of one interaction into a single emotion.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union

from fusion.config_loader import load_config
from fusion.models import FusedEmotionResult, FusionStrategy, MultiModalEmotionInput
from fusion.normalizer import normalize_emotion, resolve_channel_label

logger = logging.getLogger(__name__)

# Load configuration
_config = load_config()
_fusion_config = _config.get("fusion_weights", {})
FUSION_WEIGHTS = {
    "facial_high_confidence": _fusion_config.get("facial_high_confidence", 0.5),
    "facial_low_confidence": _fusion_config.get("facial_low_confidence", 0.3),
    "facial_confidence_threshold": _fusion_config.get("facial_confidence_threshold", 0.6),
    "voice": _fusion_config.get("voice", 0.3),
    "text": _fusion_config.get("text", 0.2)
}
_fallback_config = _config.get("fallback", {})
FALLBACK_EMOTION = _fallback_config.get("emotion", "Neutral")
FALLBACK_CONFIDENCE = _fallback_config.get("confidence", 0.5)
DEFAULT_STRATEGY = _config.get("default_strategy", FusionStrategy.WEIGHTED.value)

FUSION_METHOD_NAMES = {
    FusionStrategy.WEIGHTED: "weighted-voting",
    FusionStrategy.MAJORITY: "majority-voting"
}


def resolve_strategy(strategy: Union[FusionStrategy, str, None]) -> FusionStrategy:
    """
    Resolve a strategy name to a FusionStrategy.

    Raises:
        ValueError: If the strategy is not one of the supported values
    """
    if strategy is None:
        strategy = DEFAULT_STRATEGY
    try:
        return FusionStrategy(strategy)
    except ValueError:
        valid = [s.value for s in FusionStrategy]
        raise ValueError(f"Unknown fusion strategy '{strategy}' (must be one of {valid})")


def _channel_labels(emotion_input: MultiModalEmotionInput) -> List[Tuple[str, str]]:
    """Normalized (channel, label) pairs for present channels, in facial, voice, text order."""
    labels = []
    if emotion_input.facial_emotion is not None:
        labels.append(("facial", normalize_emotion(emotion_input.facial_emotion.emotion)))
    if emotion_input.voice_emotion:
        labels.append(("voice", resolve_channel_label(emotion_input.voice_emotion)))
    if emotion_input.text_emotion:
        labels.append(("text", resolve_channel_label(emotion_input.text_emotion)))
    return labels


def _channel_weight(channel: str, emotion_input: MultiModalEmotionInput, weights: Dict[str, float]) -> float:
    if channel == "facial":
        if emotion_input.facial_emotion.confidence > weights["facial_confidence_threshold"]:
            return weights["facial_high_confidence"]
        return weights["facial_low_confidence"]
    return weights[channel]


def _rank(votes: Dict[str, float]) -> List[Tuple[str, float]]:
    # sorted() is stable, so equal scores keep insertion order (facial > voice > text)
    return sorted(votes.items(), key=lambda item: item[1], reverse=True)


def _fallback_result(method: str, breakdown: Dict[str, str]) -> FusedEmotionResult:
    logger.info(f"No channels present, falling back to {FALLBACK_EMOTION} ({FALLBACK_CONFIDENCE})")
    return FusedEmotionResult(
        final_emotion=FALLBACK_EMOTION,
        confidence=FALLBACK_CONFIDENCE,
        breakdown=breakdown,
        fusion_method=method
    )


def weighted_voting_fusion(
    emotion_input: MultiModalEmotionInput,
    weights: Optional[Dict[str, float]] = None
) -> FusedEmotionResult:
    """
    Weighted voting fusion.

    Algorithm:
    1. Facial adds facial_high_confidence (0.5) when its confidence is above
       facial_confidence_threshold (0.6), otherwise facial_low_confidence (0.3)
    2. Voice adds 0.3, text adds 0.2, both after emotion extraction + normalization
    3. Emotion with the highest accumulated weight wins (ties: first inserted)
    4. Confidence is the winning weight clamped to 1.0

    Args:
        emotion_input: Per-channel inputs
        weights: Optional weights dictionary. If None, uses config weights.

    Returns:
        FusedEmotionResult with fusion_method "weighted-voting"
    """
    weights = {**FUSION_WEIGHTS, **(weights or {})}
    method = FUSION_METHOD_NAMES[FusionStrategy.WEIGHTED]

    votes: Dict[str, float] = {}
    breakdown: Dict[str, str] = {}

    for channel, emotion in _channel_labels(emotion_input):
        weight = _channel_weight(channel, emotion_input, weights)
        votes[emotion] = votes.get(emotion, 0.0) + weight
        breakdown[channel] = emotion
        logger.debug(f"{emotion} += {channel} ({weight:.2f}) = {votes[emotion]:.2f}")

    ranked = _rank(votes)
    if not ranked:
        return _fallback_result(method, breakdown)

    final_emotion, score = ranked[0]
    confidence = min(score, 1.0)

    logger.info(f"Weighted fusion selected '{final_emotion}' (score: {score:.3f}, confidence: {confidence:.3f})")

    return FusedEmotionResult(
        final_emotion=final_emotion,
        confidence=confidence,
        breakdown=breakdown,
        fusion_method=method,
        scores=dict(ranked)
    )


def majority_voting_fusion(emotion_input: MultiModalEmotionInput) -> FusedEmotionResult:
    """
    Majority voting fusion: every present channel casts one vote.

    Confidence is votes for the winner divided by total votes cast.
    """
    method = FUSION_METHOD_NAMES[FusionStrategy.MAJORITY]

    votes: Dict[str, float] = {}
    breakdown: Dict[str, str] = {}

    for channel, emotion in _channel_labels(emotion_input):
        votes[emotion] = votes.get(emotion, 0) + 1
        breakdown[channel] = emotion

    ranked = _rank(votes)
    if not ranked:
        return _fallback_result(method, breakdown)

    final_emotion, winner_votes = ranked[0]
    total_votes = sum(votes.values())
    confidence = winner_votes / total_votes

    logger.info(f"Majority fusion selected '{final_emotion}' ({winner_votes}/{total_votes} votes)")

    return FusedEmotionResult(
        final_emotion=final_emotion,
        confidence=confidence,
        breakdown=breakdown,
        fusion_method=method,
        scores=dict(ranked)
    )


def fuse_emotions(
    emotion_input: MultiModalEmotionInput,
    strategy: Union[FusionStrategy, str, None] = FusionStrategy.WEIGHTED,
    weights: Optional[Dict[str, float]] = None
) -> FusedEmotionResult:
    """
    Fuse the facial, voice and text channels of one interaction.

    Args:
        emotion_input: Per-channel inputs; any subset may be absent
        strategy: "weighted" or "majority". None uses the configured default.
        weights: Optional weight overrides for weighted voting

    Returns:
        FusedEmotionResult

    Raises:
        ValueError: If strategy is not a supported value
    """
    resolved = resolve_strategy(strategy)
    if resolved == FusionStrategy.MAJORITY:
        return majority_voting_fusion(emotion_input)
    return weighted_voting_fusion(emotion_input, weights)
