"""
Emotion Label Normalization

Maps free-form emotion strings coming from the facial, voice and text
classifiers onto the standard taxonomy.

Two keyword tables are kept on purpose:
- NORMALIZER_RULES is applied to a label that is already a single word or
  short phrase (normalize_emotion).
- EXTRACTOR_RULES is applied to classifier prose to pull an emotion out of it
  (extract_emotion_from_text).
They overlap but are not identical ("unhappy", "upset", "amazed" only exist in
the extractor table). Rules are evaluated top to bottom and the first match wins.
"""

import logging
from typing import List, Optional, Tuple

from fusion.models import StandardEmotion, STANDARD_EMOTIONS

logger = logging.getLogger(__name__)

# (substrings, label) - "calm" resolves to Neutral; Calm itself needs an exact match
NORMALIZER_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("happ", "joy"), StandardEmotion.HAPPY.value),
    (("sad", "depress"), StandardEmotion.SAD.value),
    (("ang", "mad"), StandardEmotion.ANGRY.value),
    (("fear", "scared"), StandardEmotion.FEARFUL.value),
    (("surpris", "shock"), StandardEmotion.SURPRISED.value),
    (("disgust",), StandardEmotion.DISGUSTED.value),
    (("neutr", "calm"), StandardEmotion.NEUTRAL.value),
    (("anxi", "worr"), StandardEmotion.ANXIOUS.value),
    (("excit",), StandardEmotion.EXCITED.value),
    (("frustrat",), StandardEmotion.FRUSTRATED.value),
    (("confus",), StandardEmotion.CONFUSED.value),
]

EXTRACTOR_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("happy", "joy"), StandardEmotion.HAPPY.value),
    (("sad", "unhappy"), StandardEmotion.SAD.value),
    (("angry", "upset"), StandardEmotion.ANGRY.value),
    (("afraid", "scared"), StandardEmotion.FEARFUL.value),
    (("surprised", "amazed"), StandardEmotion.SURPRISED.value),
    (("disgusted",), StandardEmotion.DISGUSTED.value),
    (("neutral", "calm"), StandardEmotion.NEUTRAL.value),
    (("anxious", "worried"), StandardEmotion.ANXIOUS.value),
    (("excited",), StandardEmotion.EXCITED.value),
    (("frustrated",), StandardEmotion.FRUSTRATED.value),
    (("confused",), StandardEmotion.CONFUSED.value),
]

_CANONICAL_BY_LOWER = {emotion.lower(): emotion for emotion in STANDARD_EMOTIONS}


def match_keyword_rules(text: str, rules: List[Tuple[Tuple[str, ...], str]]) -> Optional[str]:
    """Return the label of the first rule with a keyword contained in text (case-insensitive)."""
    lowered = text.lower()
    for keywords, label in rules:
        if any(keyword in lowered for keyword in keywords):
            return label
    return None


def is_standard_emotion(label: Optional[str]) -> bool:
    """True if label is a canonical taxonomy member (exact casing)."""
    return label in STANDARD_EMOTIONS


def normalize_emotion(emotion: str) -> str:
    """
    Normalize an emotion string to the standard taxonomy.

    Order:
    1. Exact case-insensitive match against the taxonomy
    2. Keyword rules (NORMALIZER_RULES)
    3. Input with its first character capitalized

    Args:
        emotion: Raw emotion label

    Returns:
        Canonical taxonomy label, or the capitalized input when nothing matched.
        The fallback is not guaranteed to be a taxonomy member.
    """
    normalized = emotion.strip()

    match = _CANONICAL_BY_LOWER.get(normalized.lower())
    if match:
        return match

    match = match_keyword_rules(normalized, NORMALIZER_RULES)
    if match:
        return match

    fallback = normalized[:1].upper() + normalized[1:]
    logger.debug(f"No taxonomy match for '{emotion}', using '{fallback}'")
    return fallback


def extract_emotion_from_text(text: Optional[str]) -> Optional[str]:
    """
    Find an emotion mentioned in classifier prose.

    Scans for any taxonomy name (in taxonomy order), then EXTRACTOR_RULES.

    Returns:
        Canonical label, or None if the text mentions no known emotion.
    """
    if not text:
        return None

    lowered = text.lower()
    for emotion in STANDARD_EMOTIONS:
        if emotion.lower() in lowered:
            return emotion

    return match_keyword_rules(lowered, EXTRACTOR_RULES)


def resolve_channel_label(raw: str) -> str:
    """Normalize a voice/text channel output, preferring an emotion embedded in the text."""
    return normalize_emotion(extract_emotion_from_text(raw) or raw)
