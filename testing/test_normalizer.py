"""
Unit Tests: Emotion label normalization and extraction

Covers normalize_emotion() rule order, extract_emotion_from_text() and the
voice/text channel chain resolve_channel_label().

Run with: pytest testing/test_normalizer.py -v
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fusion.models import STANDARD_EMOTIONS
from fusion.normalizer import (
    NORMALIZER_RULES,
    EXTRACTOR_RULES,
    normalize_emotion,
    extract_emotion_from_text,
    resolve_channel_label,
    is_standard_emotion
)


class TestNormalizeExactMatch:

    @pytest.mark.parametrize("emotion", STANDARD_EMOTIONS)
    def test_any_casing_returns_canonical(self, emotion):
        assert normalize_emotion(emotion.lower()) == emotion
        assert normalize_emotion(emotion.upper()) == emotion
        assert normalize_emotion(emotion) == emotion

    @pytest.mark.parametrize("emotion", STANDARD_EMOTIONS)
    def test_idempotent(self, emotion):
        once = normalize_emotion(emotion)
        assert normalize_emotion(once) == once

    def test_surrounding_whitespace_is_trimmed(self):
        assert normalize_emotion("  happy \n") == "Happy"

    def test_calm_exact_match_is_calm(self):
        assert normalize_emotion("calm") == "Calm"


class TestNormalizeKeywordRules:

    @pytest.mark.parametrize("raw,expected", [
        ("happiness", "Happy"),
        ("joyful", "Happy"),
        ("saddened", "Sad"),
        ("depressed", "Sad"),
        ("anger", "Angry"),
        ("mad", "Angry"),
        ("fearfulness", "Fearful"),
        ("scared", "Fearful"),
        ("surprise", "Surprised"),
        ("shocked", "Surprised"),
        ("disgust", "Disgusted"),
        ("neutrality", "Neutral"),
        ("calmness", "Neutral"),
        ("anxiety", "Anxious"),
        ("worry", "Anxious"),
        ("excitement", "Excited"),
        ("frustration", "Frustrated"),
        ("confusion", "Confused"),
    ])
    def test_keyword_maps_to_label(self, raw, expected):
        assert normalize_emotion(raw) == expected

    def test_calm_keyword_resolves_to_neutral(self):
        """"calm" inside a longer label hits the Neutral rule, not Calm."""
        assert normalize_emotion("very calm") == "Neutral"

    def test_first_matching_rule_wins(self):
        # Happy rule precedes Sad rule
        assert normalize_emotion("happy but sad") == "Happy"
        # Fearful rule ("scared") precedes Surprised rule ("shock")
        assert normalize_emotion("shocked and scared") == "Fearful"

    def test_short_keyword_matches_inside_words(self):
        """"ang" is a substring rule, so unrelated words can hit it."""
        assert normalize_emotion("dangerous") == "Angry"

    def test_rule_table_order(self):
        labels = [label for _, label in NORMALIZER_RULES]
        assert labels == [
            "Happy", "Sad", "Angry", "Fearful", "Surprised", "Disgusted",
            "Neutral", "Anxious", "Excited", "Frustrated", "Confused"
        ]


class TestNormalizeFallback:

    def test_unknown_label_is_capitalized(self):
        assert normalize_emotion("bored") == "Bored"

    def test_only_first_character_changes(self):
        assert normalize_emotion("  quite bORED ") == "Quite bORED"

    def test_fallback_is_not_a_standard_emotion(self):
        assert not is_standard_emotion(normalize_emotion("bored"))

    def test_empty_string(self):
        assert normalize_emotion("") == ""


class TestExtractEmotionFromText:

    def test_taxonomy_name_in_prose(self):
        assert extract_emotion_from_text("I feel neutral today") == "Neutral"

    def test_sad_in_prose(self):
        assert extract_emotion_from_text("sad and tired") == "Sad"

    def test_taxonomy_order_decides_between_mentions(self):
        # Sad comes before Angry in the taxonomy
        assert extract_emotion_from_text("Angry at first, then sad") == "Sad"

    def test_calm_mention_returns_calm(self):
        """Calm is a taxonomy name, so the name scan finds it before the keyword table."""
        assert extract_emotion_from_text("The speaker sounds calm") == "Calm"

    def test_unhappy_contains_happy(self):
        """The name scan runs first, and "unhappy" contains "happy"."""
        assert extract_emotion_from_text("I am so unhappy") == "Happy"

    @pytest.mark.parametrize("text,expected", [
        ("pure joy", "Happy"),
        ("he seems upset", "Angry"),
        ("afraid of the dark", "Fearful"),
        ("totally scared", "Fearful"),
        ("she was amazed", "Surprised"),
        ("a bit worried", "Anxious"),
    ])
    def test_keyword_table(self, text, expected):
        assert extract_emotion_from_text(text) == expected

    @pytest.mark.parametrize("text", ["", None, "nothing relevant here", "mad at work"])
    def test_no_emotion_found(self, text):
        assert extract_emotion_from_text(text) is None

    def test_extractor_table_differs_from_normalizer_table(self):
        extractor_keywords = {k for keywords, _ in EXTRACTOR_RULES for k in keywords}
        normalizer_keywords = {k for keywords, _ in NORMALIZER_RULES for k in keywords}
        assert {"unhappy", "upset", "amazed"} <= extractor_keywords
        assert not {"unhappy", "upset", "amazed"} & normalizer_keywords


class TestResolveChannelLabel:

    def test_extracted_emotion_is_used(self):
        assert resolve_channel_label("The tone is mostly excited.") == "Excited"

    def test_miss_falls_back_to_normalizer_keywords(self):
        """No extractor hit for "mad at work", but the normalizer "mad" rule matches."""
        assert resolve_channel_label("mad at work") == "Angry"

    def test_miss_everywhere_is_capitalized(self):
        assert resolve_channel_label("bored") == "Bored"
