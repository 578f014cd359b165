"""
Formatting of fused emotion results for display.
"""

from fusion.models import FusedEmotionResult

# Display order and captions of breakdown entries
BREAKDOWN_LABELS = [
    ("facial", "Face"),
    ("voice", "Voice"),
    ("text", "Text")
]


def format_emotion_result(result: FusedEmotionResult) -> str:
    """Render e.g. "Happy (Face: Happy, Text: Neutral)"; only present channels are listed."""
    parts = [
        f"{caption}: {result.breakdown[channel]}"
        for channel, caption in BREAKDOWN_LABELS
        if result.breakdown.get(channel)
    ]
    if not parts:
        return result.final_emotion
    return f"{result.final_emotion} ({', '.join(parts)})"
