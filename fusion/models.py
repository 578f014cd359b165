"""
Pydantic Models for Fusion Service

This module defines the emotion taxonomy, the per-channel inputs and fused
outputs of the fusion engine, and the request/response models of the API.
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, Dict, Literal


class StandardEmotion(str, Enum):
    """Fixed, ordered emotion taxonomy."""
    HAPPY = "Happy"
    SAD = "Sad"
    ANGRY = "Angry"
    FEARFUL = "Fearful"
    SURPRISED = "Surprised"
    DISGUSTED = "Disgusted"
    NEUTRAL = "Neutral"
    ANXIOUS = "Anxious"
    EXCITED = "Excited"
    CALM = "Calm"
    FRUSTRATED = "Frustrated"
    CONFUSED = "Confused"


# Canonical label strings in taxonomy order
STANDARD_EMOTIONS = [emotion.value for emotion in StandardEmotion]


class FusionStrategy(str, Enum):
    """Available fusion strategies."""
    WEIGHTED = "weighted"
    MAJORITY = "majority"


class EmotionScore(BaseModel):
    """A single (emotion, confidence) pair."""
    emotion: str
    confidence: float = Field(ge=0.0, le=1.0, description="Confidence score between 0.0 and 1.0")


# One facial-detector invocation during multi-frame aggregation
FrameSample = EmotionScore


class MultiModalEmotionInput(BaseModel):
    """Per-channel inputs for one interaction. Any subset may be absent."""
    facial_emotion: Optional[EmotionScore] = Field(default=None, description="Dominant facial emotion with confidence")
    voice_emotion: Optional[str] = Field(default=None, description="Raw voice-tone classifier output")
    text_emotion: Optional[str] = Field(default=None, description="Raw text-sentiment classifier output")


class FusedEmotionResult(BaseModel):
    """Consensus emotion with per-channel breakdown."""
    final_emotion: str
    confidence: float
    breakdown: Dict[str, str] = Field(default_factory=dict, description="Normalized label per present channel")
    fusion_method: Literal["weighted-voting", "majority-voting"]
    scores: Dict[str, float] = Field(default_factory=dict, description="Accumulated score per emotion, highest first")


class FacialAggregate(BaseModel):
    """Stable facial estimate built from several frames."""
    emotion: str
    confidence: float
    all_emotions: Dict[str, float] = Field(default_factory=dict, description="Average confidence per observed raw label")
    frames_requested: int
    frames_detected: int
    cancelled: bool = False


class FuseRequest(MultiModalEmotionInput):
    """Request model for the fuse endpoint."""
    strategy: Optional[FusionStrategy] = Field(default=None, description="Override the configured fusion strategy")


class FuseResponse(BaseModel):
    """Response model for the fuse endpoint."""
    result: FusedEmotionResult
    summary: str


class AnalyzeRequest(BaseModel):
    """Request model for the analyze endpoint."""
    text: Optional[str] = Field(default=None, description="Text input from the user")
    audio_data_uri: Optional[str] = Field(default=None, description="Base64 data URI of the user's voice recording")
    facial_emotion: Optional[EmotionScore] = Field(default=None, description="Facial emotion detected on the client")
    strategy: Optional[FusionStrategy] = None


class InteractionResult(BaseModel):
    """Outcome of one user turn: raw channel outputs, fused result and summary."""
    facial_emotion: Optional[EmotionScore] = None
    voice_emotion: Optional[str] = None
    text_emotion: Optional[str] = None
    facial_aggregate: Optional[FacialAggregate] = None
    fused: FusedEmotionResult
    summary: str
