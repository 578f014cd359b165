"""
API Layer for Fusion Service

This module provides FastAPI endpoints for the emotion fusion service.
"""

import logging
from fastapi import APIRouter, HTTPException

from fusion.formatter import format_emotion_result
from fusion.fusion_logic import DEFAULT_STRATEGY, fuse_emotions
from fusion.models import (
    AnalyzeRequest,
    FuseRequest,
    FuseResponse,
    FusionStrategy,
    InteractionResult,
    MultiModalEmotionInput,
    STANDARD_EMOTIONS
)
from fusion.orchestrator import process_analyze_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/emotion", tags=["emotion"])


@router.post("/fuse", response_model=FuseResponse)
async def emotion_fuse(request: FuseRequest):
    """
    Fuse already-classified facial, voice and text channels.

    Args:
        request: FuseRequest with any subset of the three channels and an optional strategy

    Returns:
        FuseResponse with the fused result and its display summary
    """
    logger.info("POST /emotion/fuse - Endpoint called")

    try:
        emotion_input = MultiModalEmotionInput(
            facial_emotion=request.facial_emotion,
            voice_emotion=request.voice_emotion,
            text_emotion=request.text_emotion
        )
        result = fuse_emotions(emotion_input, request.strategy)
        summary = format_emotion_result(result)

        logger.info(f"POST /emotion/fuse - {summary} (confidence: {result.confidence:.3f})")
        return FuseResponse(result=result, summary=summary)

    except ValueError as e:
        logger.error(f"POST /emotion/fuse - Validation error: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"POST /emotion/fuse - Exception: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/analyze", response_model=InteractionResult)
async def emotion_analyze(request: AnalyzeRequest):
    """
    Classify voice and text with the classifier services, then fuse with the facial channel.

    This endpoint:
    1. Calls the voice-tone classifier when audio is provided
    2. Calls the text-sentiment classifier when text is provided
    3. Omits any channel whose classifier failed
    4. Fuses the remaining channels and returns the summary

    Args:
        request: AnalyzeRequest with optional text, audio and client-side facial emotion

    Returns:
        InteractionResult with per-channel outputs, fused result and summary
    """
    logger.info("POST /emotion/analyze - Endpoint called")

    try:
        result = await process_analyze_request(request)
        logger.info(f"POST /emotion/analyze - Successfully processed: {result.summary}")
        return result

    except ValueError as e:
        logger.error(f"POST /emotion/analyze - Validation error: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"POST /emotion/analyze - Exception: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/health")
async def health():
    """Health check endpoint for fusion service."""
    logger.info("GET /emotion/health - Health check called")
    return {
        "status": "healthy",
        "service": "fusion",
        "default_strategy": DEFAULT_STRATEGY,
        "strategies": [strategy.value for strategy in FusionStrategy],
        "emotions": STANDARD_EMOTIONS
    }
