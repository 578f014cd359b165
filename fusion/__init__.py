"""
Fusion package for multimodal emotion fusion.

This package provides:
- Normalizer: Maps free-form emotion labels onto the standard taxonomy
- Facial aggregator: Stabilizes facial detections over several frames
- Fusion logic: Weighted and majority voting across facial, voice and text
- Formatter: Human-readable summary of a fused result
- Orchestrator: Coordinates one user turn
- Model clients: HTTP clients for the voice/text classifier services
- API endpoints: POST /emotion/fuse, POST /emotion/analyze, GET /emotion/health
"""

from . import models
from . import normalizer
from . import facial_aggregator
from . import fusion_logic
from . import formatter
from . import model_clients
from . import orchestrator
from . import api

__all__ = [
    'models',
    'normalizer',
    'facial_aggregator',
    'fusion_logic',
    'formatter',
    'model_clients',
    'orchestrator',
    'api'
]
