"""
FastAPI Main Application

This script mounts the emotion fusion routes and runs the FastAPI server.
"""

import os
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
import uvicorn

from fusion import api as fusion_api

# Load environment variables
load_dotenv()

# Setup logging with timestamps
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title="Emotion Fusion API",
    description="Multimodal emotion fusion for facial, voice and text channels",
    version="1.0.0"
)

app.include_router(fusion_api.router)


@app.get("/")
async def root():
    """Root endpoint."""
    logger.info("GET / - Root endpoint called")
    return {"message": "Emotion Fusion API is running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    logger.info("GET /health - Health check endpoint called")
    return {"status": "healthy"}


if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting Emotion Fusion API on {host}:{port}")
    uvicorn.run(app, host=host, port=port)
