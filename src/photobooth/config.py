"""
Photobooth Configuration
========================

This module handles configuration loading for the photobooth service.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    PHOTOBOOTH_CANVAS_WIDTH    -> canvas.width
    PHOTOBOOTH_CANVAS_HEIGHT   -> canvas.height
    PHOTOBOOTH_CAMERA_BACKEND  -> camera.backend
    PHOTOBOOTH_CAMERA_DEVICE   -> camera.device
    PHOTOBOOTH_FACING_MODE     -> camera.facing_mode
    PHOTOBOOTH_FRAMES_DIR      -> frames.directory
    PHOTOBOOTH_EXPORT_QUALITY  -> export.quality
    PHOTOBOOTH_GATEWAY_URL     -> delivery.gateway_url
    PHOTOBOOTH_LOG_LEVEL       -> logging.level
    PHOTOBOOTH_PORT            -> server.port
    PORT                       -> server.port (container platforms)

Example:
    from photobooth.config import settings

    print(settings.canvas.width, settings.canvas.height)
    print(settings.export.mime_type)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="photobooth", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class CanvasConfig(BaseModel):
    """
    Output canvas configuration.

    Fixed for the lifetime of a session. Changing it mid-session
    invalidates any retained fit calculations.
    """

    width: int = Field(default=1396, ge=1, description="Canvas width in pixels")
    height: int = Field(default=1006, ge=1, description="Canvas height in pixels")
    background: List[int] = Field(
        default_factory=lambda: [0, 0, 0],
        description="Opaque RGB background fill",
    )

    @field_validator("background")
    @classmethod
    def _check_background(cls, value: List[int]) -> List[int]:
        if len(value) != 3 or any(not 0 <= v <= 255 for v in value):
            raise ValueError("background must be three values in [0, 255]")
        return value


class CameraConfig(BaseModel):
    """Camera feed binding configuration."""

    backend: str = Field(
        default="opencv",
        description="Feed backend: 'opencv' or 'none'",
    )
    device: int = Field(default=0, ge=0, description="OpenCV device index")
    environment_device: Optional[int] = Field(
        default=None,
        ge=0,
        description="Device index for the environment-facing camera, if separate",
    )
    ideal_width: int = Field(default=1280, ge=1, description="Requested capture width")
    ideal_height: int = Field(default=720, ge=1, description="Requested capture height")
    facing_mode: str = Field(
        default="user",
        description="Initial facing mode: 'user' or 'environment'",
    )
    mirrored_modes: List[str] = Field(
        default_factory=lambda: ["user"],
        description="Facing modes whose frames arrive mirror-reversed",
    )


class FramesConfig(BaseModel):
    """Frame catalog configuration."""

    directory: str = Field(
        default="./public/frames",
        description="Directory holding index.json and frame images",
    )


class ExportConfig(BaseModel):
    """Encoded export defaults."""

    mime_type: str = Field(default="image/jpeg", description="Export format")
    quality: float = Field(
        default=0.9,
        ge=0.0,
        le=1.0,
        description="Lossy quality factor in [0, 1]",
    )


class DeliveryConfig(BaseModel):
    """Image sender (messaging gateway) configuration."""

    gateway_url: Optional[str] = Field(
        default=None,
        description="Gateway send endpoint; None disables sending",
    )
    timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP timeout")
    default_message: str = Field(
        default="Thank you for using the photobooth!",
        description="Message appended to every caption",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the photobooth service.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    frames: FramesConfig = Field(default_factory=FramesConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Canvas
    if env_width := os.environ.get("PHOTOBOOTH_CANVAS_WIDTH"):
        config_data.setdefault("canvas", {})["width"] = int(env_width)
    if env_height := os.environ.get("PHOTOBOOTH_CANVAS_HEIGHT"):
        config_data.setdefault("canvas", {})["height"] = int(env_height)

    # Camera
    if env_backend := os.environ.get("PHOTOBOOTH_CAMERA_BACKEND"):
        config_data.setdefault("camera", {})["backend"] = env_backend
    if env_device := os.environ.get("PHOTOBOOTH_CAMERA_DEVICE"):
        config_data.setdefault("camera", {})["device"] = int(env_device)
    if env_facing := os.environ.get("PHOTOBOOTH_FACING_MODE"):
        config_data.setdefault("camera", {})["facing_mode"] = env_facing

    # Frames
    if env_frames := os.environ.get("PHOTOBOOTH_FRAMES_DIR"):
        config_data.setdefault("frames", {})["directory"] = env_frames

    # Export
    if env_quality := os.environ.get("PHOTOBOOTH_EXPORT_QUALITY"):
        config_data.setdefault("export", {})["quality"] = float(env_quality)

    # Delivery
    if env_gateway := os.environ.get("PHOTOBOOTH_GATEWAY_URL"):
        config_data.setdefault("delivery", {})["gateway_url"] = env_gateway

    # Server settings (container platforms use PORT)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("PHOTOBOOTH_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging
    if env_log := os.environ.get("PHOTOBOOTH_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
