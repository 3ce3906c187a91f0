"""Client for the Forge rendering engine.

Forge converts HTML/CSS to PDF, PNG and other formats over an HTTP API.
"""

from __future__ import annotations

from .client import DEFAULT_TIMEOUT, Client
from .config import ClientConfig, ConfigError, load_config
from .datatypes import (
    AccessibilityLevel,
    BarcodeAnchor,
    BarcodeConfig,
    BarcodeType,
    CustomPalette,
    DitherMethod,
    EmbedRelationship,
    EmbeddedFile,
    Flow,
    Orientation,
    OutputFormat,
    PalettePreset,
    PdfMode,
    PdfStandard,
    PresetPalette,
    WatermarkLayer,
)
from .errors import ForgeConnectionError, ForgeError, ForgeServerError
from .request import RenderRequest

__all__ = [
    "AccessibilityLevel",
    "BarcodeAnchor",
    "BarcodeConfig",
    "BarcodeType",
    "Client",
    "ClientConfig",
    "ConfigError",
    "CustomPalette",
    "DEFAULT_TIMEOUT",
    "DitherMethod",
    "EmbedRelationship",
    "EmbeddedFile",
    "Flow",
    "ForgeConnectionError",
    "ForgeError",
    "ForgeServerError",
    "Orientation",
    "OutputFormat",
    "PalettePreset",
    "PdfMode",
    "PdfStandard",
    "PresetPalette",
    "RenderRequest",
    "WatermarkLayer",
    "load_config",
]
