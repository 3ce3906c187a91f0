"""Option enums and value objects accepted by the render request builder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Union

__all__ = [
    "AccessibilityLevel",
    "BarcodeAnchor",
    "BarcodeConfig",
    "BarcodeType",
    "CustomPalette",
    "DitherMethod",
    "EmbedRelationship",
    "EmbeddedFile",
    "Flow",
    "Orientation",
    "OutputFormat",
    "PaletteChoice",
    "PalettePreset",
    "PdfMode",
    "PdfStandard",
    "PresetPalette",
    "WatermarkLayer",
]


class OutputFormat(str, Enum):
    """Rendered output formats understood by the server."""

    PDF = "pdf"
    PNG = "png"
    JPEG = "jpeg"
    BMP = "bmp"
    TGA = "tga"
    QOI = "qoi"
    SVG = "svg"


class Orientation(str, Enum):
    """Page orientation."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class Flow(str, Enum):
    """Document flow mode."""

    AUTO = "auto"
    PAGINATE = "paginate"
    CONTINUOUS = "continuous"


class DitherMethod(str, Enum):
    """Dithering algorithms applied during colour quantization."""

    NONE = "none"
    FLOYD_STEINBERG = "floyd-steinberg"
    ATKINSON = "atkinson"
    ORDERED = "ordered"


class PalettePreset(str, Enum):
    """Built-in quantization palettes."""

    AUTO = "auto"
    BLACK_WHITE = "bw"
    GRAYSCALE = "grayscale"
    EINK = "eink"


class WatermarkLayer(str, Enum):
    """Whether the watermark is drawn above or below page content."""

    OVER = "over"
    UNDER = "under"


class PdfStandard(str, Enum):
    """PDF standard compliance levels."""

    NONE = "none"
    PDF_A_2B = "pdf/a-2b"
    PDF_A_3B = "pdf/a-3b"


class PdfMode(str, Enum):
    """PDF rendering mode."""

    AUTO = "auto"
    VECTOR = "vector"
    RASTER = "raster"


class AccessibilityLevel(str, Enum):
    """PDF accessibility compliance levels."""

    NONE = "none"
    BASIC = "basic"
    PDF_UA_1 = "pdf/ua-1"


class EmbedRelationship(str, Enum):
    """Associated-file relationship of an embedded attachment (PDF/A-3)."""

    SOURCE = "source"
    DATA = "data"
    ALTERNATIVE = "alternative"
    SUPPLEMENT = "supplement"
    UNSPECIFIED = "unspecified"


class BarcodeType(str, Enum):
    """Barcode symbologies the server can stamp onto pages."""

    QR = "qr"
    CODE128 = "code128"
    EAN13 = "ean13"
    UPCA = "upca"
    CODE39 = "code39"


class BarcodeAnchor(str, Enum):
    """Page corner that barcode coordinates are measured from."""

    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


@dataclass(frozen=True)
class PresetPalette:
    """Palette slot holding a built-in preset; serialized as its token."""

    preset: Union[PalettePreset, str]

    def to_wire(self) -> str:
        return wire_token(self.preset)


@dataclass(frozen=True)
class CustomPalette:
    """Palette slot holding literal hex colours; serialized as a list."""

    colors: tuple[str, ...] = ()

    def to_wire(self) -> List[str]:
        return list(self.colors)


PaletteChoice = Union[PresetPalette, CustomPalette]


def wire_token(value: Any) -> Any:
    """Return the wire form of an option: an enum member's value, anything else as is."""

    if isinstance(value, Enum):
        return value.value
    return value


_BARCODE_OPTIONAL_FIELDS = (
    "x",
    "y",
    "width",
    "height",
    "anchor",
    "foreground",
    "background",
    "draw_background",
    "pages",
)


@dataclass
class EmbeddedFile:
    """
    A file attached to the output PDF.

    ``data`` is base64-encoded. Empty ``mime_type``, ``description`` and
    ``relationship`` values are left out of the request.
    """

    path: str
    data: str
    mime_type: str = ""
    description: str = ""
    relationship: Optional[Union[EmbedRelationship, str]] = None

    def to_wire(self) -> dict[str, object]:
        entry: dict[str, object] = {"path": self.path, "data": self.data}
        if self.mime_type:
            entry["mime_type"] = self.mime_type
        if self.description:
            entry["description"] = self.description
        if self.relationship:
            entry["relationship"] = wire_token(self.relationship)
        return entry


@dataclass
class BarcodeConfig:
    """
    A barcode stamped onto the output PDF.

    Optional members left as ``None`` are omitted from the request and fall
    back to server defaults. ``type`` and ``anchor`` take an enum member or
    its plain token string.
    """

    type: Union[BarcodeType, str]
    data: str
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    anchor: Optional[Union[BarcodeAnchor, str]] = None
    foreground: Optional[str] = None
    background: Optional[str] = None
    draw_background: Optional[bool] = None
    pages: Optional[str] = None

    def to_wire(self) -> dict[str, object]:
        entry: dict[str, object] = {
            "type": wire_token(self.type),
            "data": self.data,
        }
        for name in _BARCODE_OPTIONAL_FIELDS:
            value = getattr(self, name)
            if value is not None:
                entry[name] = wire_token(value)
        return entry
