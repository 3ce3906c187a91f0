# pyright: standard

"""Fluent render request builder and payload finalization."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Union

from .datatypes import (
    AccessibilityLevel,
    BarcodeConfig,
    BarcodeType,
    CustomPalette,
    DitherMethod,
    EmbedRelationship,
    EmbeddedFile,
    Flow,
    Orientation,
    OutputFormat,
    PaletteChoice,
    PalettePreset,
    PdfMode,
    PdfStandard,
    PresetPalette,
    WatermarkLayer,
    wire_token,
)

if TYPE_CHECKING:
    from .client import Client

__all__ = ["DEFAULT_FORMAT", "RenderRequest"]

DEFAULT_FORMAT = OutputFormat.PDF

# (state attribute, wire key) pairs, in emission order.
_LAYOUT_FIELDS = (
    ("width", "width"),
    ("height", "height"),
    ("paper", "paper"),
    ("orientation", "orientation"),
    ("margins", "margins"),
    ("flow", "flow"),
    ("density", "density"),
    ("background", "background"),
    ("timeout", "timeout"),
)
_METADATA_FIELDS = (
    ("pdf_title", "title"),
    ("pdf_author", "author"),
    ("pdf_subject", "subject"),
    ("pdf_keywords", "keywords"),
    ("pdf_creator", "creator"),
    ("pdf_bookmarks", "bookmarks"),
    ("pdf_page_numbers", "page_numbers"),
)
_WATERMARK_FIELDS = (
    ("watermark_text", "text"),
    ("watermark_image", "image_data"),
    ("watermark_opacity", "opacity"),
    ("watermark_rotation", "rotation"),
    ("watermark_color", "color"),
    ("watermark_font_size", "font_size"),
    ("watermark_scale", "scale"),
    ("watermark_layer", "layer"),
    ("watermark_pages", "pages"),
)
_SIGNATURE_FIELDS = (
    ("sign_certificate", "certificate_data"),
    ("sign_password", "password"),
    ("sign_name", "signer_name"),
    ("sign_reason", "reason"),
    ("sign_location", "location"),
    ("sign_timestamp_url", "timestamp_url"),
)
_ENCRYPTION_FIELDS = (
    ("user_password", "user_password"),
    ("owner_password", "owner_password"),
    ("permissions", "permissions"),
)


@dataclass
class _RenderState:
    """Accumulated builder state; ``None`` means the caller never set the field."""

    html: Optional[str] = None
    url: Optional[str] = None
    format: Optional[Union[OutputFormat, str]] = None
    width: Optional[int] = None
    height: Optional[int] = None
    paper: Optional[str] = None
    orientation: Optional[Union[Orientation, str]] = None
    margins: Optional[str] = None
    flow: Optional[Union[Flow, str]] = None
    density: Optional[float] = None
    background: Optional[str] = None
    timeout: Optional[int] = None
    colors: Optional[int] = None
    palette: Optional[PaletteChoice] = None
    dither: Optional[Union[DitherMethod, str]] = None
    pdf_title: Optional[str] = None
    pdf_author: Optional[str] = None
    pdf_subject: Optional[str] = None
    pdf_keywords: Optional[str] = None
    pdf_creator: Optional[str] = None
    pdf_bookmarks: Optional[bool] = None
    pdf_page_numbers: Optional[bool] = None
    watermark_text: Optional[str] = None
    watermark_image: Optional[str] = None
    watermark_opacity: Optional[float] = None
    watermark_rotation: Optional[float] = None
    watermark_color: Optional[str] = None
    watermark_font_size: Optional[float] = None
    watermark_scale: Optional[float] = None
    watermark_layer: Optional[Union[WatermarkLayer, str]] = None
    watermark_pages: Optional[str] = None
    pdf_standard: Optional[Union[PdfStandard, str]] = None
    embedded_files: List[EmbeddedFile] = field(default_factory=list)
    barcodes: List[BarcodeConfig] = field(default_factory=list)
    pdf_mode: Optional[Union[PdfMode, str]] = None
    sign_certificate: Optional[str] = None
    sign_password: Optional[str] = None
    sign_name: Optional[str] = None
    sign_reason: Optional[str] = None
    sign_location: Optional[str] = None
    sign_timestamp_url: Optional[str] = None
    user_password: Optional[str] = None
    owner_password: Optional[str] = None
    permissions: Optional[str] = None
    accessibility: Optional[Union[AccessibilityLevel, str]] = None
    linearize: Optional[bool] = None


def _any_set(state: _RenderState, fields: Iterable[tuple[str, str]]) -> bool:
    return any(getattr(state, attr) is not None for attr, _ in fields)


def _collect(state: _RenderState, fields: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Return the wire entries of every field in *fields* that was set."""

    out: dict[str, Any] = {}
    for attr, key in fields:
        value = getattr(state, attr)
        if value is not None:
            out[key] = wire_token(value)
    return out


def _has_quantize(state: _RenderState) -> bool:
    return state.colors is not None or state.palette is not None or state.dither is not None


def _has_watermark(state: _RenderState) -> bool:
    return _any_set(state, _WATERMARK_FIELDS)


def _has_signature(state: _RenderState) -> bool:
    return _any_set(state, _SIGNATURE_FIELDS)


def _has_encryption(state: _RenderState) -> bool:
    return _any_set(state, _ENCRYPTION_FIELDS)


def _has_pdf(state: _RenderState) -> bool:
    return (
        _any_set(state, _METADATA_FIELDS)
        or _has_watermark(state)
        or state.pdf_standard is not None
        or bool(state.embedded_files)
        or bool(state.barcodes)
        or state.pdf_mode is not None
        or _has_signature(state)
        or _has_encryption(state)
        or state.accessibility is not None
        or state.linearize is not None
    )


def _as_base64(data: Union[str, bytes]) -> str:
    """Pass base64 text through; encode raw bytes."""

    if isinstance(data, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(data)).decode("ascii")
    return data


class RenderRequest:
    """
    Accumulates render options for a single source document.

    Instances are created by :meth:`forge.client.Client.render_html` or
    :meth:`forge.client.Client.render_url`. Every setter records the value
    as explicitly set and returns ``self`` so calls can be chained in any
    order. Nothing is validated locally: enum setters also take the plain
    token string, which is sent as given, and the server reports unknown
    tokens along with range and consistency problems.

    Finalizing never mutates the builder, so a request can be sent more
    than once and each call produces an identical, independent exchange.
    Builders are not safe for concurrent mutation.
    """

    def __init__(
        self,
        client: "Client",
        *,
        html: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        self._client = client
        self._state = _RenderState(html=html, url=url)

    def __repr__(self) -> str:
        source = "html" if self._state.html is not None else "url"
        return f"RenderRequest(source={source}, format={wire_token(self._resolved_format())})"

    # -- output and layout -------------------------------------------------

    def format(self, fmt: Union[OutputFormat, str]) -> "RenderRequest":
        """Set the output format (``pdf`` when never set)."""
        self._state.format = fmt
        return self

    def width(self, px: int) -> "RenderRequest":
        """Set the viewport width in CSS pixels."""
        self._state.width = px
        return self

    def height(self, px: int) -> "RenderRequest":
        """Set the viewport height in CSS pixels."""
        self._state.height = px
        return self

    def paper(self, size: str) -> "RenderRequest":
        """Set the paper size (``a4``, ``letter``, or a custom size token)."""
        self._state.paper = size
        return self

    def orientation(self, orientation: Union[Orientation, str]) -> "RenderRequest":
        self._state.orientation = orientation
        return self

    def margins(self, margins: str) -> "RenderRequest":
        """Set page margins: a named preset or ``"T,R,B,L"`` in millimetres."""
        self._state.margins = margins
        return self

    def flow(self, flow: Union[Flow, str]) -> "RenderRequest":
        self._state.flow = flow
        return self

    def density(self, dpi: float) -> "RenderRequest":
        """Set the output DPI."""
        self._state.density = dpi
        return self

    def background(self, color: str) -> "RenderRequest":
        """Set the CSS background colour."""
        self._state.background = color
        return self

    def timeout(self, seconds: int) -> "RenderRequest":
        """Set the server-side page load timeout in seconds."""
        self._state.timeout = seconds
        return self

    # -- quantization ------------------------------------------------------

    def colors(self, count: int) -> "RenderRequest":
        """Set the number of quantization colours (2-256)."""
        self._state.colors = count
        return self

    def palette(self, preset: Union[PalettePreset, str]) -> "RenderRequest":
        """Use a built-in palette; replaces any custom palette."""
        self._state.palette = PresetPalette(preset)
        return self

    def custom_palette(self, colors: Union[str, Sequence[str]]) -> "RenderRequest":
        """Use literal hex colours; replaces any preset palette.

        A single colour string is taken as a one-entry palette.
        """
        if isinstance(colors, str):
            colors = (colors,)
        self._state.palette = CustomPalette(tuple(colors))
        return self

    def dither(self, method: Union[DitherMethod, str]) -> "RenderRequest":
        self._state.dither = method
        return self

    # -- pdf metadata ------------------------------------------------------

    def pdf_title(self, title: str) -> "RenderRequest":
        self._state.pdf_title = title
        return self

    def pdf_author(self, author: str) -> "RenderRequest":
        self._state.pdf_author = author
        return self

    def pdf_subject(self, subject: str) -> "RenderRequest":
        self._state.pdf_subject = subject
        return self

    def pdf_keywords(self, keywords: str) -> "RenderRequest":
        """Set document keywords (comma-separated)."""
        self._state.pdf_keywords = keywords
        return self

    def pdf_creator(self, creator: str) -> "RenderRequest":
        self._state.pdf_creator = creator
        return self

    def pdf_bookmarks(self, enabled: bool) -> "RenderRequest":
        """Enable or disable bookmarks generated from headings."""
        self._state.pdf_bookmarks = enabled
        return self

    def pdf_page_numbers(self, enabled: bool) -> "RenderRequest":
        """Enable or disable "Page X of Y" footers."""
        self._state.pdf_page_numbers = enabled
        return self

    # -- watermark ---------------------------------------------------------

    def pdf_watermark_text(self, text: str) -> "RenderRequest":
        self._state.watermark_text = text
        return self

    def pdf_watermark_image(self, data: Union[str, bytes]) -> "RenderRequest":
        """Set the watermark image as base64 text or raw PNG/JPEG bytes."""
        self._state.watermark_image = _as_base64(data)
        return self

    def pdf_watermark_opacity(self, opacity: float) -> "RenderRequest":
        """Set watermark opacity, 0.0-1.0 (server default 0.15)."""
        self._state.watermark_opacity = opacity
        return self

    def pdf_watermark_rotation(self, degrees: float) -> "RenderRequest":
        self._state.watermark_rotation = degrees
        return self

    def pdf_watermark_color(self, hex_color: str) -> "RenderRequest":
        self._state.watermark_color = hex_color
        return self

    def pdf_watermark_font_size(self, size: float) -> "RenderRequest":
        """Set the watermark font size in PDF points."""
        self._state.watermark_font_size = size
        return self

    def pdf_watermark_scale(self, scale: float) -> "RenderRequest":
        """Set the watermark image scale, 0.0-1.0."""
        self._state.watermark_scale = scale
        return self

    def pdf_watermark_layer(self, layer: Union[WatermarkLayer, str]) -> "RenderRequest":
        self._state.watermark_layer = layer
        return self

    def pdf_watermark_pages(self, pages: str) -> "RenderRequest":
        """Limit the watermark to a page range such as ``"1,3-5"``."""
        self._state.watermark_pages = pages
        return self

    # -- standards, attachments, barcodes ----------------------------------

    def pdf_standard(self, standard: Union[PdfStandard, str]) -> "RenderRequest":
        self._state.pdf_standard = standard
        return self

    def pdf_attach(
        self,
        path: str,
        data: Union[str, bytes],
        *,
        mime_type: str = "",
        description: str = "",
        relationship: Optional[Union[EmbedRelationship, str]] = None,
    ) -> "RenderRequest":
        """Append an embedded file; *data* is base64 text or raw bytes."""
        return self.pdf_attach_file(
            EmbeddedFile(
                path=path,
                data=_as_base64(data),
                mime_type=mime_type,
                description=description,
                relationship=relationship or None,
            )
        )

    def pdf_attach_file(self, embedded: EmbeddedFile) -> "RenderRequest":
        """Append a fully described embedded file."""
        self._state.embedded_files.append(embedded)
        return self

    def pdf_barcode(self, barcode_type: Union[BarcodeType, str], data: str) -> "RenderRequest":
        """Append a barcode using server defaults for placement and colours."""
        return self.pdf_barcode_with(BarcodeConfig(type=barcode_type, data=data))

    def pdf_barcode_with(self, config: BarcodeConfig) -> "RenderRequest":
        """Append a fully configured barcode."""
        self._state.barcodes.append(config)
        return self

    def pdf_mode(self, mode: Union[PdfMode, str]) -> "RenderRequest":
        self._state.pdf_mode = mode
        return self

    # -- signing -----------------------------------------------------------

    def pdf_sign_certificate(self, data: Union[str, bytes]) -> "RenderRequest":
        """Set the PKCS#12 signing certificate as base64 text or raw bytes."""
        self._state.sign_certificate = _as_base64(data)
        return self

    def pdf_sign_password(self, password: str) -> "RenderRequest":
        self._state.sign_password = password
        return self

    def pdf_sign_name(self, name: str) -> "RenderRequest":
        self._state.sign_name = name
        return self

    def pdf_sign_reason(self, reason: str) -> "RenderRequest":
        self._state.sign_reason = reason
        return self

    def pdf_sign_location(self, location: str) -> "RenderRequest":
        self._state.sign_location = location
        return self

    def pdf_sign_timestamp_url(self, url: str) -> "RenderRequest":
        """Set the RFC 3161 timestamp authority URL."""
        self._state.sign_timestamp_url = url
        return self

    # -- encryption and output tweaks --------------------------------------

    def pdf_user_password(self, password: str) -> "RenderRequest":
        """Password required to open the document."""
        self._state.user_password = password
        return self

    def pdf_owner_password(self, password: str) -> "RenderRequest":
        """Password required to change permissions."""
        self._state.owner_password = password
        return self

    def pdf_permissions(self, permissions: str) -> "RenderRequest":
        """Set permission flags, comma-separated (e.g. ``"print,copy"``)."""
        self._state.permissions = permissions
        return self

    def pdf_accessibility(self, level: Union[AccessibilityLevel, str]) -> "RenderRequest":
        self._state.accessibility = level
        return self

    def pdf_linearize(self, enabled: bool) -> "RenderRequest":
        """Enable or disable linearization (fast web view)."""
        self._state.linearize = enabled
        return self

    # -- finalize ----------------------------------------------------------

    def _resolved_format(self) -> Union[OutputFormat, str]:
        return self._state.format if self._state.format is not None else DEFAULT_FORMAT

    def build_payload(self) -> dict[str, Any]:
        """
        Finalize the accumulated options into the JSON request body.

        Nested groups appear only when at least one member was set, and
        carry only the members that were set. ``format`` is the single
        field defaulted here.
        """

        state = self._state
        payload: dict[str, Any] = {}
        if state.html is not None:
            payload["html"] = state.html
        if state.url is not None:
            payload["url"] = state.url
        payload["format"] = wire_token(self._resolved_format())
        payload.update(_collect(state, _LAYOUT_FIELDS))

        if _has_quantize(state):
            quantize: dict[str, Any] = {}
            if state.colors is not None:
                quantize["colors"] = state.colors
            if state.palette is not None:
                quantize["palette"] = state.palette.to_wire()
            if state.dither is not None:
                quantize["dither"] = wire_token(state.dither)
            payload["quantize"] = quantize

        if _has_pdf(state):
            payload["pdf"] = self._build_pdf_group()
        return payload

    def _build_pdf_group(self) -> dict[str, Any]:
        state = self._state
        pdf = _collect(state, _METADATA_FIELDS)
        if _has_watermark(state):
            pdf["watermark"] = _collect(state, _WATERMARK_FIELDS)
        if state.pdf_standard is not None:
            pdf["standard"] = wire_token(state.pdf_standard)
        if state.embedded_files:
            pdf["embedded_files"] = [entry.to_wire() for entry in state.embedded_files]
        if state.barcodes:
            pdf["barcodes"] = [entry.to_wire() for entry in state.barcodes]
        if state.pdf_mode is not None:
            pdf["mode"] = wire_token(state.pdf_mode)
        if _has_signature(state):
            pdf["signature"] = _collect(state, _SIGNATURE_FIELDS)
        if _has_encryption(state):
            pdf["encryption"] = _collect(state, _ENCRYPTION_FIELDS)
        if state.accessibility is not None:
            pdf["accessibility"] = wire_token(state.accessibility)
        if state.linearize is not None:
            pdf["linearize"] = state.linearize
        return pdf

    # -- terminal operations -----------------------------------------------

    def send(self, *, timeout: Optional[float] = None) -> bytes:
        """
        Render the request and return the raw output bytes.

        Parameters:
            timeout (float | None): Deadline in seconds for this exchange,
                overriding the client's HTTP timeout.

        Raises:
            ForgeConnectionError: If the server could not be reached or the
                deadline expired before a response arrived.
            ForgeServerError: If the server answered with a non-200 status.
        """

        return self._client.send(self.build_payload(), timeout=timeout)

    def save(self, path: Union[str, Path], *, timeout: Optional[float] = None) -> Path:
        """Render the request and write the output to *path*."""

        data = self.send(timeout=timeout)
        target = Path(path)
        target.write_bytes(data)
        return target
