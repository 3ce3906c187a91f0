from __future__ import annotations

import forge

EXPECTED_EXPORTS = (
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
)


def test_public_surface_matches_curated_exports() -> None:
    assert hasattr(forge, "__all__")
    assert tuple(forge.__all__) == EXPECTED_EXPORTS


def test_curated_exports_are_available_without_privates() -> None:
    for name in EXPECTED_EXPORTS:
        assert hasattr(forge, name), f"{name} missing from module globals"
    assert all(not name.startswith("_") for name in forge.__all__)


def test_factories_return_render_requests() -> None:
    with forge.Client("http://localhost:3000") as client:
        assert isinstance(client.render_html("<p>x</p>"), forge.RenderRequest)
        assert isinstance(client.render_url("https://example.com"), forge.RenderRequest)
