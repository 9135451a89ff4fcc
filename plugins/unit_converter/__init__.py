"""Unit converter plugin."""

manifest = {
    "title": "Unit Converter",
    "summary": "Live conversions across length, mass, temperature, volume, area, time and custom units, with swap and recent history.",
    "blueprint": "unit_converter",
    "category": "General Utilities",
    "icon": "img/UnitConverter_icon.png",
}


__all__ = ["manifest"]
