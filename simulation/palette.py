"""Colour palettes keyed by display mode."""

LIGHT_PALETTE = ("#3ECF8E", "#2563EB", "#9333EA", "#F59E0B")
DARK_PALETTE = ("#3ECF8E", "#4FD1FF", "#FF49DB", "#FFB800")

LIGHT_BACKGROUND = "#FFFFFF"
DARK_BACKGROUND = "#131313"


def palette_for(dark_mode):
    return DARK_PALETTE if dark_mode else LIGHT_PALETTE


def background_for(dark_mode):
    return DARK_BACKGROUND if dark_mode else LIGHT_BACKGROUND


def mode_name(dark_mode):
    return "dark" if dark_mode else "light"
