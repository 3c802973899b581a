"""Colour tokens shared by every payload that carries display hints."""

COLORS = {
    "primary": {"light": "#42a5f5", "main": "#1976d2", "dark": "#1565c0"},
    "secondary": {"light": "#ba68c8", "main": "#9c27b0", "dark": "#7b1fa2"},
    "success": {"light": "#81c784", "main": "#4caf50", "dark": "#388e3c"},
    "warning": {"light": "#ffd54f", "main": "#ff9800", "dark": "#f57c00"},
    "error": {"light": "#e57373", "main": "#f44336", "dark": "#d32f2f"},
    "info": {"light": "#64b5f6", "main": "#2196f3", "dark": "#1976d2"},
    "grey": {
        "50": "#fafafa",
        "100": "#f5f5f5",
        "300": "#e0e0e0",
        "500": "#9e9e9e",
        "700": "#616161",
        "900": "#212121",
    },
    "background": {"default": "#f8fafc", "paper": "#ffffff"},
}

TYPOGRAPHY = {
    "fontFamily": '"Inter", "Roboto", "Helvetica", "Arial", sans-serif',
    "fontWeightRegular": 400,
    "fontWeightMedium": 500,
    "fontWeightBold": 600,
}

SHAPE = {"borderRadius": 8}


def palette_color(name: str, shade: str = "main") -> str:
    """Resolve ``name`` (``"info"``, ``"grey.500"``) to a hex colour, grey 500 when unknown."""
    if "." in name:
        name, shade = name.split(".", 1)
    group = COLORS.get(name)
    if not group or shade not in group:
        return COLORS["grey"]["500"]
    return group[shade]


def get_theme():
    return {"palette": COLORS, "typography": TYPOGRAPHY, "shape": SHAPE}
