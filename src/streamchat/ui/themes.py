"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Tokyo Night inspired dark theme
STREAMCHAT_NIGHT = Theme(
    name="streamchat-night",
    primary="#7aa2f7",      # Blue - main accent
    secondary="#bb9af7",    # Purple - assistant messages
    accent="#e0af68",       # Amber - reasoning and highlights
    foreground="#c0caf5",   # Light text
    background="#16161e",   # Deepest background
    success="#9ece6a",      # Green - user messages, send
    warning="#ff9e64",      # Orange - streaming state
    error="#f7768e",        # Red - errors
    surface="#1a1b26",      # Main surface
    panel="#1f2335",        # Panel backgrounds
    dark=True,
    variables={
        "block-cursor-foreground": "#16161e",
        "block-cursor-background": "#c0caf5",
        "block-cursor-text-style": "bold",
        "input-cursor-background": "#c0caf5",
        "input-cursor-foreground": "#16161e",
        "input-selection-background": "#7aa2f7 30%",
        "border": "#3b4261",
        "border-blurred": "#292e42",
        "scrollbar": "#292e42",
        "scrollbar-hover": "#3b4261",
        "scrollbar-active": "#7aa2f7",
        "scrollbar-background": "#1f2335",
        "footer-foreground": "#a9b1d6",
        "footer-background": "#16161e",
        "footer-key-foreground": "#e0af68",
        "footer-key-background": "#292e42",
        "text-muted": "#565f89",
        "text-disabled": "#3b4261",
    },
)
