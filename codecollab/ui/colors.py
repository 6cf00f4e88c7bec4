# codecollab/ui/colors.py
"""
codecollab — terminal color palette
ANSI color codes used by the CLI renderer.
"""

import os
import sys

# ═══════════════════════════════════════════════════════════════
# PALETTE
# ═══════════════════════════════════════════════════════════════

NEON_PURPLE = "\033[38;5;165m"
BRIGHT_MAGENTA = "\033[38;5;201m"
ELECTRIC_CYAN = "\033[38;5;51m"
DEEP_CYAN = "\033[38;5;39m"
MID_GRAY = "\033[38;5;250m"
DARK_GRAY = "\033[38;5;240m"
GLITCH_RED = "\033[38;5;196m"
GLITCH_GREEN = "\033[38;5;46m"
NEON_YELLOW = "\033[38;5;226m"

BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"

# ═══════════════════════════════════════════════════════════════
# SEMANTIC COLOR ROLES
# ═══════════════════════════════════════════════════════════════

PRIMARY_FG = NEON_PURPLE          # Brand / prompt marker
ACCENT_FG = ELECTRIC_CYAN         # Summaries
MUTED_FG = MID_GRAY               # Paths / secondary text
ERROR_FG = GLITCH_RED             # Errors
SUCCESS_FG = GLITCH_GREEN         # Applied actions
WARNING_FG = NEON_YELLOW          # Skipped actions

CHAT_LABEL_USER = f"{BOLD}{ELECTRIC_CYAN}"
CHAT_LABEL_AI = f"{BOLD}{BRIGHT_MAGENTA}"


def colors_enabled(stream=None) -> bool:
    """Respect NO_COLOR and only color real terminals."""
    if os.environ.get("NO_COLOR"):
        return False
    stream = stream or sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


def colorize(text: str, color: str, style: str = "", enabled: bool = True) -> str:
    """Apply color and optional style to text"""
    if not enabled:
        return text
    return f"{style}{color}{text}{RESET}"
