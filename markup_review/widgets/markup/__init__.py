"""
Markup canvas subpackage.

Provides the QPainter stroke painter shared by the live canvas and the
export compositor.
"""

from .stroke_painter import (
    create_pen,
    paint_command,
    paint_commands,
    render_commands_to_image
)

__all__ = [
    'create_pen',
    'paint_command',
    'paint_commands',
    'render_commands_to_image',
]
