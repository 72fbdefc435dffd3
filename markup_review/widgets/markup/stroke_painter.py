"""
Stroke painter for draw commands.

Paints DrawCommand lists with QPainter. Used by the live canvas and by the
offline overlay rasterizer, so both produce the same strokes.
"""

from typing import Iterable

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QColor, QImage, QPainter, QPainterPath, QPen

from ...core.draw_commands import DrawCommand, DrawOp


def create_pen(color: str, width: float) -> QPen:
    """Round-capped pen shared by every stroke."""
    pen = QPen(QColor(color), width)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    return pen


def paint_command(painter: QPainter, command: DrawCommand):
    """Paint a single draw command."""
    painter.setPen(create_pen(command.color, command.width))
    painter.setBrush(Qt.BrushStyle.NoBrush)

    if command.op == DrawOp.PATH:
        path = QPainterPath()
        for subpath in command.subpaths:
            if len(subpath) < 2:
                continue
            path.moveTo(QPointF(*subpath[0]))
            for point in subpath[1:]:
                path.lineTo(QPointF(*point))
        painter.drawPath(path)

    elif command.op == DrawOp.RECT:
        painter.drawRect(QRectF(*command.rect))

    elif command.op == DrawOp.CIRCLE:
        painter.drawEllipse(QPointF(*command.center), command.radius, command.radius)


def paint_commands(painter: QPainter, commands: Iterable[DrawCommand]):
    """Paint commands in order with antialiasing."""
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    for command in commands:
        paint_command(painter, command)


def render_commands_to_image(commands: Iterable[DrawCommand], width: int, height: int) -> QImage:
    """
    Rasterize commands onto a transparent image.

    Args:
        commands: Commands in image coordinates
        width: Image width
        height: Image height

    Returns:
        ARGB32 image, transparent where nothing was drawn
    """
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(QColor(0, 0, 0, 0))

    painter = QPainter(image)
    try:
        paint_commands(painter, commands)
    finally:
        painter.end()
    return image


__all__ = [
    'create_pen',
    'paint_command',
    'paint_commands',
    'render_commands_to_image',
]
