"""
Coordinate conversion utilities for the markup canvas.

Maps between image space (the source image's natural pixels) and display
space (the on-screen, possibly scaled rendering of the image).
"""

from typing import Optional, Tuple


class CoordinateMapper:
    """
    Handles conversion between display coordinates and image coordinates.

    Image-space coordinates are canonical and persisted. Display coordinates
    depend on how large the image is currently drawn, so the display rect
    must be updated whenever the displayed image is loaded, resized or
    reflowed.
    """

    def __init__(self, natural_size: Tuple[float, float] = (0, 0),
                 display_rect: Optional[Tuple[float, float, float, float]] = None):
        self._natural_width = float(natural_size[0])
        self._natural_height = float(natural_size[1])
        self._display_rect: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
        if display_rect is not None:
            self.set_display_rect(*display_rect)
        else:
            self.set_display_rect(0, 0, self._natural_width, self._natural_height)

    @classmethod
    def identity(cls, width: float, height: float) -> "CoordinateMapper":
        """Mapper where display space equals image space (export)."""
        return cls((width, height), (0, 0, width, height))

    # ==================== Configuration ====================

    def set_natural_size(self, width: float, height: float):
        """Set the image's natural pixel dimensions."""
        self._natural_width = float(width)
        self._natural_height = float(height)

    def set_display_rect(self, x: float, y: float, width: float, height: float):
        """
        Set where the image is drawn on the surface.

        Args:
            x: Left offset of the drawn image within the surface
            y: Top offset of the drawn image within the surface
            width: Rendered width
            height: Rendered height
        """
        self._display_rect = (float(x), float(y), float(width), float(height))

    def set_display_size(self, width: float, height: float):
        """Set the rendered size for a surface that exactly covers the image."""
        self.set_display_rect(0, 0, width, height)

    @property
    def natural_size(self) -> Tuple[float, float]:
        return (self._natural_width, self._natural_height)

    @property
    def display_rect(self) -> Tuple[float, float, float, float]:
        return self._display_rect

    @property
    def is_valid(self) -> bool:
        """True when both sizes are non-empty."""
        return (
            self._natural_width > 0 and self._natural_height > 0 and
            self._display_rect[2] > 0 and self._display_rect[3] > 0
        )

    @property
    def scale_x(self) -> float:
        """Display pixels per image pixel, horizontally."""
        if self._natural_width <= 0:
            return 1.0
        return self._display_rect[2] / self._natural_width

    @property
    def scale_y(self) -> float:
        """Display pixels per image pixel, vertically."""
        if self._natural_height <= 0:
            return 1.0
        return self._display_rect[3] / self._natural_height

    @property
    def stroke_scale(self) -> float:
        """
        Scale for stroke widths and fixed lengths such as arrow heads.

        Uses the smaller axis scale.
        """
        return min(self.scale_x, self.scale_y)

    # ==================== Mapping ====================

    def to_image_space(self, display_x: float, display_y: float) -> Tuple[float, float]:
        """
        Convert display coordinates to image coordinates.

        Returns (0, 0) when the display rect is empty.
        """
        x, y, width, height = self._display_rect
        if width <= 0 or height <= 0:
            return (0.0, 0.0)
        return (
            (display_x - x) / self.scale_x,
            (display_y - y) / self.scale_y,
        )

    def to_display_space(self, image_x: float, image_y: float) -> Tuple[float, float]:
        """Convert image coordinates to display coordinates."""
        x, y, _, _ = self._display_rect
        return (
            x + image_x * self.scale_x,
            y + image_y * self.scale_y,
        )

    # ==================== Bounds ====================

    def is_inside_display(self, display_x: float, display_y: float) -> bool:
        """Check if a display position is over the drawn image."""
        x, y, width, height = self._display_rect
        return x <= display_x <= x + width and y <= display_y <= y + height

    def clamp_to_image(self, image_x: float, image_y: float) -> Tuple[float, float]:
        """Clamp an image position to the image boundaries."""
        return (
            max(0.0, min(self._natural_width, image_x)),
            max(0.0, min(self._natural_height, image_y)),
        )


__all__ = ['CoordinateMapper']
