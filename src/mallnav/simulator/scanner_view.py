"""
Scanner indicator raster.

Draws ``ScanIndicatorFrame`` positions into an RGB numpy buffer. The
simulator window blits the buffer; tests inspect it directly.
"""

from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from mallnav.animation.scan_indicator import ScanIndicatorFrame

Color = Tuple[int, int, int]


class ScannerView:
    """
    Numpy frame buffer for the scan indicator.

    Rows map linearly onto the indicator's top..bottom range. Positions
    outside the range (edge overshoot, glow margin) are clamped to the
    first or last row.
    """

    LINE_COLOR: Color = (120, 255, 200)
    GLOW_COLOR: Color = (30, 120, 90)
    TRAIL_COLOR: Color = (60, 200, 150)

    def __init__(
        self,
        width: int = 320,
        height: int = 320,
        top: float = -10.0,
        bottom: float = 610.0,
        glow_radius: int = 6,
    ) -> None:
        if width <= 0 or height <= 1:
            raise ValueError("scanner view needs at least 1x2 pixels")
        if bottom == top:
            raise ValueError("top and bottom must differ")
        self._width = width
        self._height = height
        self.top = top
        self.bottom = bottom
        self.glow_radius = glow_radius
        self._buffer = np.zeros((height, width, 3), dtype=np.uint8)
        self._frame: Optional[ScanIndicatorFrame] = None

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def frame(self) -> Optional[ScanIndicatorFrame]:
        return self._frame

    def row_for(self, position: float) -> int:
        """Buffer row for an indicator position."""
        t = (position - self.top) / (self.bottom - self.top)
        return int(np.clip(round(t * (self._height - 1)), 0, self._height - 1))

    def clear(self) -> None:
        self._buffer.fill(0)

    def draw(self, frame: Optional[ScanIndicatorFrame]) -> None:
        """Redraw from a frame; None leaves the buffer blank."""
        self._frame = frame
        self.clear()
        if frame is None:
            return

        # Glow: linear falloff around the glow row
        glow_row = self.row_for(frame.glow)
        rows = np.arange(self._height)
        falloff = np.clip(1.0 - np.abs(rows - glow_row) / max(1, self.glow_radius), 0.0, 1.0)
        glow = falloff[:, None] * np.asarray(self.GLOW_COLOR, dtype=float)[None, :]
        self._buffer[:] = np.maximum(self._buffer, glow[:, None, :].astype(np.uint8))

        # Trails fade with their lag
        for i, position in enumerate(frame.trails):
            strength = 1.0 - (i + 1) / (len(frame.trails) + 1)
            color = (np.asarray(self.TRAIL_COLOR, dtype=float) * strength).astype(np.uint8)
            row = self.row_for(position)
            self._buffer[row] = np.maximum(self._buffer[row], color)

        self._buffer[self.row_for(frame.line)] = self.LINE_COLOR

    def get_buffer(self) -> NDArray[np.uint8]:
        return self._buffer.copy()
