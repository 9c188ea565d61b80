"""
Plain PPM (P3, ASCII) image codec.

Layout written:
    P3
    <width> <height>
    255
    <r> <g> <b>      one line per pixel, rows top to bottom
"""

from __future__ import annotations
from typing import TextIO
import numpy as np


MAX_VALUE = 255


class PPMError(Exception):
    """Raised when a PPM stream cannot be parsed."""
    pass


def write_ppm(image: np.ndarray, stream: TextIO) -> None:
    """Write an 8-bit RGB image as P3.

    Args:
        image: uint8 array of shape (height, width, 3), row 0 at the top
        stream: Text stream to write to
    """
    height, width = image.shape[:2]
    stream.write("P3\n")
    stream.write(f"{width} {height}\n")
    stream.write(f"{MAX_VALUE}\n")
    for row in image:
        for r, g, b in row:
            stream.write(f"{int(r)} {int(g)} {int(b)}\n")


def read_ppm(stream: TextIO) -> np.ndarray:
    """Read a P3 image back into a uint8 array of shape (height, width, 3)."""
    tokens = []
    for line in stream:
        line = line.split('#', 1)[0]
        tokens.extend(line.split())

    if not tokens or tokens[0] != 'P3':
        raise PPMError("Not a P3 image")
    try:
        width, height, max_value = (int(tok) for tok in tokens[1:4])
        values = np.array([int(tok) for tok in tokens[4:]], dtype=np.int64)
    except ValueError as e:
        raise PPMError(f"Malformed P3 data: {e}") from e

    if width < 1 or height < 1 or max_value < 1:
        raise PPMError(f"Bad header: {width}x{height}, max {max_value}")
    if values.size != width * height * 3:
        raise PPMError(f"Expected {width * height * 3} samples, got {values.size}")
    if values.min() < 0 or values.max() > max_value:
        raise PPMError(f"Sample outside 0..{max_value}")
    if max_value != MAX_VALUE:
        values = values * MAX_VALUE // max_value

    return values.reshape((height, width, 3)).astype(np.uint8)
