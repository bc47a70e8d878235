"""
Framebuffer for the CHIP-8 Virtual Machine
==========================================

The CHIP-8 display is a 64x32 grid of monochrome pixels. Programs draw by
XOR-ing 8-pixel-wide sprites onto the grid; a pixel that was lit and gets
switched off by a draw is a "collision", reported to the program in VF.

Pixel layout:
    - Row-major, one byte per pixel (0 = unlit, 1 = lit)
    - Origin (0, 0) is the top-left corner
    - Sprite rows are bytes, MSB is the leftmost pixel

Sprites wrap around both edges of the screen (COSMAC VIP behaviour):
a sprite drawn at x=60 shows its last four columns at x=0..3.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import io
from typing import Iterable, List

# Screen geometry
WIDTH = 64
HEIGHT = 32


class Display:
    """
    64x32 monochrome framebuffer.

    Only the CLS and DRW instructions change the pixels; renderers read
    them through get_pixel(), rows(), get_text() or render_image().

    Example:
        >>> display = Display()
        >>> display.draw_sprite(0, 0, [0xF0, 0x90, 0x90, 0x90, 0xF0])  # "0"
        False
        >>> print(display.get_text().splitlines()[0][:8])
        ####....
    """

    def __init__(self):
        """Initialize an all-dark display."""
        self._pixels = bytearray(WIDTH * HEIGHT)

    @property
    def width(self) -> int:
        """Display width in pixels (64)."""
        return WIDTH

    @property
    def height(self) -> int:
        """Display height in pixels (32)."""
        return HEIGHT

    @property
    def pixels(self) -> bytes:
        """Copy of the raw row-major pixel buffer."""
        return bytes(self._pixels)

    def clear(self) -> None:
        """Switch every pixel off."""
        for i in range(len(self._pixels)):
            self._pixels[i] = 0

    def get_pixel(self, x: int, y: int) -> int:
        """
        Get pixel value at a screen position.

        Args:
            x: Column (0-63)
            y: Row (0-31)

        Returns:
            1 if lit, 0 if unlit
        """
        if not (0 <= x < WIDTH and 0 <= y < HEIGHT):
            raise ValueError(f"Invalid position ({x}, {y})")
        return self._pixels[y * WIDTH + x]

    def draw_sprite(self, x: int, y: int, sprite: Iterable[int]) -> bool:
        """
        XOR a sprite onto the display with wraparound.

        The start coordinate is reduced modulo the screen size first, then
        every pixel of the sprite wraps independently, so drawing never
        indexes outside the buffer.

        Args:
            x: Left column of the sprite (any value, taken modulo 64)
            y: Top row of the sprite (any value, taken modulo 32)
            sprite: Sprite rows, one byte (8 pixels) per row

        Returns:
            True if any lit pixel was switched off (collision)
        """
        x0 = x % WIDTH
        y0 = y % HEIGHT
        collision = False

        for row, bits in enumerate(sprite):
            py = (y0 + row) % HEIGHT
            for col in range(8):
                if not (bits >> (7 - col)) & 1:
                    continue
                index = py * WIDTH + (x0 + col) % WIDTH
                if self._pixels[index]:
                    collision = True
                self._pixels[index] ^= 1

        return collision

    def lit_count(self) -> int:
        """Number of lit pixels."""
        return sum(self._pixels)

    def rows(self) -> List[List[int]]:
        """
        Get the framebuffer as a list of rows.

        Returns:
            32 lists of 64 ints (0 or 1)
        """
        return [
            list(self._pixels[y * WIDTH:(y + 1) * WIDTH])
            for y in range(HEIGHT)
        ]

    def get_text(self, on: str = "#", off: str = ".") -> str:
        """
        Get the framebuffer as text, one line per pixel row.

        Args:
            on: Character for lit pixels
            off: Character for unlit pixels

        Returns:
            32 lines of 64 characters separated by '\\n'
        """
        return "\n".join(
            "".join(on if pixel else off for pixel in row)
            for row in self.rows()
        )

    def render_image(self, scale: int = 8) -> bytes:
        """
        Render the framebuffer as a PNG image.

        Args:
            scale: Size in image pixels of one display pixel (default 8)

        Returns:
            PNG image bytes (lit pixels white, unlit pixels black)
        """
        from PIL import Image

        if scale < 1:
            raise ValueError(f"scale must be >= 1, got {scale}")

        img = Image.new("L", (WIDTH, HEIGHT), color=0)
        img.putdata([255 if pixel else 0 for pixel in self._pixels])
        if scale != 1:
            img = img.resize((WIDTH * scale, HEIGHT * scale), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()

    def __repr__(self) -> str:
        return f"Display({WIDTH}x{HEIGHT}, lit={self.lit_count()})"
