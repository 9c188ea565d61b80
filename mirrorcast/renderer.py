"""
The sampling loop around the integrator.

The image is cut into tiles. Each tile gets its own random stream spawned
from one seed, so a seeded render comes out identical whether tiles run on
one thread or many. Output is an HDR float array; ``to_ldr`` and
``save_image`` turn it into 8-bit PPM or any format Pillow writes.
"""

from __future__ import annotations
import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple
import numpy as np

from .vec3 import Color
from .camera import Camera
from .shapes import HittableList
from .lights import PointLight
from .integrator import Integrator, AMBIENT, BIAS, MAX_DEPTH
from .ppm import write_ppm

logger = logging.getLogger(__name__)

# (x0, y0, x1, y1) in image coordinates, row 0 at the top, end exclusive
Tile = Tuple[int, int, int, int]
ProgressCallback = Callable[[float], None]


@dataclass
class RenderSettings:
    """Image size, sampling and shading parameters for one render."""
    width: int = 400
    height: int = 300
    samples_per_pixel: int = 16
    max_depth: int = MAX_DEPTH
    tile_size: int = 32
    num_threads: int = 0  # 0 picks the CPU count
    seed: Optional[int] = None  # None draws fresh OS entropy
    gamma: float = 2.0
    ambient: float = AMBIENT
    bias: float = BIAS

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")
        if self.tile_size < 1:
            raise ValueError(f"tile_size must be >= 1, got {self.tile_size}")
        if self.gamma <= 0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


def iter_tiles(width: int, height: int, tile_size: int) -> Iterator[Tile]:
    """Yield tiles covering the image, row by row from the top."""
    for y0 in range(0, height, tile_size):
        y1 = min(y0 + tile_size, height)
        for x0 in range(0, width, tile_size):
            yield x0, y0, min(x0 + tile_size, width), y1


class _Progress:
    """Thread-safe count of finished tiles forwarded as a fraction."""

    def __init__(self, total: int, callback: Optional[ProgressCallback]):
        self.total = total
        self.callback = callback
        self._done = 0
        self._lock = threading.Lock()

    def tile_done(self) -> None:
        with self._lock:
            self._done += 1
            fraction = self._done / self.total
        if self.callback is not None:
            self.callback(fraction)


class Renderer:
    """Jittered multi-sample renderer, optionally spread over a thread pool."""

    def __init__(self, settings: Optional[RenderSettings] = None):
        self.settings = settings if settings is not None else RenderSettings()
        self._progress_callback: Optional[ProgressCallback] = None

    def set_progress_callback(self, callback: ProgressCallback) -> None:
        """Receive the finished fraction (0 to 1) after every tile."""
        self._progress_callback = callback

    def make_integrator(self, world: HittableList, light: PointLight) -> Integrator:
        return Integrator(
            world,
            light,
            max_depth=self.settings.max_depth,
            ambient=self.settings.ambient,
            bias=self.settings.bias
        )

    def sample_pixel(
        self,
        integrator: Integrator,
        camera: Camera,
        i: int,
        j: int,
        rng: np.random.Generator
    ) -> Color:
        """Sum the jittered samples of one pixel.

        Args:
            integrator: Resolves each camera ray to a color
            camera: Generates the rays
            i: Pixel column, 0 at the left
            j: Pixel row, 0 at the bottom
            rng: Source of the jitter offsets

        Returns:
            The sum of all samples, before averaging and gamma
        """
        # A 1-pixel dimension would otherwise divide by zero
        u_span = max(self.settings.width - 1, 1)
        v_span = max(self.settings.height - 1, 1)

        total = Color(0, 0, 0)
        for _ in range(self.settings.samples_per_pixel):
            s = (i + rng.random()) / u_span
            t = (j + rng.random()) / v_span
            total = total + integrator.trace(camera.get_ray(s, t))
        return total

    def _render_tile(
        self,
        integrator: Integrator,
        camera: Camera,
        tile: Tile,
        seed: np.random.SeedSequence
    ) -> np.ndarray:
        x0, y0, x1, y1 = tile
        rng = np.random.default_rng(seed)
        samples = self.settings.samples_per_pixel
        bottom = self.settings.height - 1

        block = np.empty((y1 - y0, x1 - x0, 3), dtype=np.float64)
        for y in range(y0, y1):
            for x in range(x0, x1):
                total = self.sample_pixel(integrator, camera, x, bottom - y, rng)
                block[y - y0, x - x0] = total.to_array() / samples
        return block

    def render(self, world: HittableList, camera: Camera, light: PointLight) -> np.ndarray:
        """Render the scene.

        Returns:
            Float64 array of shape (height, width, 3), row 0 at the top,
            each pixel the mean of its samples
        """
        settings = self.settings
        integrator = self.make_integrator(world, light)
        tiles: List[Tile] = list(iter_tiles(settings.width, settings.height, settings.tile_size))
        seeds = np.random.SeedSequence(settings.seed).spawn(len(tiles))
        progress = _Progress(len(tiles), self._progress_callback)

        logger.info(
            "Rendering %dx%d, %d spp, depth %d, %d objects, %d tiles on %d threads",
            settings.width, settings.height, settings.samples_per_pixel,
            settings.max_depth, len(world), len(tiles), settings.num_threads
        )
        started = time.perf_counter()

        def run(job: Tuple[Tile, np.random.SeedSequence]) -> np.ndarray:
            block = self._render_tile(integrator, camera, *job)
            progress.tile_done()
            return block

        jobs = list(zip(tiles, seeds))
        if settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=settings.num_threads) as pool:
                blocks = list(pool.map(run, jobs))
        else:
            blocks = [run(job) for job in jobs]

        image = np.zeros((settings.height, settings.width, 3), dtype=np.float64)
        for (x0, y0, x1, y1), block in zip(tiles, blocks):
            image[y0:y1, x0:x1] = block

        logger.debug("Render finished in %.3fs", time.perf_counter() - started)
        return image

    def to_ldr(self, hdr_image: np.ndarray) -> np.ndarray:
        """Gamma-encode and quantize to uint8.

        Negative values become 0; the encoded value is clamped to
        [0, 0.999], multiplied by 256 and truncated.
        """
        linear = np.clip(hdr_image, 0.0, None)
        gamma = self.settings.gamma
        encoded = np.sqrt(linear) if gamma == 2.0 else np.power(linear, 1.0 / gamma)
        return (np.clip(encoded, 0.0, 0.999) * 256).astype(np.uint8)

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Write an HDR or 8-bit image.

        ``.ppm`` files are written as plain P3; every other extension is
        handed to Pillow.
        """
        if np.issubdtype(image.dtype, np.floating):
            image = self.to_ldr(image)

        if filename.lower().endswith('.ppm'):
            with open(filename, 'w', encoding='ascii') as f:
                write_ppm(image, f)
        else:
            from PIL import Image as PILImage

            PILImage.fromarray(np.ascontiguousarray(image, dtype=np.uint8)).save(filename)
        logger.info("Wrote %s", filename)
