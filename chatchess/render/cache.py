"""
In-memory cache of rendered board images.
-----

* keyed by what changes the pixels: placement, side to move and orientation (castling rights,
  en passant and move clocks are dropped from the FEN)
* bounded by total bytes, least recently used entries are evicted first
* single-flight: while a key is being rendered, other requests for it wait for that render
  instead of starting their own

The index lock is only held to look up/reserve a key and to publish the result, never during a render.
"""

import logging
import threading
from collections import OrderedDict
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, NamedTuple, Self

from chatchess.chess.fen import color_to_move, placement
from chatchess.core.shared_types import Color

logger = logging.getLogger(__name__)


class PositionKey(NamedTuple):
    placement: str
    white_to_move: bool
    flipped: bool

    @classmethod
    def from_fen(cls, fen: str, flipped: bool = False) -> Self:
        return cls(
            placement=placement(fen),
            white_to_move=color_to_move(fen) == Color.WHITE,
            flipped=flipped,
        )


Renderer = Callable[[PositionKey], bytes]


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    entries: int = 0
    size_bytes: int = 0


class ImageCache:
    """Process-wide cache. Create one at startup, pass it to whoever renders, close() it at shutdown."""

    def __init__(self, max_bytes: int, renderer: Renderer) -> None:
        if max_bytes < 0:
            raise ValueError("max_bytes cannot be negative")
        self.max_bytes = max_bytes
        self._render = renderer
        self._lock = threading.Lock()
        self._entries: OrderedDict[PositionKey, bytes] = OrderedDict()
        self._in_flight: dict[PositionKey, Future[bytes]] = {}
        self._size = 0
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __contains__(self, key: PositionKey) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def size_bytes(self) -> int:
        with self._lock:
            return self._size

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                entries=len(self._entries),
                size_bytes=self._size,
            )

    def image_for(self, fen: str, flipped: bool = False) -> bytes:
        return self.get_or_render(PositionKey.from_fen(fen, flipped))

    def get_or_render(self, key: PositionKey) -> bytes:
        # phase 1: lookup or reserve
        with self._lock:
            image = self._entries.get(key)
            if image is not None:
                self._entries.move_to_end(key)
                self._hits += 1
                logger.debug("Cache hit: %s", key)
                return image

            pending = self._in_flight.get(key)
            if pending is None:
                self._misses += 1
                reservation: Future[bytes] = Future()
                self._in_flight[key] = reservation

        if pending is not None:
            logger.debug("Waiting for in-flight render: %s", key)
            return pending.result()

        # phase 2: render without the lock, then publish
        logger.debug("Cache miss: %s", key)
        try:
            image = self._render(key)
        except BaseException as exc:
            with self._lock:
                del self._in_flight[key]
            reservation.set_exception(exc)
            raise

        with self._lock:
            self._store(key, image)
            del self._in_flight[key]
        reservation.set_result(image)
        return image

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._size = 0

    def close(self) -> None:
        """Drop everything and stop retaining new images. Lookups still work, they just always render."""
        with self._lock:
            self._closed = True
        self.clear()
        logger.debug("Image cache closed")

    def _store(self, key: PositionKey, image: bytes) -> None:
        """Insert under the lock, evicting least recently used entries until the image fits."""
        if self._closed:
            return

        size = len(image)
        if size > self.max_bytes:
            logger.warning(
                "Rendered image of %d bytes exceeds the cache budget of %d bytes; not cached",
                size,
                self.max_bytes,
            )
            return

        while self._entries and self._size + size > self.max_bytes:
            evicted_key, evicted = self._entries.popitem(last=False)
            self._size -= len(evicted)
            self._evictions += 1
            logger.debug("Evicted: %s (%d bytes)", evicted_key, len(evicted))

        self._entries[key] = image
        self._size += size
