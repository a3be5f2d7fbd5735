"""Unit tests for chatchess/render/cache.py"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from chatchess.chess.fen import STARTING_FEN
from chatchess.render.cache import ImageCache, PositionKey


def key(name: str, flipped: bool = False) -> PositionKey:
    return PositionKey(placement=name, white_to_move=True, flipped=flipped)


class CountingRenderer:
    """Returns `size` bytes per image and remembers which keys it drew."""

    def __init__(self, size: int = 10) -> None:
        self.size = size
        self.calls: list[PositionKey] = []
        self._lock = threading.Lock()

    def __call__(self, position: PositionKey) -> bytes:
        with self._lock:
            self.calls.append(position)
        return position.placement.encode().ljust(self.size, b".")


def test_key_ignores_clocks_and_castling() -> None:
    after_moves = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w - - 12 40"
    assert PositionKey.from_fen(STARTING_FEN) == PositionKey.from_fen(after_moves)


def test_key_tracks_side_to_move_and_orientation() -> None:
    black_to_move = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR b KQkq - 0 1"
    assert PositionKey.from_fen(STARTING_FEN) != PositionKey.from_fen(black_to_move)
    assert PositionKey.from_fen(STARTING_FEN) != PositionKey.from_fen(STARTING_FEN, flipped=True)


def test_cache_is_transparent() -> None:
    renderer = CountingRenderer()
    cache = ImageCache(1000, renderer)

    first = cache.get_or_render(key("a"))
    second = cache.get_or_render(key("a"))

    assert first == second == renderer(key("a"))
    assert renderer.calls.count(key("a")) == 2  # once through the cache, once directly above
    stats = cache.stats
    assert (stats.hits, stats.misses, stats.entries, stats.size_bytes) == (1, 1, 1, 10)


def test_image_for_uses_fen() -> None:
    renderer = CountingRenderer()
    cache = ImageCache(1000, renderer)
    cache.image_for(STARTING_FEN, flipped=True)
    assert PositionKey.from_fen(STARTING_FEN, flipped=True) in cache


def test_evicts_least_recently_used() -> None:
    renderer = CountingRenderer(size=10)
    cache = ImageCache(30, renderer)
    for name in ("a", "b", "c"):
        cache.get_or_render(key(name))

    cache.get_or_render(key("d"))

    assert key("a") not in cache
    assert all(key(name) in cache for name in ("b", "c", "d"))
    assert cache.size_bytes == 30
    assert cache.stats.evictions == 1


def test_access_protects_from_eviction() -> None:
    cache = ImageCache(30, CountingRenderer(size=10))
    for name in ("a", "b", "c"):
        cache.get_or_render(key(name))

    cache.get_or_render(key("a"))
    cache.get_or_render(key("d"))

    assert key("a") in cache
    assert key("b") not in cache


def test_large_image_evicts_several() -> None:
    sizes = {"a": 10, "b": 10, "c": 10, "big": 25}
    cache = ImageCache(30, lambda position: b"x" * sizes[position.placement])
    for name in ("a", "b", "c", "big"):
        cache.get_or_render(key(name))

    assert len(cache) == 1
    assert key("big") in cache
    assert cache.size_bytes == 25


def test_oversized_image_is_returned_but_not_kept() -> None:
    renderer = CountingRenderer(size=100)
    cache = ImageCache(50, renderer)

    image = cache.get_or_render(key("a"))
    assert len(image) == 100
    assert key("a") not in cache
    assert cache.size_bytes == 0

    cache.get_or_render(key("a"))
    assert len(renderer.calls) == 2


def test_zero_budget_keeps_nothing() -> None:
    cache = ImageCache(0, CountingRenderer())
    cache.get_or_render(key("a"))
    assert len(cache) == 0


def test_negative_budget() -> None:
    with pytest.raises(ValueError):
        ImageCache(-1, CountingRenderer())


def test_single_flight() -> None:
    started = threading.Event()
    release = threading.Event()
    calls = []

    def slow_renderer(position: PositionKey) -> bytes:
        calls.append(position)
        started.set()
        release.wait(timeout=5)
        return b"image"

    cache = ImageCache(1000, slow_renderer)
    with ThreadPoolExecutor(max_workers=4) as pool:
        first = pool.submit(cache.get_or_render, key("a"))
        assert started.wait(timeout=5)
        others = [pool.submit(cache.get_or_render, key("a")) for _ in range(3)]
        release.set()
        results = [first.result(timeout=5)] + [other.result(timeout=5) for other in others]

    assert results == [b"image"] * 4
    assert len(calls) == 1


def test_other_keys_are_not_blocked_by_a_render() -> None:
    release = threading.Event()

    def renderer(position: PositionKey) -> bytes:
        if position.placement == "slow":
            release.wait(timeout=5)
        return position.placement.encode()

    cache = ImageCache(1000, renderer)
    with ThreadPoolExecutor(max_workers=2) as pool:
        slow = pool.submit(cache.get_or_render, key("slow"))
        assert cache.get_or_render(key("fast")) == b"fast"
        assert not slow.done()
        release.set()
        assert slow.result(timeout=5) == b"slow"


def test_failure_reaches_every_waiter() -> None:
    started = threading.Event()
    release = threading.Event()

    def failing_renderer(position: PositionKey) -> bytes:
        started.set()
        release.wait(timeout=5)
        raise RuntimeError("boom")

    cache = ImageCache(1000, failing_renderer)
    with ThreadPoolExecutor(max_workers=3) as pool:
        first = pool.submit(cache.get_or_render, key("a"))
        assert started.wait(timeout=5)
        second = pool.submit(cache.get_or_render, key("a"))
        release.set()
        for future in (first, second):
            with pytest.raises(RuntimeError, match="boom"):
                future.result(timeout=5)

    assert key("a") not in cache


def test_failure_is_not_cached() -> None:
    attempts = []

    def flaky_renderer(position: PositionKey) -> bytes:
        attempts.append(position)
        if len(attempts) == 1:
            raise RuntimeError("first time fails")
        return b"image"

    cache = ImageCache(1000, flaky_renderer)
    with pytest.raises(RuntimeError):
        cache.get_or_render(key("a"))
    assert cache.get_or_render(key("a")) == b"image"


def test_clear_and_close() -> None:
    renderer = CountingRenderer()
    with ImageCache(1000, renderer) as cache:
        cache.get_or_render(key("a"))
        cache.clear()
        assert len(cache) == 0
        assert cache.size_bytes == 0

    # closed: still renders, keeps nothing
    assert cache.get_or_render(key("b")) == renderer(key("b"))
    assert len(cache) == 0
