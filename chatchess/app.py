"""Wires the layers together: settings -> database -> repository, image cache -> service."""

import logging
from typing import Optional, Self

from sqlalchemy.orm import scoped_session

from chatchess.core.config import Settings, configure_logging, load_settings
from chatchess.db.database import create_session_factory
from chatchess.db.sql_repository import SQLGameRepository
from chatchess.render.board_renderer import render_board_png
from chatchess.render.cache import ImageCache, PositionKey
from chatchess.services.chess_service import ChessService

logger = logging.getLogger(__name__)


class ChessApp:
    """Owns the process-wide resources. The transport layer holds one of these and calls `service`."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        # one session per thread, handlers run concurrently
        self.sessions = scoped_session(create_session_factory(settings.database_url))
        self.images = ImageCache(settings.image_cache_bytes, self._render)
        self.service = ChessService(
            repository=SQLGameRepository(self.sessions),
            image_cache=self.images,
            flip_for_black=settings.flip_for_black,
        )
        logger.info(
            "Ready (image cache %d bytes, render scale %d)",
            settings.image_cache_bytes,
            settings.render_scale,
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _render(self, key: PositionKey) -> bytes:
        return render_board_png(key.placement, key.flipped, self.settings.render_scale)

    def close(self) -> None:
        self.images.close()
        self.sessions.remove()
        logger.info("Shut down")


def create_app(settings: Optional[Settings] = None) -> ChessApp:
    if settings is None:
        settings = load_settings()
        configure_logging(settings)
    return ChessApp(settings)
