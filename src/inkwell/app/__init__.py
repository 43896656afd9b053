from __future__ import annotations

import logging

from inkwell.app.db.store import EntryStore
from inkwell.app.index.search import SearchIndex
from inkwell.app.services.blog import Blog
from inkwell.app.services.blog_config import BlogConfig
from inkwell.app.services.clock import Clock
from inkwell.app.services.plugins import ListenerRegistry

logger = logging.getLogger(__name__)


def create_blog(
    config: BlogConfig | None = None,
    *,
    store: EntryStore | None = None,
    search_index: SearchIndex | None = None,
    clock: Clock | None = None,
    registry: ListenerRegistry | None = None,
    start: bool = True,
) -> Blog:
    """Build a blog from settings and, by default, index its content."""

    from inkwell.settings import settings

    logging.basicConfig(
        level=str(settings.get("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if config is None:
        config = BlogConfig.from_settings(settings)

    blog = Blog(
        config,
        store=store,
        search_index=search_index,
        clock=clock,
        registry=registry,
    )
    if start:
        blog.start()
    logger.info("Blog %s ready", blog.id)
    return blog


__all__ = ["create_blog"]
