"""Inkwell blog content indexes and date archive."""

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:  # pragma: no cover - import only for static analysis
    from .app import create_blog as create_blog
else:
    def create_blog(*args: Any, **kwargs: Any):
        from .app import create_blog as _create_blog

        return _create_blog(*args, **kwargs)


__all__ = ["create_blog"]
