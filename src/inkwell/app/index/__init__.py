from .base import OrderKey, SecondaryIndex
from .blog_entries import BlogEntryIndex
from .classifications import AuthorIndex, CategoryIndex, TagIndex, TagSummary
from .responses import ResponseIndex
from .search import InMemorySearchIndex, SearchIndex
from .static_pages import StaticPageIndex

__all__ = [
    "OrderKey",
    "SecondaryIndex",
    "BlogEntryIndex",
    "ResponseIndex",
    "TagIndex",
    "TagSummary",
    "CategoryIndex",
    "AuthorIndex",
    "StaticPageIndex",
    "SearchIndex",
    "InMemorySearchIndex",
]
