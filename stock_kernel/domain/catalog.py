"""
ArticleCatalog -- outbound read-only contract to the article/category catalog.

The catalog is owned by another module (articles and categories CRUD).  The
stock kernel only needs to enumerate articles, optionally filtered by
category, when a physical count session is opened.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from stock_kernel.domain.dtos import ArticleRef


@runtime_checkable
class ArticleCatalog(Protocol):
    """Read-only article listing consumed by the count session service."""

    def list_articles(self, categoria_id: int | None = None) -> list[ArticleRef]:
        """Return articles, restricted to ``categoria_id`` when given."""
        ...


class InMemoryArticleCatalog:
    """
    ArticleCatalog backed by a list of ArticleRef.

    Used when the kernel is embedded next to a catalog that is already
    loaded in memory, and by the test suite.  Articles are returned in
    articulo_id order.
    """

    def __init__(self, articles: Iterable[ArticleRef] = ()):
        self._articles: dict[int, ArticleRef] = {}
        for article in articles:
            self.add(article)

    def add(self, article: ArticleRef) -> None:
        self._articles[article.articulo_id] = article

    def remove(self, articulo_id: int) -> None:
        self._articles.pop(articulo_id, None)

    def list_articles(self, categoria_id: int | None = None) -> list[ArticleRef]:
        articles = sorted(self._articles.values(), key=lambda a: a.articulo_id)
        if categoria_id is None:
            return articles
        return [a for a in articles if a.categoria_id == categoria_id]
