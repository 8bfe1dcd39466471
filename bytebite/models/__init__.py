"""Data models for bytebite."""

from .schemas import Article, ArticleDraft, Feed

__all__ = ["Article", "ArticleDraft", "Feed"]
