"""Outline access: headline parsing, ranges and tags."""

from .model import SUPPORTED_SYNTAXES, Headline, HeadlineOutline, OutlineModel, is_valid_tag, iter_headlines

__all__ = ["SUPPORTED_SYNTAXES", "Headline", "HeadlineOutline", "OutlineModel", "is_valid_tag", "iter_headlines"]
