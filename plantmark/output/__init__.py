from .writer import HtmlWriter

__all__ = ["HtmlWriter"]
