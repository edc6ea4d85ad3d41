from .asia import HuobiQuoteAdapter

__all__ = ["HuobiQuoteAdapter"]
