"""
Shared plumbing: value coercion, HTTP transport and pagination.
"""
from .http import HttpClient, RetryPolicy
from .pagination import Page, paginate_all

__all__ = ["HttpClient", "RetryPolicy", "Page", "paginate_all"]
