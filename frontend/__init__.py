"""Client shell for SAM Climatiza: API client, forms, pages, menu and PDF viewer"""

from frontend.api_client import ApiClient, ApiError
from frontend.settings import ClientSettings

__all__ = ['ApiClient', 'ApiError', 'ClientSettings']
