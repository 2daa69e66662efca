# backend/models/__init__.py

from .base import db

# Foundational models first so foreign keys resolve
from .user import User
from .client import Client

# Business records
from .service import Service, ServiceItem
from .quote import Quote, QuoteItem
from .work_order import WorkOrder

__all__ = [
    'db',
    'User',
    'Client',
    'Service',
    'ServiceItem',
    'Quote',
    'QuoteItem',
    'WorkOrder',
]
