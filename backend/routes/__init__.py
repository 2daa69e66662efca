"""
Routes package for the SAM Climatiza API.
Each module holds one Flask blueprint; ``register_blueprints`` mounts them.
"""

import logging

logger = logging.getLogger(__name__)

# (module, blueprint variable, description, url prefix)
BLUEPRINTS = [
    ('auth', 'auth_bp', 'Authentication', '/api'),
    ('clients', 'clients_bp', 'Clients', '/api'),
    ('services', 'services_bp', 'Services', '/api'),
    ('quotes', 'quotes_bp', 'Quotes', '/api'),
    ('work_orders', 'work_orders_bp', 'Work Orders', '/api'),
    ('users', 'users_bp', 'Users', '/api'),
    ('health', 'health_bp', 'Health Check', '/api'),
    ('files', 'files_bp', 'Static Files', None),
]


def register_blueprints(app):
    """
    Import and register every blueprint on the app.

    Returns:
        list: descriptions of the registered blueprints
    """
    registered = []
    for module_name, blueprint_name, description, url_prefix in BLUEPRINTS:
        module = __import__(f'routes.{module_name}', fromlist=[blueprint_name])
        blueprint = getattr(module, blueprint_name)
        app.register_blueprint(blueprint, url_prefix=url_prefix)
        registered.append(description)
        logger.debug(f"{description} blueprint registered at {url_prefix or '/'}")

    app.logger.info(f"Registered {len(registered)} blueprints: {', '.join(registered)}")
    return registered


__all__ = ['BLUEPRINTS', 'register_blueprints']
