# frontend/navigation.py
import logging

from frontend.api_client import ApiError
from frontend.formatting import ROLE_LABELS

logger = logging.getLogger(__name__)

# (label, path, admin only)
MENU_ENTRIES = (
    ('Dashboard', '/', False),
    ('Serviços', '/services', False),
    ('Clientes', '/clients', False),
    ('Orçamentos', '/quotes', False),
    ('Ordens de Serviço', '/work-orders', False),
    ('Usuários', '/users', True),
    ('Configurações', '/settings', True),
)


class MenuEntry:
    def __init__(self, label, path, active=False):
        self.label = label
        self.path = path
        self.active = active

    def __repr__(self):
        return f'<MenuEntry {self.path}{" *" if self.active else ""}>'


class MobileMenu:
    """
    The dropdown menu of the mobile layout: profile summary, logout and
    router links. Navigation only changes ``current_path``; the entry whose
    path matches it is the active one.
    """

    def __init__(self, client, user, current_path='/'):
        self.client = client
        self.user = user
        self.current_path = current_path
        self.is_open = False
        self.error = None

    @property
    def is_admin(self):
        return bool(self.user) and self.user.get('role') == 'admin'

    def profile(self):
        name = (self.user or {}).get('name') or ''
        return {
            'initial': name[:1].upper(),
            'name': name,
            'roleLabel': ROLE_LABELS.get((self.user or {}).get('role'), ''),
            'photoUrl': (self.user or {}).get('photoUrl'),
        }

    def _is_active(self, path):
        if path == '/':
            return self.current_path == '/'
        return self.current_path == path or self.current_path.startswith(path + '/')

    def entries(self):
        return [
            MenuEntry(label, path, self._is_active(path))
            for label, path, admin_only in MENU_ENTRIES
            if not admin_only or self.is_admin
        ]

    def active_entry(self):
        for entry in self.entries():
            if entry.active:
                return entry
        return None

    def toggle(self):
        self.is_open = not self.is_open
        return self.is_open

    def navigate(self, path):
        """Follow a menu link and close the menu"""
        allowed = {entry.path for entry in self.entries()}
        if path not in allowed:
            raise ValueError(f"No menu entry for {path}")
        self.current_path = path
        self.is_open = False
        return path

    def logout(self):
        """Log out and return to the login screen; False if the server refused"""
        try:
            self.client.logout()
        except ApiError as e:
            logger.warning(f"Logout failed: {e.message}")
            self.error = e.message
            return False
        self.user = None
        self.is_open = False
        self.current_path = '/login'
        return True
