# frontend/settings.py
import os
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))

# Packaged mobile shell
APP_ID = 'com.samclimatiza.app'
APP_NAME = 'SAM CLIMATIZA'
DEFAULT_MOBILE_SERVER_URL = 'http://10.0.0.12:5000'
DEFAULT_WEB_ORIGIN = 'http://localhost:5000'


class ClientSettings:
    """Where the client shell finds the API, read from the environment"""

    def __init__(self, is_mobile=None, mobile_server_url=None, web_origin=None, timeout=None):
        if is_mobile is None:
            is_mobile = os.environ.get('SAM_MOBILE', 'False').lower() in ('true', '1', 't')
        self.is_mobile = is_mobile
        self.mobile_server_url = (
            mobile_server_url or os.environ.get('MOBILE_SERVER_URL') or DEFAULT_MOBILE_SERVER_URL
        ).rstrip('/')
        self.web_origin = (web_origin or os.environ.get('WEB_ORIGIN') or DEFAULT_WEB_ORIGIN).rstrip('/')
        self.timeout = float(timeout or os.environ.get('API_TIMEOUT', 30))
        self.app_id = APP_ID
        self.app_name = APP_NAME

    @property
    def base_url(self):
        """API host for this build: the fixed server on mobile, the page origin on web"""
        return self.mobile_server_url if self.is_mobile else self.web_origin

    def __repr__(self):
        return f'<ClientSettings mobile={self.is_mobile} base_url={self.base_url}>'
