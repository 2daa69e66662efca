# tests/conftest.py
"""
Fixtures for the API tests.

The app context is only pushed while fixtures touch the database, so each
test-client request runs in its own context (Flask-Login keeps the current
user on ``g``). Record fixtures therefore return ids.
"""
import io

import pytest
from PIL import Image

from app import create_app
from models import db, User, Client, Service

PASSWORD = 'secret123'


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', {
        'PDF_FOLDER': str(tmp_path / 'pdf'),
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'COMPANY_LOGO': None,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(app, username, role='technician', name=None, is_active=True):
    with app.app_context():
        user = User(username=username, name=name or username.title(),
                    email=f'{username}@samclimatiza.com.br', role=role, is_active=is_active)
        user.set_password(PASSWORD)
        db.session.add(user)
        db.session.commit()
        return user.id


def login(app, username):
    test_client = app.test_client()
    response = test_client.post('/api/login', json={'username': username, 'password': PASSWORD})
    assert response.status_code == 200, response.get_json()
    return test_client


@pytest.fixture
def admin_id(app):
    return make_user(app, 'admin', 'admin', 'Ana Souza')


@pytest.fixture
def technician_id(app):
    return make_user(app, 'tecnico', 'technician', 'Bruno Lima')


@pytest.fixture
def admin_client(app, admin_id):
    return login(app, 'admin')


@pytest.fixture
def technician_client(app, technician_id):
    return login(app, 'tecnico')


@pytest.fixture
def client_id(app):
    with app.app_context():
        record = Client(name='Globex Refrigeração', contact_name='Carla', email='carla@globex.com',
                        phone='(11) 3333-4444', address='Av. Paulista, 1000', city='São Paulo', state='SP')
        db.session.add(record)
        db.session.commit()
        return record.id


@pytest.fixture
def service_id(app, client_id):
    with app.app_context():
        service = Service(client_id=client_id, service_type='Instalação',
                          description='Instalação de split 12000 BTUs', status='pending')
        db.session.add(service)
        db.session.commit()
        return service.id


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    Image.new('RGB', (8, 8), color=(26, 86, 219)).save(buffer, format='PNG')
    return buffer.getvalue()


# Client shell

@pytest.fixture
def fake_session():
    from fakes import FakeSession
    return FakeSession()


@pytest.fixture
def api(fake_session):
    from frontend.api_client import ApiClient
    from frontend.settings import ClientSettings
    settings = ClientSettings(is_mobile=False, web_origin='http://localhost:5000')
    return ApiClient(settings, session=fake_session)
