import pytest

from fakes import network_down
from frontend.api_client import ApiError


def test_get_is_cached_by_path(api, fake_session):
    fake_session.on('GET', '/api/clients', body=[{'id': 1, 'name': 'Acme'}])

    assert api.get('/api/clients') == [{'id': 1, 'name': 'Acme'}]
    assert api.get('/api/clients') == [{'id': 1, 'name': 'Acme'}]
    assert fake_session.paths() == ['/api/clients']
    assert fake_session.calls[0]['url'] == 'http://localhost:5000/api/clients'


def test_invalidate_forces_refetch(api, fake_session):
    fake_session.routes[('GET', '/api/clients')] = [(200, []), (200, [{'id': 1}])]

    assert api.get('/api/clients') == []
    api.invalidate('/api/clients')
    assert api.get('/api/clients') == [{'id': 1}]


def test_invalidate_covers_sub_paths_and_queries(api):
    api.cache.update({
        '/api/quotes': [],
        '/api/quotes/3': {},
        '/api/quotes?clientId=1': [],
        '/api/quotes-archive': [],
        '/api/clients': [],
    })
    api.invalidate('/api/quotes')
    assert set(api.cache) == {'/api/quotes-archive', '/api/clients'}


def test_error_message_from_server(api, fake_session):
    fake_session.on('POST', '/api/clients', status=400, body={'error': 'name is required'})

    with pytest.raises(ApiError) as excinfo:
        api.post('/api/clients', {})
    assert excinfo.value.status == 400
    assert excinfo.value.message == 'name is required'


def test_error_message_falls_back_to_status_and_text(api, fake_session):
    fake_session.on('GET', '/api/users', status=502, body='Bad Gateway')

    with pytest.raises(ApiError) as excinfo:
        api.get('/api/users')
    assert excinfo.value.message == '502: Bad Gateway'


def test_failed_refetch_keeps_cached_value(api, fake_session):
    fake_session.routes[('GET', '/api/clients')] = [(200, [{'id': 1}]), (500, {'error': 'boom'})]
    api.get('/api/clients')

    with pytest.raises(ApiError):
        api.get('/api/clients', use_cache=False)
    assert api.cached('/api/clients') == [{'id': 1}]


def test_network_failure_is_an_api_error(api, fake_session):
    fake_session.routes[('GET', '/api/clients')] = network_down

    with pytest.raises(ApiError) as excinfo:
        api.get('/api/clients')
    assert excinfo.value.status is None


def test_upload_sends_one_multipart_file(api, fake_session):
    fake_session.on('POST', '/api/users/2/photo', body={'id': 2, 'photoUrl': '/uploads/photos/x.png'})

    result = api.upload('/api/users/2/photo', 'photo', 'me.png', b'png', 'image/png')

    assert result['photoUrl'] == '/uploads/photos/x.png'
    assert fake_session.calls[0]['files'] == {'photo': ('me.png', b'png', 'image/png')}


def test_login_and_logout(api, fake_session):
    fake_session.on('POST', '/api/login', body={'id': 1, 'name': 'Ana', 'role': 'admin'})
    fake_session.on('POST', '/api/logout', body={'message': 'Logged out successfully'})
    fake_session.on('GET', '/api/clients', body=[])

    assert api.login('ana', 'x')['name'] == 'Ana'
    assert api.current_user()['role'] == 'admin'
    api.get('/api/clients')

    api.logout()
    assert api.cache == {}
