from frontend.forms import ClientForm, PhotoUpload, QuoteForm, ServiceForm, UserForm, WorkOrderForm


def test_client_form_creates_and_invalidates(api, fake_session):
    fake_session.on('POST', '/api/clients', status=201, body={'id': 7, 'name': 'Acme'})
    api.cache['/api/clients'] = []

    form = ClientForm(api)
    form.set('name', ' Acme ')
    form.set('email', 'contato@acme.com')

    assert form.submit() == {'id': 7, 'name': 'Acme'}
    assert fake_session.calls[0]['json']['name'] == 'Acme'
    assert '/api/clients' not in api.cache
    assert form.is_open is False


def test_client_form_local_errors_block_the_request(api, fake_session):
    form = ClientForm(api)
    form.set('email', 'not-an-email')

    assert form.submit() is None
    assert form.errors == {'name': 'Campo obrigatório', 'email': 'Email inválido'}
    assert fake_session.calls == []


def test_server_error_keeps_form_open(api, fake_session):
    fake_session.on('PUT', '/api/clients/3', status=400, body={'error': 'Client 3 does not exist'})
    form = ClientForm(api, {'id': 3, 'name': 'Acme'})

    assert form.submit() is None
    assert form.error == 'Client 3 does not exist'
    assert form.is_open is True
    assert form.pending is False


def test_user_form_requires_password_on_create(api):
    form = UserForm(api)
    form.values.update({'username': 'joao', 'name': 'João', 'email': 'joao@sam.com'})

    assert form.validate() is False
    assert form.errors == {'password': 'Campo obrigatório'}


def test_user_form_edit_omits_blank_password(api, fake_session):
    record = {'id': 4, 'username': 'joao', 'name': 'João', 'email': 'joao@sam.com',
              'role': 'technician', 'isActive': True}
    fake_session.on('PUT', '/api/users/4', body=dict(record, name='João Pedro'))
    api.cache['/api/user'] = {'id': 1}

    form = UserForm(api, record)
    form.set('name', 'João Pedro')
    form.set('password', '')

    assert form.submit()['name'] == 'João Pedro'
    assert 'password' not in fake_session.calls[0]['json']
    assert '/api/user' not in api.cache


def test_work_order_technician_ids(api, fake_session):
    fake_session.on('POST', '/api/work-orders', status=201, body={'id': 1})
    form = WorkOrderForm(api)
    form.values.update({'clientId': '1', 'serviceId': 2, 'technicianIds': [3, '3', 5]})

    form.submit()

    assert fake_session.calls[0]['json']['technicianIds'] == [3, 5]
    assert fake_session.calls[0]['json']['clientId'] == 1


def test_quote_items_and_total(api):
    form = QuoteForm(api)

    assert form.add_item('material', 'Tubo de cobre', 3, '12,50')['total'] == 3750
    assert form.add_item('labor', 'Instalação', 1, 20000)['total'] == 20000
    assert form.total == 23750

    assert form.add_item('labor', '', 0, 'abc') is None
    assert set(form.item_errors) == {'description', 'quantity', 'unitPrice'}
    assert len(form.items) == 2

    form.remove_item(0)
    assert form.total == 20000


def test_quote_save_posts_items_after_quote(api, fake_session):
    fake_session.on('POST', '/api/quotes', status=201, body={'id': 9, 'total': 0})
    fake_session.on('POST', '/api/quotes/9/items', status=201,
                    body={'id': 30, 'quoteId': 9, 'total': 5000})

    form = QuoteForm(api)
    form.set('clientId', 1)
    form.add_item('labor', 'Limpeza', 2, 2500)
    quote = form.submit()

    assert fake_session.paths() == ['/api/quotes', '/api/quotes/9/items']
    assert fake_session.calls[0]['json']['total'] == 5000
    assert fake_session.calls[1]['json'] == {
        'type': 'labor', 'description': 'Limpeza', 'quantity': 2, 'unitPrice': 2500,
    }
    assert quote['total'] == 5000
    assert form.items[0]['id'] == 30


def test_quote_edit_deletes_removed_items(api, fake_session):
    record = {'id': 9, 'clientId': 1, 'status': 'pending'}
    items = [{'id': 30, 'type': 'labor', 'description': 'Limpeza', 'quantity': 2,
              'unitPrice': 2500, 'total': 5000}]
    fake_session.on('PUT', '/api/quotes/9', body=dict(record, total=5000))
    fake_session.on('DELETE', '/api/quotes/9/items/30', body={'message': 'Item deleted'})

    form = QuoteForm(api, record, items)
    form.remove_item(0)
    form.submit()

    assert fake_session.paths() == ['/api/quotes/9', '/api/quotes/9/items/30']
    assert fake_session.calls[0]['json']['total'] == 0


def test_failed_item_post_retries_as_update(api, fake_session):
    fake_session.on('POST', '/api/quotes', status=201, body={'id': 9})
    fake_session.routes[('POST', '/api/quotes/9/items')] = [
        (500, {'error': 'Database error'}),
        (201, {'id': 31, 'total': 100}),
    ]
    fake_session.on('PUT', '/api/quotes/9', body={'id': 9})

    form = QuoteForm(api)
    form.set('clientId', 1)
    form.add_item('material', 'Fita', 1, 100)

    assert form.submit() is None
    assert form.error == 'Database error'
    assert form.submit() is not None
    assert fake_session.paths('POST') == ['/api/quotes', '/api/quotes/9/items', '/api/quotes/9/items']
    assert fake_session.paths('PUT') == ['/api/quotes/9']


def test_photo_upload_success(api, fake_session):
    fake_session.on('POST', '/api/users/2/photo',
                    body={'id': 2, 'photoUrl': '/uploads/photos/new.png'})
    api.cache['/api/users'] = []

    dialog = PhotoUpload(api, {'id': 2, 'photoUrl': None})
    assert dialog.upload('eu.png', b'\x89PNG', 'image/png') is True
    assert dialog.photo_url == '/uploads/photos/new.png'
    assert dialog.is_open is False
    assert '/api/users' not in api.cache


def test_photo_upload_failure_keeps_old_photo(api, fake_session):
    fake_session.on('POST', '/api/users/2/photo', status=400, body={'error': 'Invalid image file'})

    dialog = PhotoUpload(api, {'id': 2, 'photoUrl': '/uploads/photos/old.png'})
    assert dialog.upload('eu.png', b'garbage', 'image/png') is False
    assert dialog.photo_url == '/uploads/photos/old.png'
    assert dialog.is_open is True
    assert dialog.error == 'Invalid image file'


def test_photo_upload_local_checks(api, fake_session):
    dialog = PhotoUpload(api, {'id': 2})

    assert dialog.upload('notes.txt', b'hello', 'text/plain') is False
    assert dialog.upload('big.png', b'0' * (5 * 1024 * 1024 + 1), 'image/png') is False
    assert fake_session.calls == []


def test_user_form_sends_password_unstripped(api, fake_session):
    fake_session.on('POST', '/api/users', status=201, body={'id': 5})
    form = UserForm(api)
    form.values.update({'username': 'joao', 'name': 'João', 'email': 'joao@sam.com', 'password': ' senha '})

    form.submit()

    assert fake_session.calls[0]['json']['password'] == ' senha '


def test_forms_do_not_share_list_defaults(api):
    WorkOrderForm(api).values['technicianIds'].append(7)
    assert WorkOrderForm(api).values['technicianIds'] == []


def test_editing_does_not_touch_the_record(api):
    record = {'id': 1, 'clientId': 1, 'serviceId': 2, 'technicianIds': [3]}
    WorkOrderForm(api, record).values['technicianIds'].append(4)
    assert record['technicianIds'] == [3]


def test_failed_item_delete_retries_only_the_rest(api, fake_session):
    record = {'id': 9, 'clientId': 1, 'status': 'pending'}
    items = [
        {'id': 30, 'type': 'labor', 'description': 'Limpeza', 'quantity': 1, 'unitPrice': 100, 'total': 100},
        {'id': 31, 'type': 'labor', 'description': 'Visita', 'quantity': 1, 'unitPrice': 200, 'total': 200},
    ]
    fake_session.on('PUT', '/api/quotes/9', body=record)
    fake_session.routes[('DELETE', '/api/quotes/9/items/30')] = [(200, {'message': 'Item deleted'})]
    fake_session.routes[('DELETE', '/api/quotes/9/items/31')] = [
        (500, {'error': 'Database error'}),
        (200, {'message': 'Item deleted'}),
    ]

    form = QuoteForm(api, record, items)
    form.remove_item(0)
    form.remove_item(0)

    assert form.submit() is None
    assert form.removed_item_ids == [31]

    assert form.submit() is not None
    assert fake_session.paths('DELETE') == [
        '/api/quotes/9/items/30', '/api/quotes/9/items/31', '/api/quotes/9/items/31',
    ]
    assert form.removed_item_ids == []


def test_service_form_posts_items_after_service(api, fake_session):
    fake_session.on('POST', '/api/services', status=201, body={'id': 4, 'clientId': 1})
    fake_session.on('POST', '/api/services/4/items', status=201, body={'id': 40, 'serviceId': 4, 'total': 3000})
    api.cache['/api/services/4/items'] = []

    form = ServiceForm(api)
    form.values.update({'clientId': 1, 'serviceType': 'Instalação'})
    assert form.add_item('material', 'Suporte', 2, '15,00')['total'] == 3000
    assert form.total == 3000

    service = form.submit()

    assert service['id'] == 4
    assert fake_session.paths() == ['/api/services', '/api/services/4/items']
    assert 'total' not in fake_session.calls[0]['json']
    assert fake_session.calls[1]['json'] == {
        'type': 'material', 'description': 'Suporte', 'quantity': 2, 'unitPrice': 1500,
    }
    assert form.items[0]['id'] == 40
    assert '/api/services/4/items' not in api.cache


def test_service_form_edit_deletes_removed_items(api, fake_session):
    record = {'id': 4, 'clientId': 1, 'serviceType': 'Instalação', 'status': 'pending'}
    items = [{'id': 40, 'type': 'material', 'description': 'Suporte', 'quantity': 2,
              'unitPrice': 1500, 'total': 3000}]
    fake_session.on('PUT', '/api/services/4', body=record)
    fake_session.on('DELETE', '/api/services/4/items/40', body={'message': 'Item deleted'})

    form = ServiceForm(api, record, items)
    form.remove_item(0)
    form.submit()

    assert fake_session.paths() == ['/api/services/4', '/api/services/4/items/40']
