import pytest

from frontend.pages import (
    ClientDetailPage, ClientsPage, DashboardPage, QuotesPage, ServiceDetailPage, ServicesPage,
    WorkOrdersPage, dashboard_stats, filter_clients, filter_services, sort_records,
)

CLIENTS = [
    {'id': 1, 'name': 'Globex Refrigeração', 'city': 'São Paulo'},
    {'id': 2, 'name': 'Initech', 'city': 'Campinas'},
]

SERVICES = [
    {'id': 1, 'clientId': 2, 'serviceType': 'Manutenção', 'status': 'in_progress',
     'scheduledDate': '2026-06-10', 'createdAt': '2026-05-01T10:00:00'},
    {'id': 2, 'clientId': 1, 'serviceType': 'Instalação', 'status': 'completed',
     'scheduledDate': None, 'createdAt': '2026-05-03T10:00:00'},
    {'id': 3, 'clientId': 1, 'serviceType': 'Limpeza', 'status': 'in_progress',
     'scheduledDate': '2026-06-01', 'createdAt': '2026-05-02T10:00:00'},
]

QUOTES = [
    {'id': 1, 'clientId': 1, 'status': 'pending', 'total': 5000, 'createdAt': '2026-05-01T09:00:00'},
    {'id': 2, 'clientId': 2, 'status': 'approved', 'total': 90000, 'createdAt': '2026-05-02T09:00:00'},
    {'id': 3, 'clientId': 2, 'status': 'pending', 'total': 120, 'createdAt': '2026-05-03T09:00:00'},
]


def test_client_search_is_case_insensitive():
    assert [c['name'] for c in filter_clients(CLIENTS, 'glo')] == ['Globex Refrigeração']
    assert filter_clients(CLIENTS, '') == CLIENTS
    assert filter_clients(CLIENTS, 'campinas')[0]['id'] == 2


def test_service_search_matches_client_name_and_status():
    found = filter_services(SERVICES, 'globex', CLIENTS)
    assert [s['id'] for s in found] == [2, 3]
    assert [s['id'] for s in filter_services(SERVICES, 'globex', CLIENTS, 'completed')] == [2]


def test_dashboard_counts():
    services = [{'id': 1, 'status': 'in_progress'}, {'id': 2, 'status': 'completed'},
                {'id': 3, 'status': 'in_progress'}]
    stats = dashboard_stats(services, QUOTES, CLIENTS)

    assert stats['activeServices'] == 2
    assert stats['completedServices'] == 1
    assert stats['pendingQuotes'] == 2
    assert stats['totalClients'] == 2


def test_dashboard_recent_lists_are_capped():
    quotes = [{'id': i, 'status': 'pending', 'createdAt': f'2026-05-{i:02d}'} for i in range(1, 9)]
    stats = dashboard_stats([], quotes, [])
    assert [q['id'] for q in stats['recentQuotes']] == [8, 7, 6, 5, 4]


@pytest.mark.parametrize('mode, expected', [
    ('recent', [2, 3, 1]),
    ('oldest', [1, 3, 2]),
    ('deadline', [3, 1, 2]),
    ('client', [2, 3, 1]),
])
def test_service_sorts(mode, expected):
    assert [s['id'] for s in sort_records(SERVICES, mode, CLIENTS)] == expected


def test_quote_value_sorts():
    assert [q['id'] for q in sort_records(QUOTES, 'value-high')] == [2, 1, 3]
    assert [q['id'] for q in sort_records(QUOTES, 'value-low')] == [3, 1, 2]
    with pytest.raises(ValueError):
        sort_records(QUOTES, 'alphabetical')


def test_dashboard_page_loads(api, fake_session):
    fake_session.on('GET', '/api/services', body=SERVICES)
    fake_session.on('GET', '/api/quotes', body=QUOTES)
    fake_session.on('GET', '/api/clients', body=CLIENTS)

    page = DashboardPage(api)
    assert page.load() == 'ready'
    assert page.stats()['activeServices'] == 2


def test_failed_load_keeps_cached_data(api, fake_session):
    fake_session.routes[('GET', '/api/clients')] = [(200, CLIENTS), (500, {'error': 'Database error'})]
    page = ClientsPage(api)
    assert page.load() == 'ready'

    api.invalidate('/api/clients')
    assert page.load() == 'error'
    assert page.error == 'Database error'
    assert page.data['clients'] == CLIENTS


def test_client_page_search_and_save(api, fake_session):
    fake_session.routes[('GET', '/api/clients')] = [(200, CLIENTS), (200, CLIENTS + [{'id': 3, 'name': 'Umbrella'}])]
    fake_session.on('POST', '/api/clients', status=201, body={'id': 3, 'name': 'Umbrella'})

    page = ClientsPage(api)
    page.load()
    page.query = 'ini'
    assert [c['id'] for c in page.visible()] == [2]

    form = page.open_form()
    form.set('name', 'Umbrella')
    assert page.submit_dialog() == {'id': 3, 'name': 'Umbrella'}
    assert page.dialog is None
    assert len(page.data['clients']) == 3


def test_quotes_page_status_filter_and_sort(api, fake_session):
    fake_session.on('GET', '/api/quotes', body=QUOTES)
    fake_session.on('GET', '/api/clients', body=CLIENTS)

    page = QuotesPage(api)
    page.load()
    page.status = 'pending'
    page.sort = 'value-high'
    assert [q['id'] for q in page.visible()] == [1, 3]


def test_quotes_page_edit_loads_items(api, fake_session):
    fake_session.on('GET', '/api/quotes/1/items', body=[
        {'id': 10, 'type': 'labor', 'description': 'Visita', 'quantity': 1, 'unitPrice': 5000, 'total': 5000},
    ])
    form = QuotesPage(api).open_form(QUOTES[0])
    assert form.total == 5000


def test_work_order_technician_names(api, fake_session):
    fake_session.on('GET', '/api/work-orders', body=[{'id': 1, 'clientId': 1, 'serviceId': 2,
                                                      'technicianIds': [5, 9], 'status': 'pending'}])
    fake_session.on('GET', '/api/clients', body=CLIENTS)
    fake_session.on('GET', '/api/services', body=SERVICES)
    fake_session.on('GET', '/api/users', body=[{'id': 5, 'name': 'Bruno Lima'}])

    page = WorkOrdersPage(api)
    page.load()
    page.query = 'instalação'
    [work_order] = page.visible()
    assert page.technician_names(work_order) == ['Bruno Lima']


def test_client_detail_page_sources(api, fake_session):
    fake_session.on('GET', '/api/clients/1', body=CLIENTS[0])
    fake_session.on('GET', '/api/services?clientId=1', body=SERVICES[1:])
    fake_session.on('GET', '/api/quotes?clientId=1', body=QUOTES[:1])

    page = ClientDetailPage(api, 1)
    assert page.load() == 'ready'
    assert page.data['client']['name'] == 'Globex Refrigeração'
    assert page.open_form().record == CLIENTS[0]


def test_services_page_deadline_sort(api, fake_session):
    fake_session.on('GET', '/api/services', body=SERVICES)
    fake_session.on('GET', '/api/clients', body=CLIENTS)

    page = ServicesPage(api)
    page.load()
    page.sort = 'deadline'
    assert [s['id'] for s in page.visible()] == [3, 1, 2]


def test_services_page_edit_loads_items(api, fake_session):
    fake_session.on('GET', '/api/services/1/items', body=[
        {'id': 10, 'type': 'labor', 'description': 'Revisão', 'quantity': 2, 'unitPrice': 4000, 'total': 8000},
    ])
    form = ServicesPage(api).open_form(SERVICES[0])
    assert form.total == 8000


def _service_detail_routes(fake_session):
    fake_session.on('GET', '/api/services/2', body=dict(SERVICES[1], pdfPath=None))
    fake_session.on('GET', '/api/services/2/items', body=[
        {'id': 20, 'type': 'material', 'description': 'Split 12000 BTUs', 'quantity': 1,
         'unitPrice': 250000, 'total': 250000},
        {'id': 21, 'type': 'labor', 'description': 'Instalação', 'quantity': 1,
         'unitPrice': 40000, 'total': 40000},
    ])
    fake_session.on('GET', '/api/clients/1', body=CLIENTS[0])


def test_service_detail_page_loads_service_items_and_client(api, fake_session):
    _service_detail_routes(fake_session)

    page = ServiceDetailPage(api, 2)
    assert page.load() == 'ready'
    assert page.data['service']['serviceType'] == 'Instalação'
    assert page.data['client']['name'] == 'Globex Refrigeração'
    assert page.items_total == 290000

    form = page.open_form()
    assert form.record['id'] == 2
    assert form.total == 290000


def test_service_detail_page_generates_pdf(api, fake_session):
    _service_detail_routes(fake_session)
    fake_session.on('POST', '/api/services/2/generate-pdf', body={'pdfPath': '/pdf/service_2_100.pdf'})

    page = ServiceDetailPage(api, 2)
    page.load()

    assert page.generate_pdf() == '/pdf/service_2_100.pdf'
    assert page.data['service']['pdfPath'] == '/pdf/service_2_100.pdf'
    assert '/api/services/2' not in api.cache


def test_service_detail_page_pdf_failure(api, fake_session):
    _service_detail_routes(fake_session)
    fake_session.on('POST', '/api/services/2/generate-pdf', status=500, body={'error': 'Failed to generate PDF'})

    page = ServiceDetailPage(api, 2)
    page.load()

    assert page.generate_pdf() is None
    assert page.error == 'Failed to generate PDF'
