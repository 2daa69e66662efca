# frontend/pages.py
"""
Page view-models: each page fetches its collections through the API client
and derives what is shown (search, filters, sort order, dashboard counts)
from the fetched data only.
"""
import logging

from frontend.api_client import ApiError
from frontend.forms import ClientForm, ServiceForm, QuoteForm, WorkOrderForm, UserForm

logger = logging.getLogger(__name__)

LOADING = 'loading'
ERROR = 'error'
READY = 'ready'

RECENT_LIMIT = 5


def search(records, query, fields):
    """
    Case-insensitive substring search.

    ``fields`` holds record keys or callables returning the text to match.
    An empty query matches everything.
    """
    query = (query or '').strip().lower()
    if not query:
        return list(records)

    def texts(record):
        for field in fields:
            value = field(record) if callable(field) else record.get(field)
            if value is not None:
                yield str(value).lower()

    return [record for record in records if any(query in text for text in texts(record))]


def names_by_id(records, key='name'):
    return {record['id']: record.get(key) or '' for record in records}


def filter_clients(clients, query):
    return search(clients, query, ('name', 'contactName', 'email', 'phone', 'city', 'state'))


def filter_services(services, query, clients=(), status=None):
    client_names = names_by_id(clients)
    results = search(services, query, (
        'id',
        lambda s: client_names.get(s.get('clientId')),
        'serviceType',
        'description',
    ))
    if status and status != 'all':
        results = [s for s in results if s.get('status') == status]
    return results


def filter_quotes(quotes, query, clients=(), status=None):
    client_names = names_by_id(clients)
    results = search(quotes, query, (
        'id',
        lambda q: client_names.get(q.get('clientId')),
        'description',
    ))
    if status and status != 'all':
        results = [q for q in results if q.get('status') == status]
    return results


def filter_work_orders(work_orders, query, clients=(), services=(), status=None):
    client_names = names_by_id(clients)
    services_by_id = {service['id']: service for service in services}

    def service_text(work_order):
        service = services_by_id.get(work_order.get('serviceId')) or {}
        return ' '.join(filter(None, (service.get('serviceType'), service.get('description'))))

    results = search(work_orders, query, (
        'id',
        lambda w: client_names.get(w.get('clientId')),
        service_text,
        'description',
    ))
    if status and status != 'all':
        results = [w for w in results if w.get('status') == status]
    return results


def filter_users(users, query, role=None):
    results = search(users, query, ('name', 'username', 'email'))
    if role and role != 'all':
        results = [u for u in results if u.get('role') == role]
    return results


def _created_key(record):
    return (record.get('createdAt') or '', record.get('id') or 0)


def sort_records(records, mode, clients=()):
    """
    Sort by one of: recent, oldest, deadline, client, value-high, value-low.
    Records without a scheduled date go last under 'deadline'.
    """
    records = list(records)
    if mode == 'recent':
        return sorted(records, key=_created_key, reverse=True)
    if mode == 'oldest':
        return sorted(records, key=_created_key)
    if mode == 'deadline':
        return sorted(records, key=lambda r: (r.get('scheduledDate') is None, r.get('scheduledDate') or '', r.get('id') or 0))
    if mode == 'client':
        client_names = names_by_id(clients)
        return sorted(records, key=lambda r: (client_names.get(r.get('clientId'), '').lower(), r.get('id') or 0))
    if mode == 'value-high':
        return sorted(records, key=lambda r: r.get('total') or 0, reverse=True)
    if mode == 'value-low':
        return sorted(records, key=lambda r: r.get('total') or 0)
    raise ValueError(f"Unknown sort mode: {mode}")


def dashboard_stats(services, quotes, clients):
    """Dashboard counts, computed from already fetched collections"""
    return {
        'activeServices': sum(1 for s in services if s.get('status') == 'in_progress'),
        'completedServices': sum(1 for s in services if s.get('status') == 'completed'),
        'pendingQuotes': sum(1 for q in quotes if q.get('status') == 'pending'),
        'totalClients': len(clients),
        'recentServices': sort_records(services, 'recent')[:RECENT_LIMIT],
        'recentQuotes': sort_records(quotes, 'recent')[:RECENT_LIMIT],
    }


class Page:
    """Fetches ``sources`` (name -> API path) and tracks loading/error/ready"""
    sources = {}
    form_class = None

    def __init__(self, client):
        self.client = client
        self.data = {name: [] for name in self.sources}
        self.state = LOADING
        self.error = None
        self.dialog = None

    def paths(self):
        return dict(self.sources)

    def load(self):
        """
        Fetch every source. On failure the page keeps whatever was cached
        before and switches to the error state.
        """
        self.state = LOADING
        self.error = None
        for name, path in self.paths().items():
            try:
                self.data[name] = self.client.get(path)
            except ApiError as e:
                logger.warning(f"{type(self).__name__}: loading {path} failed: {e.message}")
                self.data[name] = self.client.cached(path, self.data.get(name))
                self.error = e.message
                self.state = ERROR
        if self.state != ERROR:
            self.state = READY
        return self.state

    @property
    def is_loading(self):
        return self.state == LOADING

    def open_form(self, record=None):
        self.dialog = self.form_class(self.client, record)
        return self.dialog

    def submit_dialog(self):
        """Submit the open form; a successful save closes it and refetches"""
        result = self.dialog.submit()
        if result is not None:
            self.dialog = None
            self.load()
        return result


class DashboardPage(Page):
    sources = {'services': '/api/services', 'quotes': '/api/quotes', 'clients': '/api/clients'}

    def stats(self):
        return dashboard_stats(self.data['services'], self.data['quotes'], self.data['clients'])


class ClientsPage(Page):
    sources = {'clients': '/api/clients'}
    form_class = ClientForm

    def __init__(self, client):
        super().__init__(client)
        self.query = ''

    def visible(self):
        return filter_clients(self.data['clients'], self.query)


class ServicesPage(Page):
    sources = {'services': '/api/services', 'clients': '/api/clients'}
    form_class = ServiceForm
    sort_modes = ('recent', 'oldest', 'deadline', 'client')

    def __init__(self, client):
        super().__init__(client)
        self.query = ''
        self.status = 'all'
        self.sort = 'recent'

    def visible(self):
        clients = self.data['clients']
        services = filter_services(self.data['services'], self.query, clients, self.status)
        return sort_records(services, self.sort, clients)

    def open_form(self, record=None):
        items = self.client.get(f"/api/services/{record['id']}/items") if record else None
        self.dialog = ServiceForm(self.client, record, items)
        return self.dialog


class QuotesPage(Page):
    sources = {'quotes': '/api/quotes', 'clients': '/api/clients'}
    form_class = QuoteForm
    sort_modes = ('recent', 'oldest', 'value-high', 'value-low', 'client')

    def __init__(self, client):
        super().__init__(client)
        self.query = ''
        self.status = 'all'
        self.sort = 'recent'

    def visible(self):
        clients = self.data['clients']
        quotes = filter_quotes(self.data['quotes'], self.query, clients, self.status)
        return sort_records(quotes, self.sort, clients)

    def open_form(self, record=None):
        items = self.client.get(f"/api/quotes/{record['id']}/items") if record else None
        self.dialog = QuoteForm(self.client, record, items)
        return self.dialog


class WorkOrdersPage(Page):
    sources = {
        'workOrders': '/api/work-orders',
        'clients': '/api/clients',
        'services': '/api/services',
        'users': '/api/users',
    }
    form_class = WorkOrderForm
    sort_modes = ('recent', 'oldest', 'deadline', 'client')

    def __init__(self, client):
        super().__init__(client)
        self.query = ''
        self.status = 'all'
        self.sort = 'recent'

    def visible(self):
        clients = self.data['clients']
        work_orders = filter_work_orders(
            self.data['workOrders'], self.query, clients, self.data['services'], self.status
        )
        return sort_records(work_orders, self.sort, clients)

    def technician_names(self, work_order):
        names = names_by_id(self.data['users'])
        return [names[user_id] for user_id in work_order.get('technicianIds', []) if user_id in names]


class UsersPage(Page):
    sources = {'users': '/api/users'}
    form_class = UserForm

    def __init__(self, client):
        super().__init__(client)
        self.query = ''
        self.role = 'all'

    def visible(self):
        return filter_users(self.data['users'], self.query, self.role)


class ClientDetailPage(Page):
    """One client with its services and quotes"""

    def __init__(self, client, client_id):
        self.client_id = client_id
        self.sources = {
            'client': f'/api/clients/{client_id}',
            'services': f'/api/services?clientId={client_id}',
            'quotes': f'/api/quotes?clientId={client_id}',
        }
        super().__init__(client)
        self.data['client'] = None

    def open_form(self, record=None):
        self.dialog = ClientForm(self.client, record or self.data['client'])
        return self.dialog


class QuoteDetailPage(Page):
    """One quote with its items"""

    def __init__(self, client, quote_id):
        self.quote_id = quote_id
        self.sources = {
            'quote': f'/api/quotes/{quote_id}',
            'items': f'/api/quotes/{quote_id}/items',
        }
        super().__init__(client)
        self.data['quote'] = None

    def open_form(self, record=None):
        self.dialog = QuoteForm(self.client, record or self.data['quote'], self.data['items'])
        return self.dialog


class ServiceDetailPage(Page):
    """One service with its items and client, and the PDF action"""

    def __init__(self, client, service_id):
        self.service_id = service_id
        self.sources = {
            'service': f'/api/services/{service_id}',
            'items': f'/api/services/{service_id}/items',
        }
        super().__init__(client)
        self.data['service'] = None
        self.data['client'] = None

    def paths(self):
        paths = dict(self.sources)
        # the client is known only once the service has loaded
        service = self.data.get('service')
        if service and service.get('clientId'):
            paths['client'] = f"/api/clients/{service['clientId']}"
        return paths

    def load(self):
        super().load()
        if self.state == READY and self.data['client'] is None and self.data['service']:
            return super().load()
        return self.state

    @property
    def items_total(self):
        return sum(item.get('total') or 0 for item in self.data['items'])

    def open_form(self, record=None):
        self.dialog = ServiceForm(self.client, record or self.data['service'], self.data['items'])
        return self.dialog

    def generate_pdf(self):
        """Ask the server for a fresh PDF; returns its path, or None with ``error`` set"""
        self.error = None
        try:
            result = self.client.post(f'/api/services/{self.service_id}/generate-pdf')
        except ApiError as e:
            logger.warning(f"PDF generation for service {self.service_id} failed: {e.message}")
            self.error = e.message
            return None

        self.client.invalidate('/api/services')
        if self.data['service'] is not None:
            self.data['service']['pdfPath'] = result['pdfPath']
        return result['pdfPath']
