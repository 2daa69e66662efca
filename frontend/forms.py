# frontend/forms.py
"""
Create/edit forms for the client shell.

A form holds field values keyed by their API names, checks them locally, and
on submit sends POST (new record) or PUT (existing record). Success
invalidates the cached collections the change touches and closes the form;
failure keeps it open with the server's message.
"""
import re
import copy
import logging
from datetime import date

from frontend.api_client import ApiError
from frontend.formatting import parse_currency

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
MAX_PHOTO_SIZE = 5 * 1024 * 1024

SERVICE_STATUSES = ('pending', 'in_progress', 'completed', 'cancelled')
QUOTE_STATUSES = ('pending', 'approved', 'rejected')
ITEM_TYPES = ('material', 'labor')
ROLES = ('admin', 'technician')


class FieldError(ValueError):
    pass


class Field:
    """One form input: presence and type rules for a single API key"""

    def __init__(self, name, kind='text', required=False, choices=None, minimum=None, default=None):
        self.name = name
        self.kind = kind
        self.required = required
        self.choices = choices
        self.minimum = minimum
        self.default = default

    def is_blank(self, value):
        return value is None or (isinstance(value, str) and not value.strip()) or value == []

    def clean(self, value):
        """Parsed value for the payload; raises FieldError with a message for the user"""
        if self.is_blank(value):
            if self.required:
                raise FieldError('Campo obrigatório')
            return [] if self.kind == 'ids' else None

        parser = getattr(self, f'_clean_{self.kind}')
        return parser(value)

    def _clean_text(self, value):
        return str(value).strip()

    def _clean_password(self, value):
        return str(value)

    def _clean_email(self, value):
        value = str(value).strip()
        if not re.match(EMAIL_PATTERN, value):
            raise FieldError('Email inválido')
        return value

    def _clean_choice(self, value):
        if value not in self.choices:
            raise FieldError(f"Valor inválido: {value}")
        return value

    def _clean_int(self, value):
        if isinstance(value, bool):
            raise FieldError('Informe um número inteiro')
        try:
            number = int(str(value).strip())
        except ValueError:
            raise FieldError('Informe um número inteiro')
        return self._check_minimum(number)

    def _clean_money(self, value):
        # ints are already cents, typed text is reais
        if isinstance(value, int) and not isinstance(value, bool):
            cents = value
        else:
            try:
                cents = parse_currency(value)
            except ValueError:
                raise FieldError('Valor monetário inválido')
        return self._check_minimum(cents)

    def _clean_date(self, value):
        if isinstance(value, date):
            return value.isoformat()
        try:
            return date.fromisoformat(str(value).strip()[:10]).isoformat()
        except ValueError:
            raise FieldError('Data inválida')

    def _clean_bool(self, value):
        return bool(value)

    def _clean_ids(self, value):
        ids = []
        for raw in value:
            user_id = self._clean_int(raw)
            if user_id not in ids:
                ids.append(user_id)
        return ids

    def _check_minimum(self, number):
        if self.minimum is not None and number < self.minimum:
            raise FieldError(f"Valor mínimo: {self.minimum}")
        return number


class Form:
    endpoint = None
    fields = ()
    invalidates = ()

    def __init__(self, client, record=None):
        self.client = client
        self.record = record
        self.values = {}
        for field in self.fields:
            if record is not None and field.name in record:
                self.values[field.name] = copy.copy(record[field.name])
            else:
                self.values[field.name] = copy.copy(field.default)
        self.errors = {}
        self.error = None
        self.pending = False
        self.is_open = True

    @property
    def is_edit(self):
        return self.record is not None

    def set(self, name, value):
        self.values[name] = value
        self.errors.pop(name, None)

    def validate(self):
        """Check every field; True when the form can be submitted"""
        self.errors = {}
        self._cleaned = {}
        for field in self.fields:
            try:
                self._cleaned[field.name] = field.clean(self.values.get(field.name))
            except FieldError as e:
                self.errors[field.name] = str(e)
        return not self.errors

    def payload(self):
        return dict(self._cleaned)

    def save(self, payload):
        if self.is_edit:
            return self.client.put(f"{self.endpoint}/{self.record['id']}", payload)
        return self.client.post(self.endpoint, payload)

    def invalidated_paths(self, result):
        return self.invalidates or (self.endpoint,)

    def submit(self):
        """
        Validate and send the form.

        Returns:
            the saved record, or None when validation or the request failed
        """
        if not self.validate():
            return None

        payload = self.payload()
        self.pending = True
        self.error = None
        try:
            result = self.save(payload)
        except ApiError as e:
            logger.warning(f"{type(self).__name__} submit failed: {e.message}")
            self.error = e.message
            return None
        finally:
            self.pending = False

        self.client.invalidate(*self.invalidated_paths(result))
        self.is_open = False
        return result

    def close(self):
        self.is_open = False


class ClientForm(Form):
    endpoint = '/api/clients'
    fields = (
        Field('name', required=True),
        Field('contactName'),
        Field('email', kind='email'),
        Field('phone'),
        Field('address'),
        Field('city'),
        Field('state'),
        Field('zip'),
    )


class UserForm(Form):
    """
    Password is required for new users. When editing, a blank password is
    left out of the payload so the current one is kept.
    """
    endpoint = '/api/users'
    invalidates = ('/api/users', '/api/user')
    fields = (
        Field('username', required=True),
        Field('name', required=True),
        Field('email', kind='email', required=True),
        Field('role', kind='choice', choices=ROLES, required=True, default='technician'),
        Field('isActive', kind='bool', default=True),
        Field('password', kind='password'),
    )

    def validate(self):
        valid = super().validate()
        if not self.is_edit and not self._cleaned.get('password'):
            self.errors['password'] = 'Campo obrigatório'
            valid = False
        return valid

    def payload(self):
        data = super().payload()
        if not data.get('password'):
            data.pop('password', None)
        return data


ITEM_FIELDS = (
    Field('type', kind='choice', choices=ITEM_TYPES, required=True, default='material'),
    Field('description', required=True),
    Field('quantity', kind='int', required=True, minimum=1, default=1),
    Field('unitPrice', kind='money', required=True, minimum=0),
)


class ItemListForm(Form):
    """
    A record with a local list of material/labor items. Item totals are
    computed here; on save the record goes first, then removed items are
    deleted and new ones posted to ``{endpoint}/:id/items``.
    """

    def __init__(self, client, record=None, items=None):
        super().__init__(client, record)
        self.items = [dict(item) for item in (items or [])]
        self.removed_item_ids = []
        self.item_errors = {}

    def add_item(self, type, description, quantity, unit_price):
        """Validate and append an item; returns it, or None with item_errors set"""
        raw = {'type': type, 'description': description, 'quantity': quantity, 'unitPrice': unit_price}
        self.item_errors = {}
        item = {}
        for field in ITEM_FIELDS:
            try:
                item[field.name] = field.clean(raw[field.name])
            except FieldError as e:
                self.item_errors[field.name] = str(e)
        if self.item_errors:
            return None

        item['total'] = item['quantity'] * item['unitPrice']
        self.items.append(item)
        return item

    def remove_item(self, index):
        item = self.items.pop(index)
        if item.get('id'):
            self.removed_item_ids.append(item['id'])
        return item

    @property
    def total(self):
        return sum(item['quantity'] * item['unitPrice'] for item in self.items)

    def save(self, payload):
        record = super().save(payload)
        items_path = f"{self.endpoint}/{record['id']}/items"
        # a retry after a failed item request updates this record instead of creating another
        self.record = record

        # an id leaves the list only once its delete went through
        while self.removed_item_ids:
            self.client.delete(f"{items_path}/{self.removed_item_ids[0]}")
            self.removed_item_ids.pop(0)

        for item in self.items:
            if item.get('id'):
                continue
            created = self.client.post(items_path, {
                'type': item['type'],
                'description': item['description'],
                'quantity': item['quantity'],
                'unitPrice': item['unitPrice'],
            })
            item.update(created)
        return record


class ServiceForm(ItemListForm):
    endpoint = '/api/services'
    fields = (
        Field('clientId', kind='int', required=True, minimum=1),
        Field('serviceType', required=True),
        Field('description'),
        Field('status', kind='choice', choices=SERVICE_STATUSES, required=True, default='pending'),
        Field('scheduledDate', kind='date'),
        Field('completedDate', kind='date'),
    )


class WorkOrderForm(Form):
    endpoint = '/api/work-orders'
    fields = (
        Field('clientId', kind='int', required=True, minimum=1),
        Field('serviceId', kind='int', required=True, minimum=1),
        Field('description'),
        Field('status', kind='choice', choices=SERVICE_STATUSES, required=True, default='pending'),
        Field('scheduledDate', kind='date'),
        Field('completedDate', kind='date'),
        Field('technicianIds', kind='ids', default=[]),
    )


class QuoteForm(ItemListForm):
    """Quote whose total is the sum of its item totals"""
    endpoint = '/api/quotes'
    fields = (
        Field('clientId', kind='int', required=True, minimum=1),
        Field('serviceId', kind='int', minimum=1),
        Field('description'),
        Field('status', kind='choice', choices=QUOTE_STATUSES, required=True, default='pending'),
        Field('validUntil', kind='date'),
    )

    def payload(self):
        data = super().payload()
        data['total'] = self.total
        return data

    def save(self, payload):
        quote = super().save(payload)
        if self.items:
            quote['total'] = self.total
        return quote


class PhotoUpload:
    """
    Profile photo dialog. The upload is one multipart request; a failure
    leaves photo_url untouched and the dialog open.
    """

    def __init__(self, client, user):
        self.client = client
        self.user = user
        self.photo_url = user.get('photoUrl')
        self.error = None
        self.pending = False
        self.is_open = True

    def upload(self, filename, content, content_type):
        if not content_type or not content_type.startswith('image/'):
            self.error = 'Selecione um arquivo de imagem'
            return False
        if len(content) > MAX_PHOTO_SIZE:
            self.error = 'A imagem deve ter no máximo 5MB'
            return False

        self.pending = True
        self.error = None
        try:
            updated = self.client.upload(
                f"/api/users/{self.user['id']}/photo", 'photo', filename, content, content_type
            )
        except ApiError as e:
            logger.warning(f"Photo upload for user {self.user['id']} failed: {e.message}")
            self.error = e.message
            return False
        finally:
            self.pending = False

        self.photo_url = updated.get('photoUrl')
        self.user = updated
        self.client.invalidate('/api/users', '/api/user')
        self.is_open = False
        return True
