# frontend/formatting.py
"""Display helpers: money in cents shown as Brazilian reais, dates as DD/MM/YYYY"""
from datetime import date, datetime

SERVICE_STATUS_LABELS = {
    'pending': 'Pendente',
    'in_progress': 'Em andamento',
    'completed': 'Concluído',
    'cancelled': 'Cancelado',
}

QUOTE_STATUS_LABELS = {
    'pending': 'Pendente',
    'approved': 'Aprovado',
    'rejected': 'Rejeitado',
}

ROLE_LABELS = {
    'admin': 'Administrador',
    'technician': 'Técnico',
}

ITEM_TYPE_LABELS = {
    'material': 'Material',
    'labor': 'Mão de obra',
}


def format_currency(cents):
    """
    12345 -> 'R$ 123,45'

    Thousands use '.', decimals ',' and negatives get a leading '-'.
    """
    cents = int(cents or 0)
    sign = '-' if cents < 0 else ''
    reais, centavos = divmod(abs(cents), 100)
    grouped = f"{reais:,}".replace(',', '.')
    return f"{sign}R$ {grouped},{centavos:02d}"


def parse_currency(text):
    """
    Read a typed amount ('1.234,56', 'R$ 10', '10.5') into cents.

    Raises:
        ValueError: the text is not an amount
    """
    cleaned = str(text).replace('R$', '').replace(' ', '').strip()
    if not cleaned:
        raise ValueError('Empty amount')

    if ',' in cleaned:
        cleaned = cleaned.replace('.', '').replace(',', '.')
    whole, _, fraction = cleaned.partition('.')
    if not whole.lstrip('-').isdigit() and whole not in ('', '-'):
        raise ValueError(f"Invalid amount: {text}")
    if fraction and (not fraction.isdigit() or len(fraction) > 2):
        raise ValueError(f"Invalid amount: {text}")

    negative = whole.startswith('-')
    reais = int(whole.lstrip('-') or 0)
    centavos = int((fraction + '00')[:2]) if fraction else 0
    cents = reais * 100 + centavos
    return -cents if negative else cents


def format_date(value):
    """ISO date or datetime string -> DD/MM/YYYY; '-' for empty values"""
    if not value:
        return '-'
    if isinstance(value, datetime):
        value = value.date()
    elif isinstance(value, str):
        value = datetime.fromisoformat(value.replace('Z', '+00:00')).date() if 'T' in value \
            else date.fromisoformat(value)
    return value.strftime('%d/%m/%Y')


def status_label(status, labels=SERVICE_STATUS_LABELS):
    return labels.get(status, status or '-')
