# backend/services/date_utils.py
import pytz
import logging
from datetime import datetime, date

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = 'America/Sao_Paulo'


def server_timezone():
    """The timezone named by the app's TIMEZONE setting"""
    if has_app_context():
        return pytz.timezone(current_app.config.get('TIMEZONE') or DEFAULT_TIMEZONE)
    return pytz.timezone(DEFAULT_TIMEZONE)


def local_now():
    """Current time in the server timezone"""
    return datetime.now(pytz.utc).astimezone(server_timezone())


def local_today():
    return local_now().date()


def format_date_for_response(date_obj):
    """
    Format a date or datetime as YYYY-MM-DD.

    Datetimes without tzinfo are taken as server-local so the calendar day
    does not shift.
    """
    if not date_obj:
        return None

    if isinstance(date_obj, datetime):
        if date_obj.tzinfo is None:
            date_obj = server_timezone().localize(date_obj)
        return date_obj.date().isoformat()
    elif isinstance(date_obj, date):
        return date_obj.isoformat()

    return str(date_obj)


def format_date_for_display(date_obj):
    """DD/MM/YYYY, the format printed on PDFs"""
    if not date_obj:
        return '-'
    if isinstance(date_obj, datetime):
        if date_obj.tzinfo is not None:
            date_obj = date_obj.astimezone(server_timezone())
        date_obj = date_obj.date()
    return date_obj.strftime('%d/%m/%Y')


def parse_date(value):
    """
    Parse a date sent by the client, returning a date without time.

    Accepts date objects, 'YYYY-MM-DD' and ISO datetimes (with or without
    timezone). Timezone-aware values are converted to the server timezone
    before the date part is taken.

    Raises:
        ValueError: the value cannot be read as a date
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid date value: {value!r}")

    value = value.strip()
    try:
        if 'T' in value:
            time_part = value.split('T', 1)[1]
            if value.endswith('Z') or '+' in time_part or '-' in time_part:
                dt = datetime.fromisoformat(value.replace('Z', '+00:00'))
                return dt.astimezone(server_timezone()).date()
            return datetime.fromisoformat(value).date()

        return date.fromisoformat(value)

    except ValueError as e:
        logger.warning(f"Error parsing date '{value}': {str(e)}")
        raise ValueError(f"Invalid date format: {value}")


def file_timestamp():
    """Milliseconds since the epoch, used to make generated file names unique"""
    return int(datetime.now(pytz.utc).timestamp() * 1000)
