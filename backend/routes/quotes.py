# backend/routes/quotes.py
from flask import Blueprint, jsonify
from flask_login import login_required
from models import db, Client, Service, Quote, QuoteItem
from middleware.auth import active_user_required
from services.validation import ValidationError, validate_payload, QUOTE_FIELDS, ITEM_FIELDS
from services.pdf_generator import generate_quote_pdf
from routes.utils import error_response, get_json_body, apply_fields, ensure_exists, query_int_arg
import logging

quotes_bp = Blueprint('quotes', __name__)
logger = logging.getLogger(__name__)


def _check_references(cleaned):
    """Error message for a clientId/serviceId that points nowhere, else None"""
    if 'client_id' in cleaned:
        _, missing = ensure_exists(Client, cleaned['client_id'], 'Client')
        if missing:
            return missing
    if cleaned.get('service_id') is not None:
        _, missing = ensure_exists(Service, cleaned['service_id'], 'Service')
        if missing:
            return missing
    return None


@quotes_bp.route('/quotes', methods=['GET'])
@login_required
@active_user_required
def get_quotes():
    try:
        client_id = query_int_arg('clientId')
    except ValueError:
        return error_response('clientId must be an integer', 400)

    query = Quote.query
    if client_id is not None:
        query = query.filter_by(client_id=client_id)
    quotes = query.order_by(Quote.created_at.desc(), Quote.id.desc()).all()
    return jsonify([quote.to_dict() for quote in quotes])


@quotes_bp.route('/quotes', methods=['POST'])
@login_required
@active_user_required
def create_quote():
    try:
        cleaned = validate_payload(get_json_body(), QUOTE_FIELDS)
    except ValidationError as e:
        return error_response(e.message, 400)

    missing = _check_references(cleaned)
    if missing:
        return error_response(missing, 400)

    try:
        quote = apply_fields(Quote(), cleaned)
        db.session.add(quote)
        db.session.commit()
        logger.info(f"Created quote {quote.id} for client {quote.client_id}")
        return jsonify(quote.to_dict()), 201
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error creating quote: {str(e)}")
        return error_response('Failed to create quote', 500)


@quotes_bp.route('/quotes/<int:quote_id>', methods=['GET'])
@login_required
@active_user_required
def get_quote(quote_id):
    quote = db.get_or_404(Quote, quote_id)
    return jsonify(quote.to_dict())


@quotes_bp.route('/quotes/<int:quote_id>', methods=['PUT'])
@login_required
@active_user_required
def update_quote(quote_id):
    quote = db.get_or_404(Quote, quote_id)
    try:
        cleaned = validate_payload(get_json_body(), QUOTE_FIELDS, partial=True)
    except ValidationError as e:
        return error_response(e.message, 400)

    missing = _check_references(cleaned)
    if missing:
        return error_response(missing, 400)

    try:
        apply_fields(quote, cleaned)
        # Itemised quotes always carry the sum of their items
        quote.recalculate_total()
        db.session.commit()
        return jsonify(quote.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating quote {quote_id}: {str(e)}")
        return error_response('Failed to update quote', 500)


@quotes_bp.route('/quotes/<int:quote_id>', methods=['DELETE'])
@login_required
@active_user_required
def delete_quote(quote_id):
    quote = db.get_or_404(Quote, quote_id)
    try:
        db.session.delete(quote)
        db.session.commit()
        logger.info(f"Deleted quote {quote_id}")
        return jsonify({'message': 'Quote deleted successfully'})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting quote {quote_id}: {str(e)}")
        return error_response('Failed to delete quote', 500)


# Quote items

@quotes_bp.route('/quotes/<int:quote_id>/items', methods=['GET'])
@login_required
@active_user_required
def get_quote_items(quote_id):
    quote = db.get_or_404(Quote, quote_id)
    return jsonify([item.to_dict() for item in quote.items])


@quotes_bp.route('/quotes/<int:quote_id>/items', methods=['POST'])
@login_required
@active_user_required
def create_quote_item(quote_id):
    quote = db.get_or_404(Quote, quote_id)
    try:
        cleaned = validate_payload(get_json_body(), ITEM_FIELDS)
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        item = apply_fields(QuoteItem(quote_id=quote.id), cleaned)
        item.recalculate_total()
        db.session.add(item)
        quote.recalculate_total()
        db.session.commit()
        return jsonify(item.to_dict()), 201
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error adding item to quote {quote_id}: {str(e)}")
        return error_response('Failed to create quote item', 500)


def _get_quote_item(quote_id, item_id):
    quote = db.get_or_404(Quote, quote_id)
    item = QuoteItem.query.filter_by(id=item_id, quote_id=quote_id).first_or_404()
    return quote, item


@quotes_bp.route('/quotes/<int:quote_id>/items/<int:item_id>', methods=['PUT'])
@login_required
@active_user_required
def update_quote_item(quote_id, item_id):
    quote, item = _get_quote_item(quote_id, item_id)
    try:
        cleaned = validate_payload(get_json_body(), ITEM_FIELDS, partial=True)
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        apply_fields(item, cleaned)
        item.recalculate_total()
        quote.recalculate_total()
        db.session.commit()
        return jsonify(item.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating quote item {item_id}: {str(e)}")
        return error_response('Failed to update quote item', 500)


@quotes_bp.route('/quotes/<int:quote_id>/items/<int:item_id>', methods=['DELETE'])
@login_required
@active_user_required
def delete_quote_item(quote_id, item_id):
    quote, item = _get_quote_item(quote_id, item_id)
    try:
        db.session.delete(item)
        quote.recalculate_total(keep_manual_total=False)
        db.session.commit()
        return jsonify({'message': 'Quote item deleted successfully'})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting quote item {item_id}: {str(e)}")
        return error_response('Failed to delete quote item', 500)


@quotes_bp.route('/quotes/<int:quote_id>/generate-pdf', methods=['POST'])
@login_required
@active_user_required
def generate_pdf(quote_id):
    quote = db.get_or_404(Quote, quote_id)
    try:
        pdf_path = generate_quote_pdf(quote, quote.client, quote.items.all())
        quote.pdf_path = pdf_path
        db.session.commit()
        return jsonify({'pdfPath': pdf_path})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error generating PDF for quote {quote_id}: {str(e)}")
        return error_response('Failed to generate PDF', 500)
