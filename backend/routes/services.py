# backend/routes/services.py
from flask import Blueprint, jsonify
from flask_login import login_required
from models import db, Client, Service, ServiceItem, Quote
from middleware.auth import active_user_required
from services.validation import ValidationError, validate_payload, SERVICE_FIELDS, ITEM_FIELDS
from services.date_utils import local_today
from services.pdf_generator import generate_service_pdf
from routes.utils import error_response, get_json_body, apply_fields, ensure_exists, query_int_arg
import logging

services_bp = Blueprint('services', __name__)
logger = logging.getLogger(__name__)


def _stamp_completion(record):
    """A record moved to completed without a date is completed today"""
    if record.status == 'completed' and record.completed_date is None:
        record.completed_date = local_today()


@services_bp.route('/services', methods=['GET'])
@login_required
@active_user_required
def get_services():
    """Get all services, newest first, optionally for one client"""
    try:
        client_id = query_int_arg('clientId')
    except ValueError:
        return error_response('clientId must be an integer', 400)

    query = Service.query
    if client_id is not None:
        query = query.filter_by(client_id=client_id)
    services = query.order_by(Service.created_at.desc(), Service.id.desc()).all()
    return jsonify([service.to_dict() for service in services])


@services_bp.route('/services', methods=['POST'])
@login_required
@active_user_required
def create_service():
    try:
        cleaned = validate_payload(get_json_body(), SERVICE_FIELDS)
    except ValidationError as e:
        return error_response(e.message, 400)

    _, missing = ensure_exists(Client, cleaned['client_id'], 'Client')
    if missing:
        return error_response(missing, 400)

    try:
        service = apply_fields(Service(), cleaned)
        if service.status is None:
            service.status = 'pending'
        _stamp_completion(service)
        db.session.add(service)
        db.session.commit()
        logger.info(f"Created service {service.id} for client {service.client_id}")
        return jsonify(service.to_dict()), 201
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error creating service: {str(e)}")
        return error_response('Failed to create service', 500)


@services_bp.route('/services/<int:service_id>', methods=['GET'])
@login_required
@active_user_required
def get_service(service_id):
    service = db.get_or_404(Service, service_id)
    return jsonify(service.to_dict())


@services_bp.route('/services/<int:service_id>', methods=['PUT'])
@login_required
@active_user_required
def update_service(service_id):
    service = db.get_or_404(Service, service_id)
    try:
        cleaned = validate_payload(get_json_body(), SERVICE_FIELDS, partial=True)
    except ValidationError as e:
        return error_response(e.message, 400)

    if 'client_id' in cleaned:
        _, missing = ensure_exists(Client, cleaned['client_id'], 'Client')
        if missing:
            return error_response(missing, 400)

    try:
        apply_fields(service, cleaned)
        _stamp_completion(service)
        db.session.commit()
        return jsonify(service.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating service {service_id}: {str(e)}")
        return error_response('Failed to update service', 500)


@services_bp.route('/services/<int:service_id>', methods=['DELETE'])
@login_required
@active_user_required
def delete_service(service_id):
    """Delete a service and its items; quotes that pointed at it are kept"""
    service = db.get_or_404(Service, service_id)

    if service.work_orders.count():
        return error_response('Cannot delete a service that has work orders. Delete those first.', 400)

    try:
        Quote.query.filter_by(service_id=service_id).update({'service_id': None})
        db.session.delete(service)
        db.session.commit()
        logger.info(f"Deleted service {service_id}")
        return jsonify({'message': 'Service deleted successfully'})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting service {service_id}: {str(e)}")
        return error_response('Failed to delete service', 500)


# Service items

@services_bp.route('/services/<int:service_id>/items', methods=['GET'])
@login_required
@active_user_required
def get_service_items(service_id):
    service = db.get_or_404(Service, service_id)
    return jsonify([item.to_dict() for item in service.items])


@services_bp.route('/services/<int:service_id>/items', methods=['POST'])
@login_required
@active_user_required
def create_service_item(service_id):
    service = db.get_or_404(Service, service_id)
    try:
        cleaned = validate_payload(get_json_body(), ITEM_FIELDS)
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        item = apply_fields(ServiceItem(service_id=service.id), cleaned)
        item.recalculate_total()
        db.session.add(item)
        db.session.commit()
        return jsonify(item.to_dict()), 201
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error adding item to service {service_id}: {str(e)}")
        return error_response('Failed to create service item', 500)


def _get_service_item(service_id, item_id):
    db.get_or_404(Service, service_id)
    return ServiceItem.query.filter_by(id=item_id, service_id=service_id).first_or_404()


@services_bp.route('/services/<int:service_id>/items/<int:item_id>', methods=['PUT'])
@login_required
@active_user_required
def update_service_item(service_id, item_id):
    item = _get_service_item(service_id, item_id)
    try:
        cleaned = validate_payload(get_json_body(), ITEM_FIELDS, partial=True)
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        apply_fields(item, cleaned)
        item.recalculate_total()
        db.session.commit()
        return jsonify(item.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating service item {item_id}: {str(e)}")
        return error_response('Failed to update service item', 500)


@services_bp.route('/services/<int:service_id>/items/<int:item_id>', methods=['DELETE'])
@login_required
@active_user_required
def delete_service_item(service_id, item_id):
    item = _get_service_item(service_id, item_id)
    try:
        db.session.delete(item)
        db.session.commit()
        return jsonify({'message': 'Service item deleted successfully'})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting service item {item_id}: {str(e)}")
        return error_response('Failed to delete service item', 500)


@services_bp.route('/services/<int:service_id>/generate-pdf', methods=['POST'])
@login_required
@active_user_required
def generate_pdf(service_id):
    service = db.get_or_404(Service, service_id)
    try:
        pdf_path = generate_service_pdf(service, service.client, service.items.all())
        service.pdf_path = pdf_path
        db.session.commit()
        return jsonify({'pdfPath': pdf_path})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error generating PDF for service {service_id}: {str(e)}")
        return error_response('Failed to generate PDF', 500)
