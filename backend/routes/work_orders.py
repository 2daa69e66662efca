# backend/routes/work_orders.py
from flask import Blueprint, jsonify
from flask_login import login_required
from models import db, Client, Service, WorkOrder, User
from middleware.auth import active_user_required
from services.validation import ValidationError, validate_payload, WORK_ORDER_FIELDS
from services.date_utils import local_today
from services.pdf_generator import generate_work_order_pdf
from routes.utils import error_response, get_json_body, apply_fields, ensure_exists, query_int_arg
import logging

work_orders_bp = Blueprint('work_orders', __name__)
logger = logging.getLogger(__name__)


def _check_references(cleaned, work_order=None):
    """Error message for a bad client/service/technician reference, else None"""
    records = {}
    for key, model, label in (('client_id', Client, 'Client'), ('service_id', Service, 'Service')):
        if key in cleaned:
            records[key], missing = ensure_exists(model, cleaned[key], label)
            if missing:
                return missing

    # the service must belong to the work order's client, including on partial updates
    client_id = cleaned.get('client_id', work_order.client_id if work_order else None)
    service = records.get('service_id')
    if service is None and 'client_id' in cleaned and work_order is not None:
        service = db.session.get(Service, work_order.service_id)
    if service is not None and client_id is not None and service.client_id != client_id:
        return f"Service {service.id} does not belong to client {client_id}"

    technician_ids = cleaned.get('technician_ids') or []
    if technician_ids:
        found = {user_id for (user_id,) in db.session.query(User.id).filter(User.id.in_(technician_ids))}
        unknown = [str(user_id) for user_id in technician_ids if user_id not in found]
        if unknown:
            return f"Unknown technician ids: {', '.join(unknown)}"
    return None


def _technicians(work_order):
    ids = work_order.technician_ids or []
    if not ids:
        return []
    users = {user.id: user for user in User.query.filter(User.id.in_(ids)).all()}
    return [users[user_id] for user_id in ids if user_id in users]


@work_orders_bp.route('/work-orders', methods=['GET'])
@login_required
@active_user_required
def get_work_orders():
    try:
        client_id = query_int_arg('clientId')
    except ValueError:
        return error_response('clientId must be an integer', 400)

    query = WorkOrder.query
    if client_id is not None:
        query = query.filter_by(client_id=client_id)
    work_orders = query.order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()).all()
    return jsonify([work_order.to_dict() for work_order in work_orders])


@work_orders_bp.route('/work-orders', methods=['POST'])
@login_required
@active_user_required
def create_work_order():
    try:
        cleaned = validate_payload(get_json_body(), WORK_ORDER_FIELDS)
    except ValidationError as e:
        return error_response(e.message, 400)

    missing = _check_references(cleaned)
    if missing:
        return error_response(missing, 400)

    try:
        work_order = apply_fields(WorkOrder(), cleaned)
        if work_order.status is None:
            work_order.status = 'pending'
        if work_order.technician_ids is None:
            work_order.technician_ids = []
        if work_order.status == 'completed' and work_order.completed_date is None:
            work_order.completed_date = local_today()
        db.session.add(work_order)
        db.session.commit()
        logger.info(f"Created work order {work_order.id} for service {work_order.service_id}")
        return jsonify(work_order.to_dict()), 201
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error creating work order: {str(e)}")
        return error_response('Failed to create work order', 500)


@work_orders_bp.route('/work-orders/<int:work_order_id>', methods=['GET'])
@login_required
@active_user_required
def get_work_order(work_order_id):
    work_order = db.get_or_404(WorkOrder, work_order_id)
    return jsonify(work_order.to_dict())


@work_orders_bp.route('/work-orders/<int:work_order_id>', methods=['PUT'])
@login_required
@active_user_required
def update_work_order(work_order_id):
    work_order = db.get_or_404(WorkOrder, work_order_id)
    try:
        cleaned = validate_payload(get_json_body(), WORK_ORDER_FIELDS, partial=True)
    except ValidationError as e:
        return error_response(e.message, 400)

    missing = _check_references(cleaned, work_order)
    if missing:
        return error_response(missing, 400)

    try:
        apply_fields(work_order, cleaned)
        if work_order.status == 'completed' and work_order.completed_date is None:
            work_order.completed_date = local_today()
        db.session.commit()
        return jsonify(work_order.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating work order {work_order_id}: {str(e)}")
        return error_response('Failed to update work order', 500)


@work_orders_bp.route('/work-orders/<int:work_order_id>', methods=['DELETE'])
@login_required
@active_user_required
def delete_work_order(work_order_id):
    work_order = db.get_or_404(WorkOrder, work_order_id)
    try:
        db.session.delete(work_order)
        db.session.commit()
        logger.info(f"Deleted work order {work_order_id}")
        return jsonify({'message': 'Work order deleted successfully'})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting work order {work_order_id}: {str(e)}")
        return error_response('Failed to delete work order', 500)


@work_orders_bp.route('/work-orders/<int:work_order_id>/generate-pdf', methods=['POST'])
@login_required
@active_user_required
def generate_pdf(work_order_id):
    work_order = db.get_or_404(WorkOrder, work_order_id)
    try:
        service = work_order.service
        pdf_path = generate_work_order_pdf(
            work_order, service, work_order.client, service.items.all(), _technicians(work_order)
        )
        work_order.pdf_path = pdf_path
        db.session.commit()
        return jsonify({'pdfPath': pdf_path})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error generating PDF for work order {work_order_id}: {str(e)}")
        return error_response('Failed to generate PDF', 500)
