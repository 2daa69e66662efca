# backend/routes/clients.py
from flask import Blueprint, jsonify
from flask_login import login_required
from models import db, Client
from middleware.auth import active_user_required
from services.validation import ValidationError, validate_payload, CLIENT_FIELDS
from routes.utils import error_response, get_json_body, apply_fields
import logging

clients_bp = Blueprint('clients', __name__)
logger = logging.getLogger(__name__)


@clients_bp.route('/clients', methods=['GET'])
@login_required
@active_user_required
def get_clients():
    """Get all clients ordered by name"""
    try:
        clients = Client.query.order_by(Client.name).all()
        return jsonify([client.to_dict() for client in clients])
    except Exception as e:
        logger.error(f"Error retrieving clients: {str(e)}")
        return error_response('Failed to retrieve clients', 500)


@clients_bp.route('/clients', methods=['POST'])
@login_required
@active_user_required
def create_client():
    try:
        cleaned = validate_payload(get_json_body(), CLIENT_FIELDS)
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        client = apply_fields(Client(), cleaned)
        db.session.add(client)
        db.session.commit()
        logger.info(f"Created client {client.id} '{client.name}'")
        return jsonify(client.to_dict()), 201
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error creating client: {str(e)}")
        return error_response('Failed to create client', 500)


@clients_bp.route('/clients/<int:client_id>', methods=['GET'])
@login_required
@active_user_required
def get_client(client_id):
    client = db.get_or_404(Client, client_id)
    return jsonify(client.to_dict())


@clients_bp.route('/clients/<int:client_id>', methods=['PUT'])
@login_required
@active_user_required
def update_client(client_id):
    client = db.get_or_404(Client, client_id)
    try:
        cleaned = validate_payload(get_json_body(), CLIENT_FIELDS, partial=True)
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        apply_fields(client, cleaned)
        db.session.commit()
        return jsonify(client.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating client {client_id}: {str(e)}")
        return error_response('Failed to update client', 500)


@clients_bp.route('/clients/<int:client_id>', methods=['DELETE'])
@login_required
@active_user_required
def delete_client(client_id):
    """Delete a client that has no services, quotes or work orders"""
    client = db.get_or_404(Client, client_id)

    if client.services.count() or client.quotes.count() or client.work_orders.count():
        return error_response(
            'Cannot delete a client that has services, quotes or work orders. Delete those first.', 400
        )

    try:
        db.session.delete(client)
        db.session.commit()
        logger.info(f"Deleted client {client_id}")
        return jsonify({'message': 'Client deleted successfully'})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting client {client_id}: {str(e)}")
        return error_response('Failed to delete client', 500)
