# backend/models/work_order.py

from datetime import datetime
from .base import db

WORK_ORDER_STATUSES = ('pending', 'in_progress', 'completed', 'cancelled')


class WorkOrder(db.Model):
    __tablename__ = 'work_orders'

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id'), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), default='pending', nullable=False)
    scheduled_date = db.Column(db.Date)
    completed_date = db.Column(db.Date)
    technician_ids = db.Column(db.JSON, default=list, nullable=False)  # user ids
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    pdf_path = db.Column(db.String(255))

    def to_dict(self):
        return {
            'id': self.id,
            'clientId': self.client_id,
            'serviceId': self.service_id,
            'description': self.description,
            'status': self.status,
            'scheduledDate': self.scheduled_date.isoformat() if self.scheduled_date else None,
            'completedDate': self.completed_date.isoformat() if self.completed_date else None,
            'technicianIds': list(self.technician_ids or []),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'pdfPath': self.pdf_path,
        }
