# backend/models/service.py

from datetime import datetime
from .base import db

SERVICE_STATUSES = ('pending', 'in_progress', 'completed', 'cancelled')
ITEM_TYPES = ('material', 'labor')


class Service(db.Model):
    __tablename__ = 'services'

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False)
    service_type = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), default='pending', nullable=False)
    scheduled_date = db.Column(db.Date)
    completed_date = db.Column(db.Date)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    pdf_path = db.Column(db.String(255))

    items = db.relationship('ServiceItem', backref='service', lazy='dynamic',
                            cascade="all, delete-orphan", order_by='ServiceItem.id')
    work_orders = db.relationship('WorkOrder', backref='service', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'clientId': self.client_id,
            'serviceType': self.service_type,
            'description': self.description,
            'status': self.status,
            'scheduledDate': self.scheduled_date.isoformat() if self.scheduled_date else None,
            'completedDate': self.completed_date.isoformat() if self.completed_date else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
            'pdfPath': self.pdf_path,
        }


class ServiceItem(db.Model):
    """A material or labor line on a service; money is in cents"""
    __tablename__ = 'service_items'

    id = db.Column(db.Integer, primary_key=True)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id'), nullable=False)
    type = db.Column(db.String(20), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)
    total = db.Column(db.Integer, nullable=False)

    def recalculate_total(self):
        self.total = self.quantity * self.unit_price
        return self.total

    def to_dict(self):
        return {
            'id': self.id,
            'serviceId': self.service_id,
            'type': self.type,
            'description': self.description,
            'quantity': self.quantity,
            'unitPrice': self.unit_price,
            'total': self.total,
        }
