# backend/models/client.py

from .base import db
from datetime import datetime


class Client(db.Model):
    __tablename__ = 'clients'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    contact_name = db.Column(db.String(120))
    email = db.Column(db.String(120))
    phone = db.Column(db.String(40))
    address = db.Column(db.String(255))
    city = db.Column(db.String(120))
    state = db.Column(db.String(60))
    zip = db.Column(db.String(20))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Deletion is guarded in the route, so no cascades here
    services = db.relationship('Service', backref='client', lazy='dynamic')
    quotes = db.relationship('Quote', backref='client', lazy='dynamic')
    work_orders = db.relationship('WorkOrder', backref='client', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'contactName': self.contact_name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'zip': self.zip,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
