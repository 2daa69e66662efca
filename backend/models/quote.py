# backend/models/quote.py

from datetime import datetime
from .base import db

QUOTE_STATUSES = ('pending', 'approved', 'rejected')


class Quote(db.Model):
    __tablename__ = 'quotes'

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id'), nullable=True)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), default='pending', nullable=False)
    total = db.Column(db.Integer, default=0, nullable=False)  # cents
    valid_until = db.Column(db.Date)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    pdf_path = db.Column(db.String(255))

    items = db.relationship('QuoteItem', backref='quote', lazy='dynamic',
                            cascade="all, delete-orphan", order_by='QuoteItem.id')
    service = db.relationship('Service')

    def recalculate_total(self, keep_manual_total=True):
        """Sum item totals into the quote; a quote without items keeps its manual total"""
        items = self.items.all()
        if items or not keep_manual_total:
            self.total = sum(item.total for item in items)
        return self.total

    def to_dict(self):
        return {
            'id': self.id,
            'clientId': self.client_id,
            'serviceId': self.service_id,
            'description': self.description,
            'status': self.status,
            'total': self.total,
            'validUntil': self.valid_until.isoformat() if self.valid_until else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'pdfPath': self.pdf_path,
        }


class QuoteItem(db.Model):
    __tablename__ = 'quote_items'

    id = db.Column(db.Integer, primary_key=True)
    quote_id = db.Column(db.Integer, db.ForeignKey('quotes.id'), nullable=False)
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
            'quoteId': self.quote_id,
            'type': self.type,
            'description': self.description,
            'quantity': self.quantity,
            'unitPrice': self.unit_price,
            'total': self.total,
        }
