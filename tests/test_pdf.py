import os
import re

import pytest

from services.pdf_generator import format_brl

PDF_PATH = re.compile(r'^/pdf/(quote|service|work_order)_\d+_\d{13}\.pdf$')


def _file_for(app, pdf_path):
    return os.path.join(app.config['PDF_FOLDER'], pdf_path[len('/pdf/'):])


@pytest.mark.parametrize('cents, expected', [
    (0, 'R$ 0,00'),
    (12345, 'R$ 123,45'),
    (123456789, 'R$ 1.234.567,89'),
    (-500, '-R$ 5,00'),
])
def test_format_brl(cents, expected):
    assert format_brl(cents) == expected


def test_generate_quote_pdf(app, technician_client, client_id):
    quote = technician_client.post('/api/quotes', json={
        'clientId': client_id, 'description': 'Split <12000> & instalação', 'validUntil': '2026-12-01'
    }).get_json()
    technician_client.post(f'/api/quotes/{quote["id"]}/items', json={
        'type': 'material', 'description': 'Split 12000 BTUs', 'quantity': 1, 'unitPrice': 189900
    })

    response = technician_client.post(f'/api/quotes/{quote["id"]}/generate-pdf')
    assert response.status_code == 200
    pdf_path = response.get_json()['pdfPath']
    assert PDF_PATH.match(pdf_path)
    assert pdf_path.startswith(f'/pdf/quote_{quote["id"]}_')

    with open(_file_for(app, pdf_path), 'rb') as f:
        assert f.read(5) == b'%PDF-'

    # the record now points at the file, and the file is served
    assert technician_client.get(f'/api/quotes/{quote["id"]}').get_json()['pdfPath'] == pdf_path
    served = technician_client.get(pdf_path)
    assert served.status_code == 200
    assert served.mimetype == 'application/pdf'


def test_generate_service_pdf(app, technician_client, service_id):
    technician_client.post(f'/api/services/{service_id}/items', json={
        'type': 'labor', 'description': 'Instalação', 'quantity': 2, 'unitPrice': 25000
    })
    response = technician_client.post(f'/api/services/{service_id}/generate-pdf')
    assert response.status_code == 200
    pdf_path = response.get_json()['pdfPath']
    assert pdf_path.startswith(f'/pdf/service_{service_id}_')
    assert os.path.exists(_file_for(app, pdf_path))


def test_generate_work_order_pdf(app, technician_client, client_id, service_id, technician_id):
    work_order = technician_client.post('/api/work-orders', json={
        'clientId': client_id, 'serviceId': service_id, 'technicianIds': [technician_id],
        'description': 'Cliente pede contato antes da visita'
    }).get_json()

    response = technician_client.post(f'/api/work-orders/{work_order["id"]}/generate-pdf')
    assert response.status_code == 200
    pdf_path = response.get_json()['pdfPath']
    assert pdf_path.startswith(f'/pdf/work_order_{work_order["id"]}_')
    assert os.path.exists(_file_for(app, pdf_path))


def test_generate_pdf_for_missing_record(technician_client):
    assert technician_client.post('/api/quotes/404/generate-pdf').status_code == 404


def test_missing_pdf_file_is_404(client):
    assert client.get('/pdf/quote_1_0.pdf').status_code == 404
