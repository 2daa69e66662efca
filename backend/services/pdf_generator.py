# backend/services/pdf_generator.py
import os
import logging
from xml.sax.saxutils import escape
from flask import current_app
from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, Image
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_RIGHT, TA_CENTER
from reportlab.lib.units import inch
from reportlab.lib import colors

from services.date_utils import format_date_for_display, file_timestamp

logger = logging.getLogger(__name__)

BRAND_BLUE = colors.HexColor('#1a56db')

QUOTE_STATUS_LABELS = {
    'pending': 'Pendente',
    'approved': 'Aprovado',
    'rejected': 'Rejeitado',
}

ORDER_STATUS_LABELS = {
    'pending': 'Pendente',
    'in_progress': 'Em andamento',
    'completed': 'Concluído',
    'cancelled': 'Cancelado',
}

ITEM_TYPE_LABELS = {
    'material': 'Material',
    'labor': 'Mão de obra',
}


def format_brl(cents):
    """Integer cents to 'R$ 1.234,56'"""
    cents = int(cents or 0)
    sign = '-' if cents < 0 else ''
    reais, centavos = divmod(abs(cents), 100)
    return f"{sign}R$ {reais:,}".replace(',', '.') + f",{centavos:02d}"


def _text(value):
    """Escape user text for reportlab's paragraph markup"""
    return escape(str(value)) if value not in (None, '') else '-'


def _styles():
    styles = getSampleStyleSheet()
    return {
        'title': ParagraphStyle('DocTitle', parent=styles['Heading1'], alignment=TA_RIGHT, textColor=BRAND_BLUE),
        'subtitle': ParagraphStyle('DocSubtitle', parent=styles['Normal'], alignment=TA_RIGHT, textColor=colors.grey),
        'heading': ParagraphStyle('Section', parent=styles['Heading3'], textColor=BRAND_BLUE),
        'normal': styles['Normal'],
        'small': ParagraphStyle('Small', parent=styles['Normal'], fontSize=8, textColor=colors.grey, alignment=TA_CENTER),
    }


def _output_path(kind, record_id):
    """Create the PDF folder if needed and return (filesystem path, public path)"""
    output_dir = current_app.config['PDF_FOLDER']
    os.makedirs(output_dir, exist_ok=True)
    filename = f"{kind}_{record_id}_{file_timestamp()}.pdf"
    return os.path.join(output_dir, filename), f"/pdf/{filename}"


def _header(elements, styles, title):
    config = current_app.config
    logo_path = config.get('COMPANY_LOGO')

    if logo_path and os.path.exists(logo_path):
        brand = Image(logo_path, width=1.4 * inch, height=0.7 * inch, kind='proportional')
    else:
        brand = Paragraph(f"<b>{_text(str(config['COMPANY_NAME']).upper())}</b>", styles['heading'])

    header = Table(
        [[brand, [Paragraph(title, styles['title']),
                  Paragraph('Sistema de Gestão para Climatização', styles['subtitle'])]]],
        colWidths=[2.5 * inch, 4.3 * inch]
    )
    header.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('LINEBELOW', (0, 0), (-1, 0), 1, BRAND_BLUE),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
    ]))
    elements.append(header)
    elements.append(Spacer(1, 0.2 * inch))


def _client_box(elements, styles, client):
    elements.append(Paragraph('DADOS DO CLIENTE', styles['heading']))
    address = ', '.join(part for part in (client.address, client.city, client.state, client.zip) if part)
    data = [
        [Paragraph(f"Nome: {_text(client.name)}", styles['normal']),
         Paragraph(f"Telefone: {_text(client.phone)}", styles['normal'])],
        [Paragraph(f"Contato: {_text(client.contact_name)}", styles['normal']),
         Paragraph(f"Endereço: {_text(address)}", styles['normal'])],
        [Paragraph(f"Email: {_text(client.email)}", styles['normal']), ''],
    ]
    box = Table(data, colWidths=[3.4 * inch, 3.4 * inch])
    box.setStyle(TableStyle([
        ('BOX', (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ('BACKGROUND', (0, 0), (-1, -1), colors.HexColor('#f3f4f6')),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]))
    elements.append(box)
    elements.append(Spacer(1, 0.2 * inch))


def _items_table(elements, styles, items, with_type=False):
    """Item rows plus a total row; returns the summed total in cents"""
    header = ['Item', 'Descrição', 'Qtd']
    if with_type:
        header.append('Tipo')
    header.extend(['Preço', 'Total'])

    rows = [header]
    total = 0
    for index, item in enumerate(items, start=1):
        item_total = item.quantity * item.unit_price
        total += item_total
        row = [str(index), Paragraph(_text(item.description), styles['normal']), str(item.quantity)]
        if with_type:
            row.append(ITEM_TYPE_LABELS.get(item.type, item.type))
        row.extend([format_brl(item.unit_price), format_brl(item_total)])
        rows.append(row)

    total_row = [''] * (len(header) - 2) + ['TOTAL:', format_brl(total)]
    rows.append(total_row)

    if with_type:
        col_widths = [0.5 * inch, 2.6 * inch, 0.6 * inch, 1.0 * inch, 1.0 * inch, 1.1 * inch]
    else:
        col_widths = [0.5 * inch, 3.4 * inch, 0.7 * inch, 1.1 * inch, 1.1 * inch]

    table = Table(rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), BRAND_BLUE),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (2, 0), (-1, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -2), [colors.white, colors.HexColor('#f9fafb')]),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (0, -1), (-1, -1), 1, BRAND_BLUE),
        ('GRID', (0, 0), (-1, -2), 0.25, colors.lightgrey),
    ]))
    elements.append(table)
    elements.append(Spacer(1, 0.2 * inch))
    return total


def _signatures(elements, styles, left_label, right_label):
    elements.append(Spacer(1, 0.5 * inch))
    line = '_' * 35
    table = Table(
        [[line, line], [left_label, right_label]],
        colWidths=[3.4 * inch, 3.4 * inch]
    )
    table.setStyle(TableStyle([('ALIGN', (0, 0), (-1, -1), 'CENTER')]))
    elements.append(table)


def _footer(elements, styles):
    config = current_app.config
    elements.append(Spacer(1, 0.4 * inch))
    elements.append(Paragraph(_text(str(config['COMPANY_NAME']).upper()), styles['small']))
    elements.append(Paragraph(_text(config['COMPANY_ADDRESS']), styles['small']))
    elements.append(Paragraph(
        f"Tel: {_text(config['COMPANY_PHONE'])} | Email: {_text(config['COMPANY_EMAIL'])}", styles['small']
    ))


def _build(path, elements):
    doc = SimpleDocTemplate(
        path,
        pagesize=A4,
        rightMargin=50,
        leftMargin=50,
        topMargin=40,
        bottomMargin=40
    )
    doc.build(elements)


def generate_quote_pdf(quote, client, items):
    """
    Render a quote to the PDF folder.

    Returns:
        str: public path of the file, e.g. /pdf/quote_3_1700000000000.pdf
    """
    logger.info(f"Generating PDF for quote {quote.id} ({len(items)} items)")
    path, public_path = _output_path('quote', quote.id)
    styles = _styles()
    elements = []

    _header(elements, styles, 'ORÇAMENTO')

    info = Table([
        [Paragraph(f"<b>Orçamento #ORC-{quote.id}</b>", styles['normal']),
         Paragraph(f"Status: {QUOTE_STATUS_LABELS.get(quote.status, quote.status)}", styles['normal'])],
        [Paragraph(f"Data: {format_date_for_display(quote.created_at)}", styles['normal']),
         Paragraph(f"Validade: {format_date_for_display(quote.valid_until)}", styles['normal'])],
    ], colWidths=[3.4 * inch, 3.4 * inch])
    elements.append(info)
    elements.append(Spacer(1, 0.2 * inch))

    _client_box(elements, styles, client)

    if quote.description:
        elements.append(Paragraph('DESCRIÇÃO', styles['heading']))
        elements.append(Paragraph(_text(quote.description), styles['normal']))
        elements.append(Spacer(1, 0.2 * inch))

    elements.append(Paragraph('ITENS DO ORÇAMENTO', styles['heading']))
    if items:
        _items_table(elements, styles, items)
    else:
        elements.append(Paragraph(f"Valor total: {format_brl(quote.total)}", styles['normal']))
        elements.append(Spacer(1, 0.2 * inch))

    elements.append(Paragraph('OBSERVAÇÕES', styles['heading']))
    for note in (
        'Os preços incluem mão de obra e material, conforme especificado.',
        'Valores sujeitos a alteração após visita técnica.',
        'Condições de pagamento: a combinar.',
    ):
        elements.append(Paragraph(f"• {note}", styles['normal']))

    _signatures(elements, styles, 'Responsável', 'Cliente')
    _footer(elements, styles)

    _build(path, elements)
    logger.info(f"Quote PDF written to {path}")
    return public_path


def _order_document(kind, record_id, title, number_label, status, created_at, scheduled_date,
                    notes, service, client, items, technicians):
    path, public_path = _output_path(kind, record_id)
    styles = _styles()
    elements = []

    _header(elements, styles, title)

    info = Table([
        [Paragraph(f"<b>{number_label}</b>", styles['normal']),
         Paragraph(f"Status: {ORDER_STATUS_LABELS.get(status, status)}", styles['normal'])],
        [Paragraph(f"Data de Criação: {format_date_for_display(created_at)}", styles['normal']),
         Paragraph(f"Data Agendada: {format_date_for_display(scheduled_date)}", styles['normal'])],
    ], colWidths=[3.4 * inch, 3.4 * inch])
    elements.append(info)
    elements.append(Spacer(1, 0.2 * inch))

    _client_box(elements, styles, client)

    elements.append(Paragraph('DADOS DO SERVIÇO', styles['heading']))
    elements.append(Paragraph(f"Tipo: {_text(service.service_type)}", styles['normal']))
    elements.append(Paragraph(f"Descrição: {_text(service.description)}", styles['normal']))
    if notes:
        elements.append(Paragraph(f"Observações da OS: {_text(notes)}", styles['normal']))
    elements.append(Spacer(1, 0.2 * inch))

    if technicians:
        elements.append(Paragraph('TÉCNICOS RESPONSÁVEIS', styles['heading']))
        tech_rows = [[Paragraph(f"<b>{_text(tech.name)}</b>", styles['normal']),
                      Paragraph(_text(tech.email), styles['normal'])] for tech in technicians]
        elements.append(Table(tech_rows, colWidths=[3.4 * inch, 3.4 * inch]))
        elements.append(Spacer(1, 0.2 * inch))

    if items:
        elements.append(Paragraph('ITENS DO SERVIÇO', styles['heading']))
        _items_table(elements, styles, items, with_type=True)

    elements.append(Paragraph('CONFIRMAÇÃO DE SERVIÇO', styles['heading']))
    elements.append(Paragraph(
        'Declaro que o serviço descrito acima foi executado de forma satisfatória.', styles['normal']
    ))
    _signatures(elements, styles, 'Assinatura do Técnico', 'Assinatura do Cliente')
    _footer(elements, styles)

    _build(path, elements)
    logger.info(f"{kind} PDF written to {path}")
    return public_path


def generate_work_order_pdf(work_order, service, client, items, technicians):
    """Render a work order with its service items and assigned technicians"""
    logger.info(f"Generating PDF for work order {work_order.id}")
    return _order_document(
        'work_order', work_order.id, 'ORDEM DE SERVIÇO', f"Ordem de Serviço #OS-{work_order.id}",
        work_order.status, work_order.created_at, work_order.scheduled_date,
        work_order.description, service, client, items, technicians
    )


def generate_service_pdf(service, client, items):
    """Services print with the work order layout, without technicians"""
    logger.info(f"Generating PDF for service {service.id}")
    return _order_document(
        'service', service.id, 'ORDEM DE SERVIÇO', f"Serviço #SRV-{service.id}",
        service.status, service.created_at, service.scheduled_date,
        None, service, client, items, []
    )
