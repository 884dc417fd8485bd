"""PDF and Excel exports of the material and labor summary."""
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Optional

import xlsxwriter

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from rab_maker.utils.formatters import money_idr, num_id, date_id

ITEM_TYPE_LABELS = {
    'MATERIAL': 'Bahan',
    'LABOR': 'Upah',
}

EXCEL_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _scope_rows(project: Optional[Dict[str, Any]]) -> List[List[str]]:
    if project is None:
        return [['Proyek:', 'Semua proyek']]
    return [
        ['Proyek:', project.get('name') or ''],
        ['Lokasi:', project.get('location') or ''],
        ['Klien:', project.get('client_name') or ''],
    ]


def render_summary_pdf(project: Optional[Dict[str, Any]], summary: Dict[str, Any], business_info: Dict[str, Any]) -> BytesIO:
    """
    Render the summary rows of one project, or of the whole portfolio, as a PDF.

    Args:
        project: Project.to_dict() output, or None for the whole portfolio
        summary: material_summary_service.get_project_summary() output
        business_info: name/address/phone/email shown in the header

    Returns:
        BytesIO positioned at the start of the document
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=0.6*inch,
        leftMargin=0.6*inch,
        topMargin=0.6*inch,
        bottomMargin=0.6*inch
    )

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'SummaryTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#2C3E50'),
        spaceAfter=10,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold'
    )
    header_style = ParagraphStyle(
        'SummaryHeader',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor('#7F8C8D'),
        alignment=TA_CENTER,
        spaceAfter=4
    )

    # 1. Title and business header
    elements.append(Paragraph("REKAPITULASI KEBUTUHAN BAHAN DAN UPAH", title_style))
    if business_info.get('name'):
        elements.append(Paragraph(f"<b>{business_info['name']}</b>", header_style))
    contact_parts = [business_info[k] for k in ('address', 'phone', 'email') if business_info.get(k)]
    if contact_parts:
        elements.append(Paragraph(" | ".join(contact_parts), header_style))
    elements.append(Spacer(1, 0.2*inch))

    # 2. Project metadata
    info_table = Table([
        *_scope_rows(project),
        ['Tanggal:', date_id(datetime.now())],
    ], colWidths=[1.5*inch, 5*inch])
    info_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.25*inch))

    # 3. Summary rows
    table_data = [['No', 'Jenis', 'Uraian', 'Satuan', 'Jumlah', 'Total Biaya']]
    items: List[Dict[str, Any]] = summary.get('items', [])
    for idx, item in enumerate(items, start=1):
        table_data.append([
            str(idx),
            ITEM_TYPE_LABELS.get(item['item_type'], item['item_type']),
            item['item_name'],
            item['unit'],
            num_id(item['total_quantity'], 4),
            money_idr(item['total_cost']),
        ])

    items_table = Table(
        table_data,
        colWidths=[0.5*inch, 0.9*inch, 3.8*inch, 0.9*inch, 1.5*inch, 2*inch],
        repeatRows=1
    )
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#3498DB')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
        ('ALIGN', (0, 1), (1, -1), 'CENTER'),
        ('ALIGN', (3, 1), (3, -1), 'CENTER'),
        ('ALIGN', (4, 1), (5, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#BDC3C7')),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#ECF0F1')]),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.2*inch))

    # 4. Totals
    totals = summary.get('totals', {})
    totals_table = Table([
        ['Total Bahan:', money_idr(totals.get('material_cost', 0))],
        ['Total Upah:', money_idr(totals.get('labor_cost', 0))],
        ['TOTAL:', money_idr(totals.get('total_cost', 0))],
    ], colWidths=[7.6*inch, 2*inch])
    totals_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 2), (-1, 2), 13),
        ('TEXTCOLOR', (0, 2), (-1, 2), colors.HexColor('#27AE60')),
        ('BOX', (0, 2), (-1, 2), 1.5, colors.HexColor('#27AE60')),
    ]))
    elements.append(totals_table)

    doc.build(elements)
    buffer.seek(0)
    return buffer


def render_summary_excel(project: Optional[Dict[str, Any]], summary: Dict[str, Any]) -> BytesIO:
    """
    Render summary rows as an .xlsx workbook with a single "Material Summary" sheet.

    Quantities and costs are written as numbers so the sheet can be recalculated.
    """
    buffer = BytesIO()
    wb = xlsxwriter.Workbook(buffer, {'in_memory': True})

    hdr = wb.add_format({'bold': True, 'bg_color': '#3498DB', 'font_color': '#FFFFFF', 'border': 1})
    title_fmt = wb.add_format({'bold': True, 'font_size': 14, 'font_color': '#2C3E50'})
    normal = wb.add_format({'border': 1})
    qty_fmt = wb.add_format({'num_format': '#,##0.0000', 'border': 1})
    money = wb.add_format({'num_format': '#,##0.00', 'border': 1})
    total_fmt = wb.add_format({'bold': True, 'num_format': '#,##0.00', 'border': 1, 'bg_color': '#ECF0F1'})

    ws = wb.add_worksheet('Material Summary')
    ws.set_column('A:A', 40)
    ws.set_column('B:B', 12)
    ws.set_column('C:C', 16)
    ws.set_column('D:D', 10)
    ws.set_column('E:E', 20)

    ws.write('A1', 'Rekapitulasi Kebutuhan Bahan dan Upah', title_fmt)
    scope = _scope_rows(project)
    for i, (label, value) in enumerate(scope):
        ws.write(1 + i, 0, f'{label} {value}')

    header_row = 2 + len(scope)
    ws.write_row(header_row, 0, ['Item Name', 'Type', 'Total Quantity', 'Unit', 'Total Cost'], hdr)

    row = header_row + 1
    for item in summary.get('items', []):
        ws.write(row, 0, item['item_name'], normal)
        ws.write(row, 1, ITEM_TYPE_LABELS.get(item['item_type'], item['item_type']), normal)
        ws.write(row, 2, item['total_quantity'], qty_fmt)
        ws.write(row, 3, item['unit'], normal)
        ws.write(row, 4, item['total_cost'], money)
        row += 1

    totals = summary.get('totals', {})
    row += 1
    for label, key in (('Total Bahan', 'material_cost'), ('Total Upah', 'labor_cost'), ('TOTAL', 'total_cost')):
        ws.write(row, 0, label, total_fmt)
        ws.write(row, 4, totals.get(key, 0), total_fmt)
        row += 1

    wb.close()
    buffer.seek(0)
    return buffer
