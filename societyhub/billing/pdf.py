"""
Local invoice PDF renderer
Uses PIL/Pillow to draw the invoice page, with a Code128 of the invoice number
"""
import io
from PIL import Image, ImageDraw
from societyhub.core.barcodes import load_fonts, render_code128

# A4 at 100 DPI
PAGE_WIDTH = 827
PAGE_HEIGHT = 1169
MARGIN = 60


def _money(value) -> str:
    return f"Rs. {value:,.2f}"


def render_invoice_pdf(invoice) -> bytes:
    """Render a one-page PDF for a maintenance invoice"""
    fonts = load_fonts()
    img = Image.new('RGB', (PAGE_WIDTH, PAGE_HEIGHT), color='white')
    draw = ImageDraw.Draw(img)

    y = MARGIN
    draw.text((MARGIN, y), invoice.society.name, fill='black', font=fonts['title'])
    y += 40
    if invoice.society.address:
        draw.text((MARGIN, y), invoice.society.address[:80], fill='black', font=fonts['small'])
        y += 20

    draw.text((PAGE_WIDTH - MARGIN - 200, MARGIN), 'MAINTENANCE INVOICE', fill='black', font=fonts['heading'])
    code_img = render_code128(invoice.invoice_number, 260, 50)
    if code_img is not None:
        img.paste(code_img, (PAGE_WIDTH - MARGIN - code_img.size[0], MARGIN + 28))

    y += 30
    draw.line((MARGIN, y, PAGE_WIDTH - MARGIN, y), fill='black', width=2)
    y += 20

    details = [
        ('Invoice No', invoice.invoice_number),
        ('Unit', invoice.unit.label),
        ('Billed To', invoice.resident.display_name if invoice.resident_id else '-'),
        ('Month', invoice.month or '-'),
        ('Issue Date', invoice.issue_date.strftime('%d %b %Y')),
        ('Due Date', invoice.due_date.strftime('%d %b %Y')),
        ('Status', invoice.get_effective_status().upper()),
    ]
    if invoice.paid_date:
        details.append(('Paid On', f"{invoice.paid_date.strftime('%d %b %Y')} ({invoice.get_payment_mode_display()})"))
    for label, value in details:
        draw.text((MARGIN, y), f"{label}:", fill='black', font=fonts['heading'])
        draw.text((MARGIN + 160, y), str(value), fill='black', font=fonts['body'])
        y += 26

    y += 20
    draw.rectangle((MARGIN, y, PAGE_WIDTH - MARGIN, y + 30), fill='#eeeeee')
    draw.text((MARGIN + 10, y + 7), 'Description', fill='black', font=fonts['heading'])
    draw.text((PAGE_WIDTH - MARGIN - 150, y + 7), 'Amount', fill='black', font=fonts['heading'])
    y += 40

    items = list(invoice.items.all())
    if items:
        lines = [(item.name, item.amount) for item in items]
    else:
        lines = [('Maintenance', invoice.maintenance), ('Utilities', invoice.utilities)]
    if invoice.penalty:
        lines.append(('Late fee', invoice.penalty))

    for name, amount in lines:
        draw.text((MARGIN + 10, y), name[:60], fill='black', font=fonts['body'])
        draw.text((PAGE_WIDTH - MARGIN - 150, y), _money(amount), fill='black', font=fonts['body'])
        y += 26

    y += 10
    draw.line((MARGIN, y, PAGE_WIDTH - MARGIN, y), fill='black', width=1)
    y += 12
    draw.text((MARGIN + 10, y), 'Total', fill='black', font=fonts['heading'])
    draw.text((PAGE_WIDTH - MARGIN - 150, y), _money(invoice.amount), fill='black', font=fonts['heading'])

    if invoice.description:
        y += 50
        draw.text((MARGIN, y), invoice.description[:100], fill='black', font=fonts['small'])

    draw.text((MARGIN, PAGE_HEIGHT - MARGIN), 'This is a computer generated invoice.', fill='black', font=fonts['small'])

    buffer = io.BytesIO()
    img.save(buffer, format='PDF', resolution=100.0)
    img.close()
    return buffer.getvalue()
