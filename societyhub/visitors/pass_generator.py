"""
Gate pass image generator
Draws a printable pass with PIL/Pillow and a Code128 of the pass code
"""
import io
from django.utils import timezone
from PIL import Image, ImageDraw
from societyhub.core.barcodes import load_fonts, render_code128


def generate_pass_image(visitor, width: int = 600, height: int = 320) -> bytes:
    """
    Render the visitor's gate pass as PNG bytes.

    Args:
        visitor: Visitor instance (society and visiting_unit are read)
        width: Image width in pixels
        height: Image height in pixels
    """
    fonts = load_fonts()
    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)
    draw.rectangle((4, 4, width - 5, height - 5), outline='black', width=2)

    margin = 20
    y = margin
    draw.text((margin, y), visitor.society.name[:40], fill='black', font=fonts['heading'])
    draw.text((width - margin - 110, y), 'GATE PASS', fill='black', font=fonts['heading'])
    y += 34
    draw.line((margin, y, width - margin, y), fill='black', width=1)
    y += 12

    when = visitor.expected_at or visitor.entry_time or visitor.created_at
    lines = [
        ('Visitor', visitor.name[:40]),
        ('Phone', visitor.phone),
        ('Unit', visitor.visiting_unit.label if visitor.visiting_unit_id else '-'),
        ('Purpose', (visitor.purpose or '-')[:40]),
        ('Vehicle', visitor.vehicle_no or '-'),
        ('Date', timezone.localtime(when).strftime('%d %b %Y %H:%M') if when else '-'),
        ('Status', visitor.get_status_display()),
    ]
    for label, value in lines:
        draw.text((margin, y), f"{label}:", fill='black', font=fonts['small'])
        draw.text((margin + 90, y), str(value), fill='black', font=fonts['body'])
        y += 22

    code_img = render_code128(visitor.pass_code, width - 2 * margin, 60)
    if code_img is not None:
        x = (width - code_img.size[0]) // 2
        img.paste(code_img, (x, height - margin - 80))
    draw.text((margin, height - margin - 16), visitor.pass_code, fill='black', font=fonts['small'])

    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=True)
    img.close()
    return buffer.getvalue()
