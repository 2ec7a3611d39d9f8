"""
Shared drawing helpers for generated documents (invoice PDF, gate pass)
Uses PIL/Pillow and python-barcode
"""
import logging
from typing import Optional
from PIL import Image, ImageFont
import barcode
from barcode.writer import ImageWriter

logger = logging.getLogger(__name__)


def load_fonts():
    """Regular/bold fonts, falling back to Pillow's built-in font"""
    try:
        return {
            'title': ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', 28),
            'heading': ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', 16),
            'body': ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 14),
            'small': ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 12),
        }
    except (OSError, IOError):
        default = ImageFont.load_default()
        return {'title': default, 'heading': default, 'body': default, 'small': default}


def render_code128(value: str, max_width: int, max_height: int) -> Optional[Image.Image]:
    """Code128 barcode image scaled to fit the given box, or None if it cannot be drawn"""
    try:
        code128 = barcode.get_barcode_class('code128')
        barcode_img = code128(value, writer=ImageWriter()).render({
            'write_text': False,
            'module_width': 0.3,
            'module_height': 12.0,
            'quiet_zone': 2.0,
            'font_size': 0,
            'text_distance': 0,
            'background': 'white',
            'foreground': 'black',
        })
    except Exception as e:
        logger.error(f"Barcode generation failed for '{value}': {str(e)}")
        return None

    width, height = barcode_img.size
    scale = min(max_width / width, max_height / height, 1.0)
    return barcode_img.resize((max(int(width * scale), 1), max(int(height * scale), 1)), Image.Resampling.BILINEAR)
