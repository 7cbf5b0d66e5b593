"""
QR code image generator
"""
import qrcode
import io
from PIL import Image
import config

class QRCodeGenerator:
    """Renders text as QR code PNG images"""

    def __init__(self, size: int = config.QR_IMAGE_SIZE, border: int = 4):
        self.size = size
        self.border = border

    def generate_png(self, text: str) -> bytes:
        """
        Generate QR code for text
        Returns a square PNG of `size` pixels
        """
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=self.border,
        )
        qr.add_data(text)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white").get_image()
        img = img.convert("RGB").resize((self.size, self.size), Image.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format='PNG')
        return buffer.getvalue()
