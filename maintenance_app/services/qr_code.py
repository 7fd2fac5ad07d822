"""
QR label rendering. The payload is the literal equipment id, so scanning a
label and calling validate_qr_code() with the text resolves the equipment
directly. No checksum or signature is added.
"""

from io import BytesIO

import qrcode


def render_qr_png(payload: str, box_size: int = 10, border: int = 4) -> bytes:
    """
    Render a payload as a PNG QR code.

    Raises:
        ValueError: If the payload is empty
    """
    if not payload:
        raise ValueError("QR payload must not be empty")
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image()
    buf = BytesIO()
    img.save(buf)
    return buf.getvalue()
