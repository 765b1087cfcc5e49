from __future__ import annotations

import base64
import io
from urllib.parse import urlencode

import qrcode
from qrcode.constants import ERROR_CORRECT_H


def build_checkin_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/checkin?{urlencode({'token': token})}"


def render_qr_data_url(url: str) -> str:
    """Render `url` as a PNG QR code and return it as a data URL."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_H, box_size=10, border=2)
    qr.add_data(url)
    qr.make(fit=True)
    img = qr.make_image(fill_color="#1a1a2e", back_color="#ffffff")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
