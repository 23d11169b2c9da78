# Provisioning Module
"""
Enrollment helpers with no cryptographic role:
- otpauth:// URI construction
- Hosted QR service links
- Local QR rendering (qrcode)
"""

from .qr import (
    create_qr_code,
    provisioning_uri,
    render_qr_ascii,
    save_qr_image,
)

__all__ = [
    'create_qr_code',
    'provisioning_uri',
    'render_qr_ascii',
    'save_qr_image',
]
