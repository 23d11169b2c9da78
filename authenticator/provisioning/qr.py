"""
Provisioning URIs and QR Codes

Builds the otpauth:// URI an authenticator app scans during enrollment,
the link to a hosted QR rendering service, and local QR renderings of the
same URI.

This module performs no cryptography. The only sensitive value it handles
is the secret itself, which ends up in the URI by design; never log the
returned strings.
"""

import io
import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote, quote_plus

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

logger = logging.getLogger(__name__)


QR_SERVICE_URL = 'https://api.qrserver.com/v1/create-qr-code/'
DEFAULT_QR_SIZE = 200
DEFAULT_QR_LEVEL = 'M'

ERROR_CORRECTION_LEVELS = {
    'L': ERROR_CORRECT_L,
    'M': ERROR_CORRECT_M,
    'Q': ERROR_CORRECT_Q,
    'H': ERROR_CORRECT_H,
}


def _form_encode(value: str) -> str:
    # application/x-www-form-urlencoded; '~' is escaped as well
    return quote_plus(value, safe='').replace('~', '%7E')


def _dimension(value: Any) -> int:
    """Positive pixel size, or the default for missing/invalid values."""
    if not value:
        return DEFAULT_QR_SIZE
    try:
        size = int(value)
    except (TypeError, ValueError):
        return DEFAULT_QR_SIZE
    return size if size > 0 else DEFAULT_QR_SIZE


def _level(value: Any) -> str:
    return value if value in ERROR_CORRECTION_LEVELS else DEFAULT_QR_LEVEL


def provisioning_uri(name: str, secret: str, title: Optional[str] = None) -> str:
    """
    Build the otpauth:// URI for an account.

    Args:
        name: Account label shown in the app
        secret: Base32 secret
        title: Optional issuer name

    Returns:
        otpauth://totp/<name>?secret=<secret>[&issuer=<title>]
    """
    uri = f'otpauth://totp/{quote(name)}?secret={quote(secret)}'
    if title is not None:
        uri += '&issuer=' + quote(title)
    return uri


def create_qr_code(name: str, secret: str, title: Optional[str] = None,
                   params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Build a link to a hosted QR code image of the provisioning URI.

    Args:
        name: Account label
        secret: Base32 secret
        title: Optional issuer name
        params: Optional 'width', 'height' (positive ints, default 200)
            and 'level' ('L', 'M', 'Q' or 'H', default 'M')

    Returns:
        QR service URL with the form-encoded otpauth URI as data
    """
    params = params or {}
    width = _dimension(params.get('width'))
    height = _dimension(params.get('height'))
    level = _level(params.get('level'))

    data = _form_encode(f'otpauth://totp/{name}?secret={secret}')
    if title is not None:
        data += _form_encode('&issuer=' + _form_encode(title))

    return f'{QR_SERVICE_URL}?data={data}&size={width}x{height}&ecc={level}'


def _build_qr(uri: str, level: str) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION_LEVELS[_level(level)],
        box_size=10,
        border=4,
    )
    qr.add_data(uri)
    qr.make(fit=True)
    return qr


def render_qr_ascii(uri: str, level: str = DEFAULT_QR_LEVEL) -> str:
    """
    Render a provisioning URI as a terminal-printable QR code.

    Args:
        uri: Data to encode, usually from provisioning_uri()
        level: Error correction level

    Returns:
        ASCII QR code string
    """
    qr = _build_qr(uri, level)
    out = io.StringIO()
    qr.print_ascii(out=out)
    return out.getvalue()


def save_qr_image(uri: str, filename: str, level: str = DEFAULT_QR_LEVEL) -> None:
    """
    Save a provisioning URI as a QR code image file.

    Args:
        uri: Data to encode
        filename: Target path; the format follows the extension
        level: Error correction level
    """
    qr = _build_qr(uri, level)
    img = qr.make_image(fill_color="black", back_color="white")
    img.save(filename)
    logger.debug("Saved QR code image to %s", filename)
