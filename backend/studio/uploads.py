"""
Image upload validation and local storage of generated images.

Uploads are checked three ways before they reach the AI service: the
declared MIME type, the magic bytes of the file header, and a Pillow
open/verify. Generated images are mirrored under MEDIA_ROOT/generations so
the links we hand out do not expire with the provider's CDN.
"""
import logging
import os
import random
import string
import tempfile
import time
from pathlib import Path
from typing import Optional, Tuple

import requests
from django.conf import settings
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ('image/jpeg', 'image/jpg', 'image/png', 'image/webp')
MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB
DOWNLOAD_TIMEOUT = 30

GENERATIONS_DIR = 'generations'
# Paths served from disk by the download proxy; /uploads/ is the legacy prefix
LOCAL_PREFIXES = ('/media/generations/', '/uploads/')

BROWSER_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
    ),
    'Accept': 'image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8',
}


class UploadError(Exception):
    """Raised when an uploaded file is not an acceptable image"""


def sniff_image_type(header: bytes) -> Optional[str]:
    """Detect the image type from the first bytes of a file"""
    if header[:3] == b'\xff\xd8\xff':
        return 'image/jpeg'
    if header[:8] == b'\x89PNG\r\n\x1a\n':
        return 'image/png'
    if header[:4] == b'RIFF' and header[8:12] == b'WEBP':
        return 'image/webp'
    return None


def validate_image_file(uploaded) -> str:
    """
    Validate an uploaded file and return its detected MIME type.

    Raises UploadError with a user facing message.
    """
    content_type = (getattr(uploaded, 'content_type', '') or '').lower()
    if content_type not in ALLOWED_MIME_TYPES:
        raise UploadError(f"Invalid file type. Allowed: {', '.join(ALLOWED_MIME_TYPES)}")

    if uploaded.size > MAX_UPLOAD_SIZE:
        raise UploadError('File too large. Maximum size is 10MB')

    uploaded.seek(0)
    header = uploaded.read(12)
    uploaded.seek(0)
    detected = sniff_image_type(header)
    if detected is None:
        raise UploadError('File content does not match an allowed image type')

    try:
        with Image.open(uploaded) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise UploadError('File is not a valid image') from e
    finally:
        uploaded.seek(0)

    return detected


def save_upload(uploaded) -> str:
    """Write an upload to a temp file and return its path"""
    suffix = Path(getattr(uploaded, 'name', '') or '').suffix or '.png'
    with tempfile.NamedTemporaryFile(prefix='studio-', suffix=suffix, delete=False) as tmp:
        for chunk in uploaded.chunks():
            tmp.write(chunk)
    return tmp.name


def remove_temp_file(path: Optional[str]):
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temp file {path}: {e}")


def extension_for_content_type(content_type: Optional[str]) -> str:
    content_type = (content_type or '').lower()
    if 'jpeg' in content_type or 'jpg' in content_type:
        return 'jpg'
    if 'webp' in content_type:
        return 'webp'
    return 'png'


def content_type_for_extension(extension: str) -> str:
    extension = extension.lower().lstrip('.')
    if extension in ('jpg', 'jpeg'):
        return 'image/jpeg'
    if extension == 'webp':
        return 'image/webp'
    return 'image/png'


def _generated_filename(extension: str) -> str:
    rand = ''.join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"gen-{int(time.time() * 1000)}-{rand}.{extension}"


def download_and_save_image(url: Optional[str]) -> Optional[str]:
    """
    Mirror a remote image under MEDIA_ROOT/generations.

    Returns the public path (/media/generations/<file>) or None on any
    failure, in which case callers keep the remote URL.
    """
    if not url:
        return None
    try:
        logger.info(f"Downloading generated image from {url}")
        response = requests.get(url, headers=BROWSER_HEADERS, timeout=DOWNLOAD_TIMEOUT)
        response.raise_for_status()

        extension = extension_for_content_type(response.headers.get('Content-Type'))
        filename = _generated_filename(extension)
        target_dir = Path(settings.MEDIA_ROOT) / GENERATIONS_DIR
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / filename).write_bytes(response.content)

        logger.info(f"Saved generated image to {target_dir / filename}")
        return f"{settings.MEDIA_URL}{GENERATIONS_DIR}/{filename}"
    except (requests.exceptions.RequestException, OSError) as e:
        logger.error(f"Failed to save generated image locally: {e}")
        return None


def is_local_media_path(url: str) -> bool:
    return any(url.startswith(prefix) or url.startswith(prefix.lstrip('/')) for prefix in LOCAL_PREFIXES)


def resolve_local_path(url: str) -> Path:
    """
    Map /media/generations/<file> (or legacy /uploads/<file>) to a file on disk.

    Raises UploadError if the path escapes the generations directory.
    """
    base = (Path(settings.MEDIA_ROOT) / GENERATIONS_DIR).resolve()
    relative = url.lstrip('/')
    for prefix in LOCAL_PREFIXES:
        stripped = prefix.lstrip('/')
        if relative.startswith(stripped):
            relative = relative[len(stripped):]
            break
    candidate = (base / relative).resolve()
    if candidate != base and base not in candidate.parents:
        raise UploadError('Invalid file path')
    return candidate


def fetch_image(url: str) -> Tuple[bytes, str]:
    """
    Return (content, content_type) for a local generation path or a remote URL.

    Raises FileNotFoundError, UploadError or requests exceptions.
    """
    if is_local_media_path(url):
        path = resolve_local_path(url)
        if not path.is_file():
            raise FileNotFoundError(url)
        return path.read_bytes(), content_type_for_extension(path.suffix)

    if not url.startswith(('http://', 'https://')):
        raise UploadError('Invalid URL')

    response = requests.get(url, headers=BROWSER_HEADERS, timeout=DOWNLOAD_TIMEOUT)
    response.raise_for_status()
    return response.content, response.headers.get('Content-Type') or 'image/png'
