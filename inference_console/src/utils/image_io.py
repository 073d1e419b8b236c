import mimetypes
from pathlib import PurePath

from src.core.errors import ValidationError
from src.core.types import ImageFile


def _guess_content_type(filename: str) -> str:
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or 'application/octet-stream'


def to_image_file(image, max_bytes: int) -> ImageFile:
    """Accept an ImageFile or a binary file-like object and return an ImageFile.

    Image bytes are passed through untouched; nothing here decodes them.
    """
    if image is None:
        raise ValidationError('MISSING_IMAGE', 'Please upload an image first.')

    if isinstance(image, ImageFile):
        upload = image
    elif callable(getattr(image, 'read', None)):
        content = image.read()
        if not isinstance(content, (bytes, bytearray)):
            raise ValidationError('INVALID_IMAGE', 'Invalid file provided')
        raw_name = getattr(image, 'name', None)
        filename = PurePath(raw_name).name if isinstance(raw_name, str) and raw_name else 'upload.jpg'
        upload = ImageFile(
            filename=filename,
            content=bytes(content),
            content_type=getattr(image, 'content_type', None) or _guess_content_type(filename),
        )
    else:
        raise ValidationError('INVALID_IMAGE', 'Invalid file provided')

    if not upload.content:
        raise ValidationError('MISSING_IMAGE', 'Missing image upload (field name: image).')
    if len(upload.content) > max_bytes:
        raise ValidationError('IMAGE_TOO_LARGE', f'Image too large. Max {max_bytes} bytes.', status_code=413)
    return upload
