import uuid
import logging
from pathlib import Path

from fastapi import UploadFile

from app.core.errors import AppError, ServerError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png"}
CHUNK_SIZE = 1024 * 1024


class FileTooLarge(ValidationError):
    status_code = 413
    code = "FILE_TOO_LARGE"
    message = "File too large"


def validate_image(file: UploadFile) -> str:
    """Return the lower-cased extension of an acceptable image upload"""
    if not file or not file.filename:
        raise ValidationError("No file uploaded", code="NO_FILE")
    ext = Path(file.filename).suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS or file.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Only .jpeg, .jpg and .png formats are allowed", code="BAD_FILE_TYPE")
    return ext


async def save_profile_image(file: UploadFile, uploads_dir: Path, max_bytes: int) -> str:
    """
    Stream an image upload into uploads_dir under a unique name.

    Returns the public path of the stored file, e.g. /uploads/<name>.png
    """
    ext = validate_image(file)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{ext}"
    target = uploads_dir / filename

    total = 0
    try:
        with open(target, "wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if total > max_bytes:
                    raise FileTooLarge(f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB")
                out.write(chunk)
    except AppError:
        target.unlink(missing_ok=True)
        raise
    except OSError as e:
        target.unlink(missing_ok=True)
        logger.error(f"Failed to save upload: {e}")
        raise ServerError("Failed to save file")

    logger.info("Stored profile image %s (%d bytes)", filename, total)
    return f"/uploads/{filename}"
