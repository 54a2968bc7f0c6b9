from fastapi import UploadFile

from app.core.exceptions import InvalidInputError, MissingFileError
from app.services.file_processor import UploadedDocument


async def read_upload(file: UploadFile | None) -> UploadedDocument:
    """Read a multipart upload into a request-scoped document."""
    if file is None or not file.filename:
        raise MissingFileError("No file provided")

    try:
        content = await file.read()
    except Exception as e:
        raise InvalidInputError(f"Failed to read file: {e}")
    finally:
        await file.close()

    return UploadedDocument(content=content, filename=file.filename)
