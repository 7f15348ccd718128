from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse
from pathlib import Path
from typing import Optional
import logging
import re
import time

import config

uploads_router = APIRouter()
logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _upload_dir() -> Path:
    path = Path(config.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _stored_name(original: Optional[str]) -> str:
    """``<epoch ms>-<original name>`` with directory parts and odd characters removed."""
    base = Path(original or "upload").name
    base = _UNSAFE_CHARS.sub("_", base).strip("._") or "upload"
    return f"{int(time.time() * 1000)}-{base}"


@uploads_router.post("/api/upload", tags=["Uploads"])
async def upload_file(request: Request, file: Optional[UploadFile] = File(None)):
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded.")

    filename = _stored_name(file.filename)
    destination = _upload_dir() / filename
    data = await file.read()
    destination.write_bytes(data)
    logger.info(f"Stored upload {filename} ({len(data)} bytes, {file.content_type})")

    file_url = str(request.url_for("get_uploaded_file", filename=filename))
    return {"url": file_url, "filename": filename}


@uploads_router.get("/uploads/{filename}", name="get_uploaded_file", tags=["Uploads"])
async def get_uploaded_file(filename: str):
    upload_dir = _upload_dir().resolve()
    path = (upload_dir / filename).resolve()
    if path.parent != upload_dir or not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(path)
