# upload_api.py
"""
Resume upload to S3. Stores the object URL on the candidate profile.
"""

import logging
import time
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from auth import get_current_user
from config import AWS_BUCKET_NAME, AWS_REGION, MAX_UPLOAD_BYTES
from database import get_db, update_fields
from exceptions import AppException, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])


@lru_cache(maxsize=1)
def get_s3_client():
    return boto3.client("s3", region_name=AWS_REGION)


def object_url(bucket: str, region: str, key: str) -> str:
    return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"


def upload_to_s3(s3, data: bytes, filename: str, content_type: str) -> str:
    key = f"resumes/{int(time.time() * 1000)}-{filename}"
    try:
        s3.put_object(Bucket=AWS_BUCKET_NAME, Key=key, Body=data, ContentType=content_type)
    except (BotoCoreError, ClientError) as e:
        logger.error("S3 upload failed for %s: %s", key, e)
        raise AppException("Error uploading file", status_code=502, error_code="UPLOAD_FAILED") from e
    return object_url(AWS_BUCKET_NAME, AWS_REGION, key)


@router.post("/resume")
def upload_resume(resume: UploadFile = File(...), user=Depends(get_current_user),
                  db: Session = Depends(get_db), s3=Depends(get_s3_client)):
    if resume.content_type != "application/pdf":
        raise ValidationError("Invalid file type, only PDF is allowed!", field="resume")

    data = resume.file.read(MAX_UPLOAD_BYTES + 1)
    if not data:
        raise ValidationError("No file uploaded", field="resume")
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError(f"File exceeds the {MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit", field="resume")

    filename = (resume.filename or "resume.pdf").replace("/", "_")
    url = upload_to_s3(s3, data, filename, resume.content_type)
    update_fields(db, user, {"resume_url": url})

    logger.info("Resume uploaded for %s: %s (%d bytes)", user.auth_id, url, len(data))
    return {"message": "Resume uploaded successfully", "url": url}
