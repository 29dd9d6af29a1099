# apps/properties/storage.py: property photo storage (S3-compatible bucket or local media)

import hashlib
import logging
import uuid
from io import BytesIO

import boto3  # type: ignore
from botocore.client import Config as BotoConfig  # type: ignore
from botocore.exceptions import ClientError, EndpointConnectionError  # type: ignore
from PIL import Image, UnidentifiedImageError  # type: ignore

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.files.storage import Storage, default_storage  # type: ignore

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_FORMATS = ("JPEG", "PNG", "WEBP", "GIF")


def format_file_size(size):
    if size >= 1024 * 1024:
        return f"{size / 1024 / 1024:g} MB"
    if size >= 1024:
        return f"{size / 1024:g} KB"
    return f"{size} bytes"


def validate_property_image(file_obj):
    """Reject non-images and files over the configured size limit."""
    max_size = getattr(settings, "PROPERTY_IMAGE_MAX_SIZE", 10 * 1024 * 1024)
    size = getattr(file_obj, "size", None)
    if size is not None and size > max_size:
        raise ValidationError(f"File is too large. Maximum is {format_file_size(max_size)}.")

    try:
        file_obj.seek(0)
        img = Image.open(file_obj)
        img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValidationError("Only image files can be uploaded.")
    finally:
        file_obj.seek(0)

    if img.format not in ALLOWED_IMAGE_FORMATS:
        raise ValidationError(f"Unsupported image format: {img.format}.")
    return file_obj


class PropertyImageStorage(Storage):
    """Bucket storage for listing photos; downsizes large images before upload."""

    def __init__(self):
        self.s3_client = boto3.client(
            "s3",
            endpoint_url=getattr(settings, "S3_ENDPOINT_URL", None),
            aws_access_key_id=getattr(settings, "S3_ACCESS_KEY", ""),
            aws_secret_access_key=getattr(settings, "S3_SECRET_KEY", ""),
            region_name=getattr(settings, "S3_REGION", "us-east-1"),
            config=BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
        self.bucket_name = getattr(settings, "S3_BUCKET_NAME", "property-images")
        self.public_base = getattr(settings, "S3_PUBLIC_BASE", "").rstrip("/")
        self.max_dimension = getattr(settings, "PROPERTY_IMAGE_MAX_DIMENSION", 2048)

    def _optimize_image(self, content, quality=85):
        """Returns (bytes_io, ext, content_type)."""
        img = Image.open(content)
        if img.format == "GIF":
            content.seek(0)
            return BytesIO(content.read()), "gif", "image/gif"

        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGB")
        if img.width > self.max_dimension or img.height > self.max_dimension:
            img.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)

        out = BytesIO()
        if img.mode == "RGBA":
            img.save(out, format="WEBP", quality=quality, method=6)
            ext, ctype = "webp", "image/webp"
        else:
            img.save(out, format="JPEG", quality=quality, optimize=True)
            ext, ctype = "jpg", "image/jpeg"
        out.seek(0)
        return out, ext, ctype

    def _save(self, name, content):
        content.seek(0)
        optimized_io, ext, content_type = self._optimize_image(content)
        digest = hashlib.md5(optimized_io.getbuffer()).hexdigest()[:8]
        key = f"properties/{digest}_{uuid.uuid4().hex[:8]}.{ext}"

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=optimized_io.getvalue(),
                ContentType=content_type,
                CacheControl="max-age=31536000",
                Metadata={"original_name": name},
            )
        except (EndpointConnectionError, ClientError) as e:
            logger.error(f"Failed to upload property image {name}: {e}")
            raise
        logger.info(f"Uploaded property image {key}")
        return key

    def delete(self, name):
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=name)
        except (EndpointConnectionError, ClientError) as e:
            logger.error(f"Failed to delete property image {name}: {e}")
            raise

    def exists(self, name):
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=name)
        except ClientError:
            return False
        return True

    def url(self, name):
        if self.public_base:
            return f"{self.public_base}/{name.lstrip('/')}"
        endpoint = (getattr(settings, "S3_ENDPOINT_URL", None) or "").rstrip("/")
        if endpoint:
            return f"{endpoint}/{self.bucket_name}/{name.lstrip('/')}"
        return self.s3_client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": name},
            ExpiresIn=3600,
        )


def select_image_storage():
    if getattr(settings, "S3_ENABLED", False):
        return PropertyImageStorage()
    return default_storage
