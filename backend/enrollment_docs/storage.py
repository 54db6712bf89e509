"""
Optional S3 storage for generated documents.

Storage is disabled unless a bucket is configured. An upload failure is logged
and reported as a missing location; it never fails the generation request.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

import boto3

from .field_maps import DocumentKind
from .records import DocumentOutput

logger = logging.getLogger(__name__)

STORAGE_FOLDERS: Dict[DocumentKind, str] = {
    DocumentKind.COMMITMENT: "actas-compromiso",
    DocumentKind.DATA_TREATMENT: "tratamiento-datos",
}

Uploader = Callable[[DocumentKind, DocumentOutput], Optional[str]]


class S3Uploader:
    """Uploads a document to ``s3://{bucket}/{prefix}{folder}/{filename}``."""

    def __init__(self, bucket: str, prefix: str = "enrollment-docs/", s3_client=None):
        self.bucket = bucket
        self.prefix = prefix
        self.s3 = s3_client if s3_client is not None else boto3.client("s3")

    def key_for(self, kind: DocumentKind, filename: str) -> str:
        return f"{self.prefix}{STORAGE_FOLDERS[kind]}/{filename}"

    def __call__(self, kind: DocumentKind, document: DocumentOutput) -> Optional[str]:
        key = self.key_for(kind, document.filename)
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=document.content,
                ContentType="application/pdf",
            )
        except Exception as exc:
            logger.error("Failed to upload %s to s3://%s/%s: %s", document.filename, self.bucket, key, exc)
            return None
        logger.info("Stored %s at s3://%s/%s", document.filename, self.bucket, key)
        return f"s3://{self.bucket}/{key}"
