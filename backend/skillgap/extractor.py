# skillgap/extractor.py
# ─────────────────────────────────────────────────────────────────────────────
# Resume document -> plain text.
#
# Two fetch paths:
#   1. S3 object URLs (https://{bucket}.s3[.{region}].amazonaws.com/{key})
#      go through boto3 with credentials, so private buckets work.
#   2. Everything else is a plain HTTP GET that follows a bounded number
#      of redirects.
#
# The whole body is read into memory and decoded with PyMuPDF. Text comes out
# in content-stream order, which for multi-column layouts may differ from the
# visual reading order. Nothing is cached: each call fetches and decodes again.
# ─────────────────────────────────────────────────────────────────────────────

import logging
import re
import time
from typing import Optional, Tuple
from urllib.parse import urlparse, unquote

import boto3
import fitz  # PyMuPDF
import httpx
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError, ConnectTimeoutError, ReadTimeoutError

from config import AWS_REGION, DOCUMENT_FETCH_TIMEOUT, DOCUMENT_MAX_REDIRECTS
from exceptions import ExtractionError

logger = logging.getLogger(__name__)

_S3_HOST = re.compile(r"^(?P<bucket>[a-z0-9][a-z0-9.-]*?)\.s3(?:[.-](?P<region>[a-z0-9-]+))?\.amazonaws\.com$")


def parse_s3_url(uri: str) -> Optional[Tuple[str, str]]:
    """Return (bucket, key) for a virtual-hosted S3 object URL, else None."""
    parsed = urlparse(uri)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    match = _S3_HOST.match(parsed.hostname.lower())
    if not match:
        return None
    key = unquote(parsed.path.lstrip("/"))
    if not key:
        return None
    return match.group("bucket"), key


def pdf_to_text(data: bytes) -> str:
    """Decode PDF bytes into page texts joined by newlines."""
    if not data:
        raise ExtractionError("document is empty")
    # PDF readers accept the header anywhere in the first 1024 bytes
    if b"%PDF-" not in data[:1024]:
        raise ExtractionError("not a readable PDF (missing %PDF header)")
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise ExtractionError(f"not a readable PDF ({e})") from e

    try:
        if doc.needs_pass:
            raise ExtractionError("PDF is encrypted")
        text = "\n".join(page.get_text("text") for page in doc)
    finally:
        doc.close()
    return text.strip()


class DocumentExtractor:
    """Fetch a PDF by URI and return its text. Raises ExtractionError."""

    def __init__(
        self,
        timeout: float = DOCUMENT_FETCH_TIMEOUT,
        max_redirects: int = DOCUMENT_MAX_REDIRECTS,
        s3_client=None,
        transport: Optional[httpx.BaseTransport] = None,
        clock=time.monotonic,
    ):
        self.timeout = timeout
        self.max_redirects = max_redirects
        self._s3_client = s3_client
        self._transport = transport
        self._clock = clock

    def __call__(self, uri: str) -> str:
        return self.extract(uri)

    def extract(self, uri: str) -> str:
        data = self.fetch(uri)
        logger.info("Downloaded document from %s (%d bytes)", uri, len(data))
        try:
            text = pdf_to_text(data)
        except ExtractionError as e:
            e.details["uri"] = uri
            raise
        logger.info("PDF extraction successful, text length: %d", len(text))
        return text

    def fetch(self, uri: str) -> bytes:
        if not uri:
            raise ExtractionError("no document URI given")
        location = parse_s3_url(uri)
        if location:
            return self._download_from_s3(uri, *location)
        return self._download_from_url(uri)

    # ── S3 ────────────────────────────────────────────────────────────────────

    @property
    def s3(self):
        if self._s3_client is None:
            self._s3_client = boto3.client(
                "s3",
                region_name=AWS_REGION,
                config=BotoConfig(
                    connect_timeout=self.timeout,
                    read_timeout=self.timeout,
                    retries={"total_max_attempts": 1, "mode": "standard"},
                ),
            )
        return self._s3_client

    def _download_from_s3(self, uri: str, bucket: str, key: str) -> bytes:
        logger.info("Downloading from S3: bucket=%s key=%s", bucket, key)
        try:
            response = self.s3.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()
        except (ConnectTimeoutError, ReadTimeoutError) as e:
            raise ExtractionError("S3 download timed out", uri=uri, timeout=True) from e
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            raise ExtractionError(f"S3 returned {code}", uri=uri) from e
        except BotoCoreError as e:
            raise ExtractionError(f"S3 unreachable ({e})", uri=uri) from e

    # ── Generic HTTP ──────────────────────────────────────────────────────────

    def _download_from_url(self, uri: str) -> bytes:
        # httpx timeouts are per connect/read, so a body that trickles in
        # is also held to one overall deadline
        deadline = self._clock() + self.timeout
        try:
            with httpx.Client(
                follow_redirects=True,
                max_redirects=self.max_redirects,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                with client.stream("GET", uri) as response:
                    if response.status_code != 200:
                        raise ExtractionError(f"HTTP {response.status_code}: failed to download PDF", uri=uri)
                    chunks = []
                    for chunk in response.iter_bytes():
                        if self._clock() > deadline:
                            raise ExtractionError(
                                f"download exceeded {self.timeout:g}s deadline", uri=uri, timeout=True,
                            )
                        chunks.append(chunk)
        except httpx.TimeoutException as e:
            raise ExtractionError("download timed out", uri=uri, timeout=True) from e
        except httpx.TooManyRedirects as e:
            raise ExtractionError(f"more than {self.max_redirects} redirects", uri=uri) from e
        except httpx.HTTPError as e:
            raise ExtractionError(f"unreachable ({e})", uri=uri) from e

        return b"".join(chunks)


_default_extractor = DocumentExtractor()


def extract_text(uri: str) -> str:
    return _default_extractor.extract(uri)
