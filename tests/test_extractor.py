import boto3
import httpx
import pytest
from moto import mock_aws

from exceptions import ExtractionError
from skillgap.extractor import DocumentExtractor, parse_s3_url, pdf_to_text
from fakes import make_pdf


def _http_extractor(handler, **kwargs):
    return DocumentExtractor(transport=httpx.MockTransport(handler), **kwargs)


class TestParseS3Url:

    def test_regional_virtual_hosted_url(self):
        url = "https://skillgap-resumes.s3.us-east-1.amazonaws.com/resumes/1700000000-my%20cv.pdf"
        assert parse_s3_url(url) == ("skillgap-resumes", "resumes/1700000000-my cv.pdf")

    def test_global_endpoint(self):
        assert parse_s3_url("https://bucket.s3.amazonaws.com/a.pdf") == ("bucket", "a.pdf")

    @pytest.mark.parametrize("url", [
        "https://example.com/cv.pdf",
        "https://s3.amazonaws.com/bucket/cv.pdf",
        "https://bucket.s3.us-east-1.amazonaws.com/",
        "ftp://bucket.s3.amazonaws.com/cv.pdf",
    ])
    def test_other_urls_use_http(self, url):
        assert parse_s3_url(url) is None


class TestPdfToText:

    def test_decodes_text(self):
        assert "Senior Python developer" in pdf_to_text(make_pdf("Senior Python developer"))

    def test_rejects_non_pdf(self):
        with pytest.raises(ExtractionError):
            pdf_to_text(b"<html>not a pdf</html>")

    def test_rejects_empty(self):
        with pytest.raises(ExtractionError):
            pdf_to_text(b"")


class TestHttpPath:

    def test_downloads_and_decodes(self):
        pdf = make_pdf("Data engineer, Spark and Airflow")

        def handler(request):
            return httpx.Response(200, content=pdf)

        text = _http_extractor(handler).extract("https://files.example.com/cv.pdf")
        assert "Spark and Airflow" in text

    def test_follows_redirects(self):
        pdf = make_pdf("Redirected resume")

        def handler(request):
            if request.url.path == "/old.pdf":
                return httpx.Response(302, headers={"Location": "https://files.example.com/new.pdf"})
            return httpx.Response(200, content=pdf)

        assert "Redirected resume" in _http_extractor(handler).extract("https://files.example.com/old.pdf")

    def test_redirect_loop_is_bounded(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            return httpx.Response(302, headers={"Location": str(request.url)})

        with pytest.raises(ExtractionError, match="redirects"):
            _http_extractor(handler, max_redirects=3).extract("https://files.example.com/loop.pdf")
        assert len(calls) == 4

    def test_non_200_fails(self):
        def handler(request):
            return httpx.Response(403)

        with pytest.raises(ExtractionError, match="HTTP 403"):
            _http_extractor(handler).extract("https://files.example.com/cv.pdf")

    def test_timeout_is_flagged(self):
        def handler(request):
            raise httpx.ReadTimeout("stalled", request=request)

        with pytest.raises(ExtractionError) as exc_info:
            _http_extractor(handler).extract("https://files.example.com/cv.pdf")
        assert exc_info.value.timeout is True

    def test_trickling_body_hits_overall_deadline(self):
        # Each chunk arrives within the read timeout, but the total exceeds it
        ticks = iter([0, 20, 40, 60])

        def handler(request):
            return httpx.Response(200, content=iter([b"%PDF-1.4\n", b"...", b"%%EOF"]))

        extractor = _http_extractor(handler, timeout=30, clock=lambda: next(ticks))
        with pytest.raises(ExtractionError, match="deadline") as exc_info:
            extractor.extract("https://files.example.com/cv.pdf")
        assert exc_info.value.timeout is True

    def test_chunked_body_within_deadline(self):
        pdf = make_pdf("Chunked resume")

        def handler(request):
            return httpx.Response(200, content=iter([pdf[:100], pdf[100:]]))

        text = _http_extractor(handler, clock=lambda: 0).extract("https://files.example.com/cv.pdf")
        assert "Chunked resume" in text

    def test_unreachable_host_fails(self):
        def handler(request):
            raise httpx.ConnectError("name resolution failed", request=request)

        with pytest.raises(ExtractionError, match="unreachable"):
            _http_extractor(handler).extract("https://nowhere.invalid/cv.pdf")

    def test_html_body_fails_decode(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>login page</html>")

        with pytest.raises(ExtractionError, match="not a readable PDF"):
            _http_extractor(handler).extract("https://files.example.com/cv.pdf")


class TestS3Path:

    def test_downloads_private_object(self, aws_credentials):
        with mock_aws():
            s3 = boto3.client("s3", region_name="us-east-1")
            s3.create_bucket(Bucket="skillgap-resumes")
            s3.put_object(Bucket="skillgap-resumes", Key="resumes/1-cv.pdf", Body=make_pdf("Go and gRPC"))

            extractor = DocumentExtractor(s3_client=s3)
            text = extractor.extract("https://skillgap-resumes.s3.us-east-1.amazonaws.com/resumes/1-cv.pdf")

        assert "Go and gRPC" in text

    def test_missing_object_fails(self, aws_credentials):
        with mock_aws():
            s3 = boto3.client("s3", region_name="us-east-1")
            s3.create_bucket(Bucket="skillgap-resumes")

            extractor = DocumentExtractor(s3_client=s3)
            with pytest.raises(ExtractionError, match="NoSuchKey"):
                extractor.extract("https://skillgap-resumes.s3.us-east-1.amazonaws.com/resumes/missing.pdf")
