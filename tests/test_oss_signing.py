import datetime as dt
import re

import pytest

from awos.http_client import OssSigner, SignableRequest, get_signer, http_date

DATE = "Mon, 01 Jan 2024 00:00:00 GMT"


def _request(credentials, method="PUT", object="o", **kwargs):
    return SignableRequest(method, "b", object, credentials, endpoint="e", **kwargs)


class TestOssSignRequest:
    def test_reference_vector(self, credentials):
        req = _request(credentials).add_header("date", DATE)
        auth = OssSigner().sign_request(req)
        assert auth == "OSS ID:QgkgclncuZBZ8I5QMkbX+sbzedk="
        assert req.get_header("authorization") == auth

    def test_string_to_sign_layout(self, credentials):
        req = _request(credentials).add_header("date", DATE)
        ctx = OssSigner().build_context(req)
        assert ctx.string_to_sign == "PUT\n\n\nMon, 01 Jan 2024 00:00:00 GMT\n/b/o"
        assert ctx.canonical_resource == "/b/o"

    def test_date_stamped_from_clock(self, credentials):
        req = _request(credentials)
        now = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)
        auth = OssSigner().sign_request(req, now=now)
        assert req.get_header("date") == DATE
        assert auth == "OSS ID:QgkgclncuZBZ8I5QMkbX+sbzedk="

    def test_headers_meta_and_subresource(self, credentials):
        req = _request(credentials).add_header("date", DATE)
        req.set_content_type("text/plain")
        req.add_meta([("Test-Key", "test-val")])
        req.add_param("acl")
        ctx = OssSigner().build_context(req)
        assert ctx.string_to_sign == (
            "PUT\n\ntext/plain\nMon, 01 Jan 2024 00:00:00 GMT\n"
            "x-oss-meta-test-key:test-val\n/b/o?acl"
        )
        assert OssSigner().sign_request(req) == "OSS ID:yT+jA3y+QO3kFhNgDze+1LqU20U="

    def test_non_subresource_params_ignored(self, credentials):
        req = _request(credentials, method="GET", object="").add_header("date", DATE)
        req.add_param("uploadId", "5").add_param("prefix", "abc").add_param("max-keys", "10")
        ctx = OssSigner().build_context(req)
        assert ctx.canonical_resource == "/b/?uploadId=5"
        assert OssSigner().sign_request(req) == "OSS ID:5iulT8FsoBR2BTHgp+Bf1AMLsOQ="

    def test_content_md5_used_verbatim(self, credentials):
        req = _request(credentials).add_header("date", DATE)
        req.load_payload(b"hello")
        req.set_content_md5()
        ctx = OssSigner().build_context(req)
        assert ctx.content_md5 == "XUFAKrxLKna5cZ2REBfFkg=="
        assert ctx.string_to_sign.startswith("PUT\nXUFAKrxLKna5cZ2REBfFkg==\n")

    def test_padded_values_sign_like_trimmed(self, credentials):
        padded = _request(credentials).add_header("date", DATE)
        padded.set_content_type("text/plain ").add_meta([("test-key", " test-val")]).add_param("acl")
        assert OssSigner().sign_request(padded) == "OSS ID:yT+jA3y+QO3kFhNgDze+1LqU20U="

    def test_canonical_headers_sorted(self, credentials):
        req = _request(credentials).add_header("date", DATE)
        req.add_header("x-oss-z", "1").add_header("x-oss-a", "2").add_header("cache-control", "no-cache")
        ctx = OssSigner().build_context(req)
        assert ctx.canonicalized_headers == "x-oss-a:2\nx-oss-z:1\n"

    def test_deterministic(self, credentials):
        first = OssSigner().sign_request(_request(credentials).add_header("date", DATE))
        second = OssSigner().sign_request(_request(credentials).add_header("date", DATE))
        assert first == second

    def test_header_insert_order_does_not_matter(self, credentials):
        a = _request(credentials).add_header("date", DATE).add_header("x-oss-a", "1").add_header("x-oss-b", "2")
        b = _request(credentials).add_header("x-oss-b", "2").add_header("x-oss-a", "1").add_header("date", DATE)
        assert OssSigner().sign_request(a) == OssSigner().sign_request(b)

    def test_signed_request_is_sealed(self, credentials):
        req = _request(credentials).add_header("date", DATE)
        OssSigner().sign_request(req)
        assert req.sealed


class TestOssSignUrl:
    def test_reference_shape(self, credentials):
        req = _request(credentials, method="GET", object="obj")
        url = OssSigner().sign_url(req, 1700000000)
        assert url == (
            "http://b.e/obj?OSSAccessKeyId=ID&Expires=1700000000"
            "&Signature=nbtdYuCiuROcsK8m18jop9Ajo4s%3D"
        )
        assert re.match(r"^http://b\.e/obj\?OSSAccessKeyId=ID&Expires=1700000000&Signature=[^&]+$", url)

    def test_raw_subresource_before_auth_params(self, credentials):
        req = _request(credentials, method="GET", object="obj")
        url = OssSigner().sign_url(req, 1700000000, raw_subresource="acl")
        assert url.startswith("http://b.e/obj?acl&OSSAccessKeyId=ID&Expires=1700000000&Signature=")
        ctx = OssSigner().build_url_context(req, 1700000000, raw_subresource="acl")
        assert ctx.canonical_resource == "/b/obj?acl"

    def test_url_headers_keep_caller_order(self, credentials):
        req = _request(credentials, method="PUT", object="obj")
        headers = [("x-oss-z", "1"), ("content-type", "text/plain"), ("x-oss-a", "2"), ("cache-control", "x")]
        ctx = OssSigner().build_url_context(req, 1700000000, headers=headers)
        assert ctx.string_to_sign == "PUT\n\ntext/plain\n1700000000\nx-oss-z:1\nx-oss-a:2\n/b/obj"

    def test_url_does_not_mutate_request(self, credentials):
        req = _request(credentials, method="GET", object="obj")
        OssSigner().sign_url(req, 1700000000)
        assert req.headers == {}
        assert not req.sealed


class TestHelpers:
    def test_http_date(self):
        assert http_date(1704067200) == DATE

    def test_get_signer(self):
        assert get_signer("OSS").kind == "oss"
        assert get_signer(" s3 ").kind == "s3"
        with pytest.raises(ValueError):
            get_signer("gcs")
