# -*- coding: utf-8 -*-
"""
awos 命令行测试

网络请求通过注入带 MockTransport 的 AwosClient 完成; sign-url 不需要网络,
直接从环境变量读取配置。
"""

import httpx
import pytest

from awos import AwosClient
from awos.cli import main
from tests.conftest import FakeStorage
from tests.test_listing import OSS_LISTING


@pytest.fixture
def fake():
    return FakeStorage()


@pytest.fixture
def client(fake):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    return AwosClient.new_with_oss("oss-cn-beijing.aliyuncs.com", "b", "ID", "secret", client=http_client)


@pytest.fixture
def oss_env(monkeypatch):
    monkeypatch.setenv("AWOS_BACKEND", "oss")
    monkeypatch.setenv("AWOS_ENDPOINT", "https://oss-cn-beijing.aliyuncs.com")
    monkeypatch.setenv("AWOS_BUCKET", "b")
    monkeypatch.setenv("AWOS_ACCESS_KEY_ID", "ID")
    monkeypatch.setenv("AWOS_ACCESS_KEY_SECRET", "secret")


class TestSignUrl:
    def test_sign_url_from_env(self, oss_env, capsys):
        assert main(["sign-url", "obj", "--expires", "60"]) == 0
        out = capsys.readouterr().out.strip()
        assert out.startswith("https://b.oss-cn-beijing.aliyuncs.com/obj?OSSAccessKeyId=ID&Expires=")

    def test_bucket_override(self, oss_env, capsys):
        assert main(["--bucket", "other", "sign-url", "obj"]) == 0
        assert capsys.readouterr().out.startswith("https://other.oss-cn-beijing.aliyuncs.com/obj?")

    def test_missing_config(self, capsys):
        assert main(["sign-url", "obj"]) == 2
        assert "Missing required config fields" in capsys.readouterr().err


class TestCommands:
    def test_ls(self, client, fake, capsys):
        fake.respond(200, content=OSS_LISTING)
        assert main(["ls", "photos/", "--delimiter", "/"], client=client) == 0
        out = capsys.readouterr().out
        assert "photos/a.jpg" in out
        assert "photos/2024/" in out

    def test_head(self, client, fake, capsys):
        fake.respond(200, headers={"x-oss-meta-a": "1"})
        assert main(["head", "a.txt"], client=client) == 0
        assert "x-oss-meta-a: 1" in capsys.readouterr().out

    def test_get_to_file(self, client, fake, tmp_path):
        fake.respond(200, content=b"hello")
        target = tmp_path / "out.txt"
        assert main(["get", "a.txt", "-o", str(target)], client=client) == 0
        assert target.read_bytes() == b"hello"

    def test_put_from_file(self, client, fake, tmp_path):
        source = tmp_path / "in.txt"
        source.write_bytes(b"payload")
        rc = main(["put", "a.txt", str(source), "--meta", "k=v", "--content-type", "text/plain"], client=client)
        assert rc == 0
        sent = fake.last
        assert sent.content == b"payload"
        assert sent.headers["x-oss-meta-k"] == "v"
        assert sent.headers["content-type"] == "text/plain"

    def test_cp(self, client, fake):
        assert main(["cp", "src.txt", "dst.txt"], client=client) == 0
        assert fake.last.headers["x-oss-copy-source"] == "/b/src.txt"

    def test_rm_many(self, client, fake):
        assert main(["rm", "a", "b"], client=client) == 0
        assert [r.method for r in fake.requests] == ["DELETE", "DELETE"]

    def test_service_error_exit_code(self, client, fake, capsys):
        fake.respond(404, content=b"<Error><Code>NoSuchKey</Code><RequestId>RID</RequestId></Error>")
        assert main(["head", "missing"], client=client) == 1
        err = capsys.readouterr().err
        assert "NoSuchKey" in err
        assert "RID" in err

    def test_bad_meta(self, client, fake, tmp_path, capsys):
        source = tmp_path / "in.txt"
        source.write_bytes(b"x")
        assert main(["put", "a.txt", str(source), "--meta", "novalue"], client=client) == 2
        assert "key=value" in capsys.readouterr().err
        assert fake.requests == []
