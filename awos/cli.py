#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable, List, Tuple

from awos.adapters.types import ListOptions, PutOrCopyOptions, SignUrlOptions
from awos.client import AwosClient
from awos.config import VERSION, ConfigService
from awos.http_client import AwosError, ServiceError

logger = logging.getLogger("awos.cli")

Command = Callable[[AwosClient, argparse.Namespace], Awaitable[int]]

# 命令行参数 -> 配置项
_OVERRIDES: Tuple[Tuple[str, str], ...] = (
    ("backend", "AWOS_BACKEND"),
    ("endpoint", "AWOS_ENDPOINT"),
    ("bucket", "AWOS_BUCKET"),
    ("region", "AWOS_REGION"),
)


def _parse_meta(items: List[str] | None) -> List[Tuple[str, str]]:
    meta = []
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"meta 需要 key=value 形式: {item}")
        meta.append((key, value))
    return meta


def _put_options(args: argparse.Namespace) -> PutOrCopyOptions | None:
    meta = _parse_meta(args.meta)
    if not meta and not args.content_type and not args.cache_control:
        return None
    return PutOrCopyOptions(
        meta=meta,
        content_type=args.content_type or "",
        cache_control=args.cache_control or "",
    )


async def _cmd_ls(client: AwosClient, args: argparse.Namespace) -> int:
    opts = ListOptions(
        prefix=args.prefix or "",
        marker=args.marker or "",
        delimiter=args.delimiter or "",
        max_keys=args.max_keys,
    )
    resp = await client.list_details(opts)
    for prefix in resp.common_prefixes:
        print(f"{'DIR':>12}  {prefix}")
    for obj in resp.objects:
        if args.long:
            print(f"{obj.size:>12}  {obj.last_modified}  {obj.key}")
        else:
            print(obj.key)
    if resp.is_truncated:
        print(f"(truncated, next marker: {resp.next_marker})", file=sys.stderr)
    return 0


async def _cmd_head(client: AwosClient, args: argparse.Namespace) -> int:
    headers = await client.head(args.key)
    for key in sorted(headers):
        print(f"{key}: {headers[key]}")
    return 0


async def _cmd_get(client: AwosClient, args: argparse.Namespace) -> int:
    resp = await client.get_as_buffer(args.key)
    if args.output and args.output != "-":
        Path(args.output).write_bytes(resp.content)
        print(f"已下载 {args.key} -> {args.output} ({len(resp.content)} bytes)", file=sys.stderr)
    else:
        sys.stdout.buffer.write(resp.content)
        sys.stdout.buffer.flush()
    return 0


async def _cmd_put(client: AwosClient, args: argparse.Namespace) -> int:
    opts = _put_options(args)
    if args.file == "-":
        data = sys.stdin.buffer.read()
    else:
        data = Path(args.file).read_bytes()
    await client.put(args.key, data, opts)
    print(f"已上传 {args.key} ({len(data)} bytes)", file=sys.stderr)
    return 0


async def _cmd_cp(client: AwosClient, args: argparse.Namespace) -> int:
    await client.copy(args.src, args.key, _put_options(args))
    print(f"已复制 {args.src} -> {args.key}", file=sys.stderr)
    return 0


async def _cmd_rm(client: AwosClient, args: argparse.Namespace) -> int:
    if len(args.keys) == 1:
        await client.delete(args.keys[0])
    else:
        await client.delete_multi(args.keys)
    print(f"已删除 {len(args.keys)} 个对象", file=sys.stderr)
    return 0


async def _cmd_sign_url(client: AwosClient, args: argparse.Namespace) -> int:
    url = client.sign_url(args.key, SignUrlOptions(method=args.method, expires=args.expires))
    print(url)
    return 0


def _add_put_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--meta", action="append", metavar="KEY=VALUE", help="自定义 meta, 可重复")
    parser.add_argument("--content-type", help="Content-Type")
    parser.add_argument("--cache-control", help="Cache-Control")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="awos", description="OSS / S3 对象存储命令行")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument("--backend", choices=["oss", "s3"], help="存储后端（默认取 AWOS_BACKEND）")
    parser.add_argument("--endpoint", help="Endpoint（默认取 AWOS_ENDPOINT）")
    parser.add_argument("--bucket", help="Bucket（默认取 AWOS_BUCKET）")
    parser.add_argument("--region", help="S3 region（默认取 AWOS_REGION）")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ls = subparsers.add_parser("ls", help="列出对象")
    ls.add_argument("prefix", nargs="?", help="key 前缀")
    ls.add_argument("--marker", help="从该 key 之后开始列出")
    ls.add_argument("--delimiter", help="分组分隔符, 如 /")
    ls.add_argument("--max-keys", type=int, default=1000, help="最多返回条数（默认 1000）")
    ls.add_argument("-l", "--long", action="store_true", help="显示大小与修改时间")
    ls.set_defaults(func=_cmd_ls)

    head = subparsers.add_parser("head", help="查看对象 header 与 meta")
    head.add_argument("key")
    head.set_defaults(func=_cmd_head)

    get = subparsers.add_parser("get", help="下载对象")
    get.add_argument("key")
    get.add_argument("-o", "--output", help="输出文件（默认 stdout）")
    get.set_defaults(func=_cmd_get)

    put = subparsers.add_parser("put", help="上传对象")
    put.add_argument("key")
    put.add_argument("file", help="本地文件, - 表示 stdin")
    _add_put_options(put)
    put.set_defaults(func=_cmd_put)

    cp = subparsers.add_parser("cp", help="服务端复制对象")
    cp.add_argument("src", help="源 key, 以 / 开头时为 /bucket/key")
    cp.add_argument("key", help="目标 key")
    _add_put_options(cp)
    cp.set_defaults(func=_cmd_cp)

    rm = subparsers.add_parser("rm", help="删除对象")
    rm.add_argument("keys", nargs="+")
    rm.set_defaults(func=_cmd_rm)

    sign_url = subparsers.add_parser("sign-url", help="生成预签名 URL")
    sign_url.add_argument("key")
    sign_url.add_argument("--method", default="GET", help="HTTP 方法（默认 GET）")
    sign_url.add_argument("--expires", type=int, default=3600, help="有效期秒数（默认 3600）")
    sign_url.set_defaults(func=_cmd_sign_url)

    return parser


def _apply_overrides(args: argparse.Namespace) -> None:
    for attr, key in _OVERRIDES:
        value = getattr(args, attr, None)
        if value:
            ConfigService.set(key, value)


def main(argv: list[str] | None = None, client: AwosClient | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    command: Command = args.func
    try:
        if client is None:
            _apply_overrides(args)
            client = AwosClient.from_env()
        return int(asyncio.run(command(client, args)))
    except ServiceError as exc:
        print(f"请求失败: {exc}", file=sys.stderr)
        if exc.request_id:
            print(f"RequestId: {exc.request_id}", file=sys.stderr)
        return 1
    except AwosError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"错误: {exc}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as exc:
        print(f"错误: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
