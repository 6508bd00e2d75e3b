"""工行开放平台 RSA (SHA1withRSA) 签名生成与验证模块。"""

import base64
import json
import random
import string
import time
from datetime import datetime

from Crypto.Hash import SHA1
from Crypto.PublicKey import RSA
from Crypto.Signature import pkcs1_15

_BASE36 = string.digits + string.ascii_lowercase


def gen_msg_id() -> str:
    """生成消息号：毫秒时间戳十六进制 + 随机 36 进制后缀。"""
    prefix = format(int(time.time() * 1000), "x")
    suffix = "".join(random.choice(_BASE36) for _ in range(11))
    return prefix + suffix


def now_timestamp() -> str:
    """本地时间，格式 YYYY-MM-DD HH:MM:SS。"""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def dump_biz_content(params: dict) -> str:
    """业务参数序列化为紧凑 JSON，中文不转义，保持插入顺序。"""
    return json.dumps(params, separators=(",", ":"), ensure_ascii=False)


def build_sign_string(path: str, params: dict) -> str:
    """
    构建待签名字符串。

    1. 排除 sign 参数
    2. 按参数名 ASCII 排序
    3. 拼接 key=value，以 & 连接（参数值不 URL 编码）
    4. 前缀 /api{path}?

    工行服务端按同样规则重新拼接后验签，任何字节差异都会导致验签失败。
    """
    sorted_keys = sorted(k for k in params if k != "sign")
    query_string = "&".join(f"{k}={params[k]}" for k in sorted_keys)
    return f"/api{path}?{query_string}"


def rsa_sign(content: str, private_key: RSA.RsaKey) -> str:
    """SHA1withRSA 签名，返回 Base64 字符串。"""
    h = SHA1.new(content.encode("utf-8"))
    signature = pkcs1_15.new(private_key).sign(h)
    return base64.b64encode(signature).decode("utf-8")


def rsa_verify(content: str | bytes, sign: str, public_key: RSA.RsaKey) -> bool:
    """SHA1withRSA 验签。签名格式错误或不匹配时返回 False。"""
    if isinstance(content, str):
        content = content.encode("utf-8")
    h = SHA1.new(content)
    try:
        pkcs1_15.new(public_key).verify(h, base64.b64decode(sign))
        return True
    except (ValueError, TypeError):
        return False
