"""全局测试配置：测试用密钥与用户信息密文构造。"""

import base64
import json

import pytest
from Crypto.Cipher import AES
from Crypto.PublicKey import RSA
from Crypto.Util.Padding import pad

# 固定 AES 密钥，保证错误密钥等用例结果确定
AES_KEY = b"0123456789abcdef"
AES_KEY_B64 = base64.b64encode(AES_KEY).decode("utf-8")

TEST_APP_ID = "10000000000000001234"
TEST_MERT_ID = "020001020001"


@pytest.fixture(scope="session")
def rsa_keypair():
    """生成测试用 RSA 2048 密钥对 (private_pem, public_pem)。"""
    key = RSA.generate(2048)
    private_pem = key.export_key("PEM").decode("utf-8")
    public_pem = key.publickey().export_key("PEM").decode("utf-8")
    return private_pem, public_pem


@pytest.fixture
def make_token():
    """
    按工行格式构造用户信息密文：
    单引号 JSON → Base64 → AES-128-CBC(零 IV) → Base64，"+" 替换为空格。
    """

    def _make(payload, key: bytes = AES_KEY, raw_text: str | None = None) -> str:
        text = raw_text if raw_text is not None else json.dumps(payload).replace('"', "'")
        inner = base64.b64encode(text.encode("utf-8"))
        cipher = AES.new(key, AES.MODE_CBC, iv=bytes(16))
        ciphertext = cipher.encrypt(pad(inner, AES.block_size))
        return base64.b64encode(ciphertext).decode("utf-8").replace("+", " ")

    return _make
