"""
工行用户信息密文解密。

密文格式（工行约定，不可更改）：
- 传输过程中 "+" 被替换为空格，解密前需还原
- 外层 Base64 包裹 AES-128-CBC 密文，IV 固定为 16 字节 0
- 明文本身是 Base64 编码的单引号伪 JSON，需将 ' 替换为 " 后再解析
"""

import base64
import json
import re

from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

AES_KEY_SIZE = 16
ZERO_IV = bytes(16)

_WHITESPACE = re.compile(r"\s")


def restore_token(token: str) -> str:
    """将传输中被替换为空白的 "+" 还原。"""
    return _WHITESPACE.sub("+", token)


def aes_decrypt(key: bytes, ciphertext_b64: str) -> str:
    """AES-128-CBC 解密（固定零 IV，PKCS#7 填充），返回 UTF-8 明文。"""
    # AES.new 也接受 24/32 字节密钥，此处只允许 AES-128
    if len(key) != AES_KEY_SIZE:
        raise ValueError(f"AES 密钥长度必须为 {AES_KEY_SIZE} 字节，实际 {len(key)}")
    ciphertext = base64.b64decode(ciphertext_b64, validate=True)
    cipher = AES.new(key, AES.MODE_CBC, iv=ZERO_IV)
    plaintext = unpad(cipher.decrypt(ciphertext), AES.block_size)
    return plaintext.decode("utf-8")


def decode_user_token(key: bytes, token: str) -> dict:
    """
    解密用户信息密文，返回原始字段字典。

    Raises:
        ValueError: Base64 非法、密文长度或填充错误、密钥长度错误、
            非 UTF-8 内容、JSON 非法或结果不是对象。
    """
    decrypted = aes_decrypt(key, restore_token(token))
    json_string = base64.b64decode(decrypted).decode("utf-8").replace("'", '"')
    user = json.loads(json_string)
    if not isinstance(user, dict):
        raise ValueError(f"用户信息不是 JSON 对象: {type(user).__name__}")
    return user
