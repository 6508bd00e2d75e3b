"""
环境配置：从 .env / 环境变量读取工行商户凭证。

客户端本身不读取环境变量，仅 IcbcClient.from_settings() 使用本模块。
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from icbcpay.exceptions import IcbcClientError
from icbcpay.models.schemas import Credentials

DEFAULT_API_URL = "https://gw.open.icbc.com.cn/api"
DEFAULT_TIMEOUT = 5.0  # 秒


class IcbcConfigError(IcbcClientError):
    """配置缺失或非法。"""
    pass


@dataclass(frozen=True)
class Settings:
    credentials: Credentials
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT


def _require(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise IcbcConfigError(f"缺少环境变量 {name}")
    return value


def _read_private_key() -> str:
    """私钥优先取 ICBC_PRIVATE_KEY，其次读取 ICBC_PRIVATE_KEY_FILE 指向的文件。"""
    key = os.getenv("ICBC_PRIVATE_KEY", "").strip()
    if key:
        return key
    key_file = os.getenv("ICBC_PRIVATE_KEY_FILE", "").strip()
    if not key_file:
        raise IcbcConfigError("缺少环境变量 ICBC_PRIVATE_KEY 或 ICBC_PRIVATE_KEY_FILE")
    try:
        return Path(key_file).read_text(encoding="utf-8")
    except OSError as e:
        raise IcbcConfigError(f"无法读取私钥文件 {key_file}: {e}")


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    加载 .env 并构建配置。

    Args:
        env_file: 指定 .env 路径，默认从当前工作目录向上查找。

    Raises:
        IcbcConfigError: 必填项缺失、私钥文件不可读或超时时间非法。
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    public_key = os.getenv("ICBC_PUBLIC_KEY", "").strip() or None
    credentials = Credentials(
        app_id=_require("ICBC_APP_ID"),
        mert_id=_require("ICBC_MERT_ID"),
        aes_key=_require("ICBC_AES_KEY"),
        private_key=_read_private_key(),
        icbc_public_key=public_key,
    )

    timeout_str = os.getenv("ICBC_TIMEOUT", str(DEFAULT_TIMEOUT))
    try:
        timeout = float(timeout_str)
    except ValueError:
        raise IcbcConfigError(f"ICBC_TIMEOUT 非法: {timeout_str}")
    if timeout <= 0:
        raise IcbcConfigError(f"ICBC_TIMEOUT 必须大于 0: {timeout_str}")

    return Settings(
        credentials=credentials,
        api_url=os.getenv("ICBC_API_URL", DEFAULT_API_URL).rstrip("/"),
        timeout=timeout,
    )
