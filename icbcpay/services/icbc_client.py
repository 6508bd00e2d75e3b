"""
工行开放平台 API 客户端：使用 RSA (SHA1withRSA) 签名调用第三方电子券接口。

主要功能：
- 发券：按客户统一通行证号（UID）或手机号发放电子券
- 发券查询：按 UID 或手机号查询发券结果
- 解密工行下发的用户信息密文
- 使用工行公钥验签
"""

import base64
import json
import logging
from typing import Any, Optional

import httpx
from Crypto.PublicKey import RSA

from icbcpay.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, Settings, load_settings
from icbcpay.exceptions import (
    IcbcClientError,
    IcbcHTTPStatusError,
    IcbcResponseError,
    IcbcTimeoutError,
    IcbcTransportError,
)
from icbcpay.models.schemas import CouponResult, Credentials, DecryptedUser
from icbcpay.services.redaction import redact_params
from icbcpay.services.sign import (
    build_sign_string,
    dump_biz_content,
    gen_msg_id,
    now_timestamp,
    rsa_sign,
    rsa_verify,
)
from icbcpay.services.user_token import decode_user_token

logger = logging.getLogger(__name__)

SEND_ECOUPON_PATH = "/ecoupon/send/V1"
QUERY_ECOUPON_PATH = "/ecoupon/send/query/V1"

# kind -> (错误信息中的名称, 裸 Base64 补全的 PEM 类型)
_KEY_KINDS = {
    "private": ("商户私钥", "PRIVATE KEY"),
    "public": ("工行公钥", "PUBLIC KEY"),
}


class IcbcClient:
    """工行开放平台 API 客户端。凭证构造后只读，可并发调用。"""

    def __init__(
        self,
        app_id: str,
        mert_id: str,
        aes_key: str,
        private_key: str,
        icbc_public_key: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        使用商户凭证初始化客户端。

        Args:
            app_id: 工行 APP 编号。
            mert_id: 工行商户档案编号。
            aes_key: 用户信息解密密钥（Base64）。密钥长度不在此校验，
                错误密钥在解密时表现为解密失败。
            private_key: 商户私钥（PEM 格式或裸 Base64）。
            icbc_public_key: 工行公钥（PEM 格式或裸 Base64），仅验签时需要。
            api_url: 网关地址。
            timeout: 请求超时（秒）。
        """
        self.app_id = app_id
        self.mert_id = mert_id
        self.api_url = api_url
        self.timeout = timeout
        try:
            self._aes_key = base64.b64decode(aes_key)
        except ValueError as e:
            # 留空密钥，解密时按解密失败处理
            logger.warning("AES 密钥 Base64 解码失败: %s", e)
            self._aes_key = b""
        self._private_key = self._load_key(private_key, "private")
        self._public_key = (
            self._load_key(icbc_public_key, "public") if icbc_public_key else None
        )

    @classmethod
    def from_credentials(cls, credentials: Credentials, **kwargs) -> "IcbcClient":
        return cls(
            app_id=credentials.app_id,
            mert_id=credentials.mert_id,
            aes_key=credentials.aes_key,
            private_key=credentials.private_key,
            icbc_public_key=credentials.icbc_public_key,
            **kwargs,
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "IcbcClient":
        """从环境配置构建客户端，未传入时调用 load_settings()。"""
        settings = settings or load_settings()
        return cls.from_credentials(
            settings.credentials,
            api_url=settings.api_url,
            timeout=settings.timeout,
        )

    @staticmethod
    def _load_key(key_str: str, kind: str) -> RSA.RsaKey:
        """
        加载 RSA 密钥，支持 PEM 格式和裸 Base64。

        Args:
            key_str: 密钥内容。
            kind: "private" 为商户私钥，"public" 为工行公钥。
        """
        label, pem_type = _KEY_KINDS[kind]
        pem = key_str.strip()
        if not pem.startswith("-----"):
            pem = f"-----BEGIN {pem_type}-----\n{pem}\n-----END {pem_type}-----"
        try:
            return RSA.import_key(pem)
        except (ValueError, IndexError, TypeError) as e:
            raise IcbcClientError(f"无法加载{label}: {e}")

    # ── 签名 ──────────────────────────────────────────────

    def sign_request(
        self,
        path: str,
        biz_params: dict,
        *,
        msg_id: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> dict:
        """
        构建带签名的请求参数。

        Args:
            path: 接口路径，如 /ecoupon/send/V1。
            biz_params: 业务参数，序列化为 biz_content。
            msg_id: 指定消息号，默认随机生成。
            timestamp: 指定时间戳，默认当前本地时间。

        Returns:
            dict: app_id, msg_id, timestamp, format, charset, sign_type,
            biz_content, sign。
        """
        params = {
            "app_id": self.app_id,
            "msg_id": msg_id or gen_msg_id(),
            "timestamp": timestamp or now_timestamp(),
            "format": "json",
            "charset": "UTF-8",
            "sign_type": "RSA",
            "biz_content": dump_biz_content(biz_params),
        }
        params["sign"] = rsa_sign(build_sign_string(path, params), self._private_key)
        logger.debug("工行请求参数 %s: %s", path, redact_params(params))
        return params

    def verify_sign(self, content: str | bytes, sign: str) -> bool:
        """
        使用工行公钥验证签名。

        Raises:
            IcbcClientError: 未配置工行公钥。
        """
        if self._public_key is None:
            raise IcbcClientError("未配置工行公钥，无法验签")
        return rsa_verify(content, sign, self._public_key)

    # ── 用户信息 ──────────────────────────────────────────

    def decrypt_user(self, token: str) -> Optional[DecryptedUser]:
        """
        解密工行下发的用户信息密文。

        密文非法（被篡改、Base64 错误、密钥不匹配等）属于预期情况，
        返回 None 而非抛出异常，调用方需显式处理。
        """
        try:
            user = decode_user_token(self._aes_key, token)
        except ValueError as e:
            logger.warning(
                "用户信息解密失败 (token_len=%d): %s: %s",
                len(token), type(e).__name__, e,
            )
            return None
        return DecryptedUser.from_origin(user)

    # ── HTTP ──────────────────────────────────────────────

    async def request(self, method: str, path: str, body: Any = None) -> Any:
        """
        发起一次 HTTP 请求，不重试。

        Returns:
            响应含 response_biz_content 时返回该字段，否则返回整个响应 JSON。

        Raises:
            IcbcHTTPStatusError: HTTP 状态码非 200。
            IcbcTimeoutError: 请求超时。
            IcbcTransportError: 其他网络错误。
            IcbcResponseError: 响应不是合法 JSON。
        """
        url = self.api_url + path
        kwargs: dict[str, Any] = {
            "headers": {"Content-Type": "application/x-www-form-urlencoded"},
        }
        if isinstance(body, dict):
            kwargs["data"] = body
        elif body is not None:
            kwargs["content"] = body

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("工行接口请求超时 (%s %s): %s", method, path, e)
            raise IcbcTimeoutError(f"请求工行接口超时: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("工行接口请求失败 (%s %s): %s", method, path, e)
            raise IcbcTransportError(f"请求工行接口失败: {e}") from e

        if response.status_code != 200:
            logger.warning(
                "工行接口返回异常状态码 (%s %s): %d",
                method, path, response.status_code,
            )
            raise IcbcHTTPStatusError(response.status_code)

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise IcbcResponseError(f"解析工行响应失败: {e}") from e

        logger.debug("工行响应 %s: %s", path, redact_params(data))
        if isinstance(data, dict) and data.get("response_biz_content"):
            return data["response_biz_content"]
        return data

    # ── 电子券 ────────────────────────────────────────────

    async def _call_ecoupon(self, path: str, biz_params: dict) -> CouponResult:
        params = self.sign_request(path, biz_params)
        data = await self.request("POST", path, params)
        return CouponResult.from_response(data)

    async def send_coupon_by_uid(self, act_id: str, ser_no: int, uid: str) -> CouponResult:
        """
        通过 UID 第三方电子券发券。

        Args:
            act_id: 电子券活动编号。
            ser_no: 流水号。
            uid: 客户统一通行证号。
        """
        return await self._call_ecoupon(SEND_ECOUPON_PATH, {
            "mert_id": self.mert_id,
            "ec_act_id": act_id,
            "user_id": uid,
            "ser_no": ser_no,
        })

    async def send_coupon_by_mobile(self, act_id: str, ser_no: int, phone: str) -> CouponResult:
        """通过手机号第三方电子券发券。"""
        return await self._call_ecoupon(SEND_ECOUPON_PATH, {
            "mert_id": self.mert_id,
            "ec_act_id": act_id,
            "user_mobile_no": phone,
            "ser_no": ser_no,
        })

    async def query_coupon_by_uid(self, act_id: str, ser_no: int, uid: str) -> CouponResult:
        """通过 UID 发券查询。"""
        return await self._call_ecoupon(QUERY_ECOUPON_PATH, {
            "mert_id": self.mert_id,
            "ec_act_id": act_id,
            "user_id": uid,
            "ser_no": ser_no,
        })

    async def query_coupon_by_mobile(self, act_id: str, ser_no: int, phone: str) -> CouponResult:
        """通过手机号发券查询。"""
        return await self._call_ecoupon(QUERY_ECOUPON_PATH, {
            "mert_id": self.mert_id,
            "ec_act_id": act_id,
            "user_mobile_no": phone,
            "ser_no": ser_no,
        })
