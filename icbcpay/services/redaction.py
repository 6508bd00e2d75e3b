"""日志脱敏：签名、密钥不落日志，手机号、用户标识部分打码。"""

from typing import Any

_REDACTED = "[REDACTED]"

# 整体屏蔽
SECRET_KEYS = {"sign", "private_key", "aes_key", "icbc_public_key"}

# 保留首尾，中间打码
MASKED_KEYS = {"user_mobile_no", "phone", "user_id", "cust_id", "device_id"}


def mask_middle(value: str, keep: int = 3) -> str:
    """保留首尾各 keep 位，中间替换为 *。"""
    if len(value) <= keep * 2:
        return "*" * len(value)
    return value[:keep] + "*" * (len(value) - keep * 2) + value[-keep:]


def redact_params(params: Any) -> Any:
    """
    递归脱敏字典，返回新的对象，不修改入参。

    biz_content 为 JSON 字符串时不展开，只保留长度。
    """
    if isinstance(params, dict):
        result = {}
        for k, v in params.items():
            if k in SECRET_KEYS:
                result[k] = _REDACTED
            elif k in MASKED_KEYS and v is not None:
                result[k] = mask_middle(str(v))
            elif k == "biz_content" and isinstance(v, str):
                result[k] = f"<json len={len(v)}>"
            else:
                result[k] = redact_params(v)
        return result
    if isinstance(params, list):
        return [redact_params(v) for v in params]
    return params
