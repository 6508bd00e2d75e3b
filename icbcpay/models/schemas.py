"""
数据模型 / 类型定义，供各模块引用。
使用 dataclass 保持轻量。
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional


@dataclass(frozen=True)
class Credentials:
    app_id: str
    mert_id: str  # 工行商户档案编号
    aes_key: str  # 用户信息解密密钥（Base64）
    private_key: str
    icbc_public_key: Optional[str] = None


@dataclass
class DecryptedUser:
    origin: dict  # 解密后原始数据
    cust_id: Optional[str]
    phone: str
    is_new_user: bool
    device_id: Optional[str]

    @classmethod
    def from_origin(cls, user: dict) -> "DecryptedUser":
        """从解密后的原始字段构建。isNewUser 为字符串 "0" 时视为新用户。"""
        phone = user.get("phone")
        return cls(
            origin=user,
            cust_id=user.get("cust_id"),
            phone="" if phone is None else str(phone),
            is_new_user=user.get("isNewUser") == "0",
            device_id=user.get("device_id"),
        )


@dataclass
class CouponResult:
    """发券 / 发券查询响应。业务错误码原样透传，由调用方判断。"""

    return_code: Optional[str] = None  # 交易成功返回 0，其余为错误码
    return_msg: Optional[str] = None
    msg_id: Optional[str] = None
    result: Optional[str] = None
    error_code: Optional[str] = None
    error_msg: Optional[str] = None
    ec_id: Optional[str] = None  # 电子券编号
    act_id: Optional[str] = None
    ec_act_name: Optional[str] = None
    ec_face_value: Optional[str] = None
    ec_status: Optional[str] = None
    effect_begin_date: Optional[str] = None
    effect_end_date: Optional[str] = None
    origin: dict = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.return_code == "0"

    @classmethod
    def from_response(cls, data: Any) -> "CouponResult":
        if not isinstance(data, dict):
            return cls(origin={"value": data})
        values = {}
        for f in fields(cls):
            if f.name == "origin":
                continue
            v = data.get(f.name)
            values[f.name] = None if v is None else str(v)
        return cls(origin=data, **values)
