"""安全模块：签发与解析访问令牌。

用户认证本身由外部身份服务完成，本服务只信任令牌中的 ``sub`` 声明作为
``owner_id``，从不接受客户端直接传入的用户标识。
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from .config import get_settings
from .logger import logger


def create_access_token(owner_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """为指定用户签发带过期时间的 JWT（供身份服务与测试使用）。"""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode: Dict[str, Any] = {"sub": owner_id, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """解析并校验 JWT，合法时返回载荷，否则返回 ``None``。"""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:  # pragma: no cover - logging side effect
        logger.warning("Failed to decode JWT: %s", exc)
        return None


def owner_id_from_payload(payload: Dict[str, Any]) -> Optional[str]:
    owner_id = payload.get("sub") or payload.get("owner_id")
    if owner_id is None:
        return None
    owner_id = str(owner_id).strip()
    return owner_id or None
