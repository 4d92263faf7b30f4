import functools
import logging
from dataclasses import dataclass
from typing import Optional

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from vocaman.core.exceptions import Unauthenticated, UpstreamUnavailable, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class GoogleIdentity:
    google_id: str
    email: str
    name: Optional[str] = None
    email_verified: bool = False


class GoogleIdentityVerifier:
    """用 google-auth 在本地校验 ID Token 的签名、签发方、有效期和 audience"""

    def __init__(self, client_id: Optional[str], timeout: float = 5.0):
        self.client_id = client_id
        self.timeout = timeout

    def verify(self, id_token: str) -> GoogleIdentity:
        """
        Args:
            id_token: 客户端从 Google 登录获得的 ID Token

        Returns:
            GoogleIdentity: Google 账号ID、邮箱、显示名以及邮箱是否已验证

        Raises:
            Unauthenticated: 令牌无效或不是签发给本应用的
            ValidationError: Google 账号没有邮箱
            UpstreamUnavailable: 无法获取 Google 公钥或未配置 GOOGLE_CLIENT_ID
        """
        if not self.client_id:
            raise UpstreamUnavailable("Google login is not configured")

        # 公钥下载走 requests 传输层，超时由配置决定
        request = functools.partial(google_requests.Request(), timeout=self.timeout)
        try:
            claims = google_id_token.verify_oauth2_token(id_token, request, audience=self.client_id)
        except google_exceptions.TransportError as e:
            logger.error(f"Fetching Google signing certificates failed: {e}")
            raise UpstreamUnavailable() from e
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.warning(f"Google ID token rejected: {e}")
            raise Unauthenticated("Invalid Google ID token") from e

        if not claims.get("sub"):
            raise Unauthenticated("Invalid Google ID token")
        if not claims.get("email"):
            raise ValidationError("Google account has no email address")

        return GoogleIdentity(
            google_id=claims["sub"],
            email=claims["email"],
            name=claims.get("name"),
            email_verified=claims.get("email_verified") in (True, "true"),
        )
