import hmac
from typing import Optional

from pydantic import SecretStr

from lodgetix.platform.config.core_setting import settings


def matches_service_role_key(candidate: Optional[SecretStr]) -> bool:
    """True only when a service-role key is configured and `candidate` equals it"""
    configured = settings.AUTH_SERVICE_ROLE_KEY
    if configured is None or candidate is None:
        return False
    return hmac.compare_digest(
        candidate.get_secret_value().encode(), configured.get_secret_value().encode()
    )
