#
#
#

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import PorkbunConfigError

DEFAULT_BASE_URL = 'https://api.porkbun.com/api/json/v3'
DEFAULT_TIMEOUT = 30


@dataclass(frozen=True)
class PorkbunConfig:
    """Credentials and endpoint shared by every registrar call."""

    api_key: str
    secret_api_key: str
    base_url: str = DEFAULT_BASE_URL
    # seconds, applies to connect and read
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if not self.api_key or not self.secret_api_key:
            raise PorkbunConfigError(
                'api_key and secret_api_key are both required'
            )
        # urls are joined as f'{base_url}/{path}'
        object.__setattr__(self, 'base_url', self.base_url.rstrip('/'))

    def __repr__(self):
        return (
            f'PorkbunConfig(api_key=***, secret_api_key=***, '
            f'base_url={self.base_url!r}, timeout={self.timeout!r})'
        )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> 'PorkbunConfig':
        """Create config from PORKBUN_* environment variables."""
        env = os.environ if environ is None else environ
        timeout = env.get('PORKBUN_TIMEOUT')
        try:
            timeout = float(timeout) if timeout else DEFAULT_TIMEOUT
        except ValueError as e:
            raise PorkbunConfigError(
                f'PORKBUN_TIMEOUT must be a number, got {timeout!r}'
            ) from e
        return cls(
            api_key=env.get('PORKBUN_API_KEY', ''),
            secret_api_key=env.get('PORKBUN_SECRET_API_KEY', ''),
            base_url=env.get('PORKBUN_BASE_URL') or DEFAULT_BASE_URL,
            timeout=timeout,
        )

    def auth(self):
        return {'apikey': self.api_key, 'secretapikey': self.secret_api_key}
