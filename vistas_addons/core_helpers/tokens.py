# vistas_addons/core_helpers/tokens.py

import hashlib
import secrets
import string
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Set

MAX_TOKEN_AGE_HOURS = 4
RANDOM_STRING_LENGTH = 6
TOKEN_ALPHABET = string.ascii_letters + string.digits


class MultiRequestProtection:
    """
    One-use form tokens against duplicated submissions.

    A token is ``sha1(hour stamp + seed)|random``. It validates during the
    following ``MAX_TOKEN_AGE_HOURS`` hours, and only once.
    """

    def __init__(self, seed: str = "", clock: Optional[Callable[[], datetime]] = None):
        self.seed = seed
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        # 已使用的令牌按小时摘要分组，超出有效期的分组在 validate 时丢弃
        self._used: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def _digest(self, moment: datetime) -> str:
        stamp = moment.strftime("%Y%m%d%H")
        return hashlib.sha1((stamp + self.seed).encode("utf-8")).hexdigest()

    @staticmethod
    def _random_string(length: int = RANDOM_STRING_LENGTH) -> str:
        return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))

    def new_token(self) -> str:
        return f"{self._digest(self._clock())}|{self._random_string()}"

    def validate(self, token: str) -> bool:
        digest, sep, random_part = token.partition("|")
        if not sep or not random_part:
            return False

        now = self._clock()
        accepted = {self._digest(now - timedelta(hours=age)) for age in range(MAX_TOKEN_AGE_HOURS)}
        if digest not in accepted:
            return False

        with self._lock:
            for expired in [key for key in self._used if key not in accepted]:
                del self._used[expired]
            used = self._used.setdefault(digest, set())
            if random_part in used:
                return False
            used.add(random_part)
        return True

    def used_count(self) -> int:
        """Tokens already consumed that are still inside the validity window."""
        with self._lock:
            return sum(len(used) for used in self._used.values())
