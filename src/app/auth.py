from __future__ import annotations

import hmac
import logging
import os
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from werkzeug.security import check_password_hash

from src.tracker.expenses.config import LoginThrottleConfig
from src.utils.rate_limit import AttemptLimiter, mask_secret


log = logging.getLogger(__name__)

SESSION_FLAG = "authenticated"
SESSION_USER = "username"
SESSION_INTENDED = "intended"


class LoginRequired(Exception):
    def __init__(self, next_url: Optional[str] = None) -> None:
        super().__init__("Authentication required")
        self.next_url = next_url


class LoginThrottled(Exception):
    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after


@dataclass(frozen=True)
class Credentials:
    username: str
    password_hash: str


def load_credentials() -> Optional[Credentials]:
    username = os.environ.get("AUTH_USERNAME", "").strip()
    if not username:
        return None
    return Credentials(username=username, password_hash=os.environ.get("PASSWORD_HASH", "").strip())


def auth_enabled() -> bool:
    return load_credentials() is not None


def auth_banner_message() -> Optional[str]:
    if auth_enabled():
        return None
    return "WARNING: AUTH_USERNAME is not set. This UI is unauthenticated; run locally only."


def credentials_match(creds: Credentials, username: str, password: str) -> bool:
    # Evaluate both checks so a wrong username costs the same as a wrong password.
    valid_username = hmac.compare_digest(creds.username.encode(), (username or "").encode())
    valid_password = False
    if creds.password_hash:
        try:
            valid_password = check_password_hash(creds.password_hash, password or "")
        except ValueError:
            log.warning("PASSWORD_HASH is not a recognised hash format")
    return valid_username and valid_password


def _user_key(username: str) -> str:
    return f"login-user:{username}"


def _ip_key(ip: str) -> str:
    return f"login-ip:{ip}"


def attempt_login(
    username: str,
    password: str,
    ip: str,
    *,
    credentials: Credentials,
    limiter: AttemptLimiter,
    config: LoginThrottleConfig,
) -> bool:
    """
    Checks one login attempt against the per-username and per-IP throttles.

    Raises `LoginThrottled` while either key is over its limit, regardless of the
    credentials. A success clears the username counter; a failure counts against
    both keys.
    """
    user_key = _user_key(username)
    ip_key = _ip_key(ip)

    if limiter.too_many_attempts(user_key, config.max_attempts_per_username):
        seconds = limiter.available_in(user_key)
        log.warning("Login throttled for user %s", mask_secret(username))
        raise LoginThrottled(f"Too many login attempts. Please try again in {seconds} seconds.", seconds)
    if limiter.too_many_attempts(ip_key, config.max_attempts_per_ip):
        seconds = limiter.available_in(ip_key)
        log.warning("Login throttled for ip %s", ip)
        raise LoginThrottled(f"Too many login attempts from this IP. Please try again in {seconds} seconds.", seconds)

    if credentials_match(credentials, username, password):
        limiter.clear(user_key)
        log.info("Login succeeded for user %s", mask_secret(username))
        return True

    limiter.hit(user_key, config.decay_seconds)
    limiter.hit(ip_key, config.decay_seconds)
    log.warning("Login failed for user %s from %s", mask_secret(username), ip)
    return False


def get_login_limiter(request: Request) -> AttemptLimiter:
    return request.app.state.login_limiter


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def safe_return_to(value: Optional[str], *, default: str) -> str:
    s = (value or "").strip()
    if not s:
        return default
    # Avoid open redirects; keep navigation internal.
    if "://" in s or not s.startswith("/") or s.startswith("//"):
        return default
    return s


def is_authenticated(request: Request) -> bool:
    return request.session.get(SESSION_FLAG) is True


def require_login(request: Request) -> str:
    if not auth_enabled():
        return "local"
    if is_authenticated(request):
        return str(request.session.get(SESSION_USER) or "user")
    next_url = None
    if request.method == "GET":
        next_url = request.url.path
        if request.url.query:
            next_url += "?" + request.url.query
    raise LoginRequired(next_url)


def start_session(request: Request, username: str) -> str:
    """Marks the session authenticated and returns where to go next."""
    intended = request.session.pop(SESSION_INTENDED, None)
    request.session[SESSION_FLAG] = True
    request.session[SESSION_USER] = username
    return safe_return_to(intended, default="/expenses")


def end_session(request: Request) -> None:
    request.session.clear()
