"""Property-based tests for admin authentication

Token round-trip, tamper detection and the login rate limit window.
"""

import pytest
from hypothesis import given, strategies as st
from hypothesis import settings as hypothesis_settings
from datetime import timedelta
from jose import jwt

from backend.app.services.auth_service import AuthService
from backend.app.core.rate_limit import LoginRateLimiter
from backend.app.core.exceptions import AuthenticationException, RateLimitException

usernames = st.text(min_size=1, max_size=50, alphabet=st.characters(whitelist_categories=('Lu', 'Ll', 'Nd')))


class TestJWTTokenValidation:
    """Property tests for JWT token validation"""

    @hypothesis_settings(max_examples=50)
    @given(username=usernames, admin_id=st.uuids())
    def test_token_round_trip(self, username, admin_id):
        """Any issued token verifies and carries its subject and username"""
        auth_service = AuthService()

        token = auth_service.create_access_token(admin_id=str(admin_id), username=username)
        payload = auth_service.verify_access_token(token)

        assert payload["sub"] == str(admin_id)
        assert payload["username"] == username
        assert payload["type"] == "access"

    @hypothesis_settings(max_examples=30)
    @given(username=usernames, admin_id=st.uuids(), seconds_ago=st.integers(min_value=1, max_value=10_000))
    def test_expired_tokens_rejected(self, username, admin_id, seconds_ago):
        auth_service = AuthService()

        token = auth_service.create_access_token(
            admin_id=str(admin_id),
            username=username,
            expires_delta=timedelta(seconds=-seconds_ago)
        )

        with pytest.raises(AuthenticationException):
            auth_service.verify_access_token(token)

    @hypothesis_settings(max_examples=30)
    @given(admin_id=st.uuids(), secret=st.text(min_size=1, max_size=40))
    def test_foreign_signatures_rejected(self, admin_id, secret):
        auth_service = AuthService()
        if secret == auth_service.secret_key:
            return

        token = jwt.encode({"sub": str(admin_id), "type": "access"}, secret, algorithm="HS256")

        with pytest.raises(AuthenticationException):
            auth_service.verify_access_token(token)


class TestLoginRateLimit:
    """Property tests for the sliding window"""

    @hypothesis_settings(max_examples=50)
    @given(
        max_attempts=st.integers(min_value=1, max_value=10),
        gaps=st.lists(st.integers(min_value=0, max_value=30), min_size=1, max_size=30)
    )
    def test_never_more_than_max_attempts_per_window(self, max_attempts, gaps):
        """Accepted attempts inside any one window never exceed the limit"""
        window = 60
        now = [0]
        limiter = LoginRateLimiter(max_attempts=max_attempts, window_seconds=window, clock=lambda: now[0])

        accepted = []
        for gap in gaps:
            now[0] += gap
            try:
                limiter.hit("client")
                accepted.append(now[0])
            except RateLimitException as e:
                assert e.retry_after > 0

        for start in accepted:
            in_window = [t for t in accepted if start <= t < start + window]
            assert len(in_window) <= max_attempts
