"""
Tests for the request gate.
"""

from datetime import timedelta

import pytest

from trainerhub.auth.dependencies import RequestGate
from trainerhub.auth.errors import AuthenticationError, AuthorizationError
from trainerhub.auth.jwt import TokenConfig, TokenIssuer
from trainerhub.services.tenant import TenantService
from trainerhub.services.user import UserService


@pytest.fixture
async def registered(auth_service, register_request):
    return await auth_service.register(register_request())


@pytest.fixture
def gate(db, issuer):
    return RequestGate(db, issuer)


class TestRequestGate:

    async def test_missing_token(self, gate):
        with pytest.raises(AuthenticationError) as exc_info:
            await gate.authenticate(None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Access token required"

    async def test_garbage_token(self, gate):
        with pytest.raises(AuthenticationError) as exc_info:
            await gate.authenticate("garbage")

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Invalid token"

    async def test_expired_token(self, gate, issuer, registered):
        token = issuer.issue_access_token(
            registered.user, registered.tenant.id, expires_delta=timedelta(seconds=-5)
        )

        with pytest.raises(AuthenticationError) as exc_info:
            await gate.authenticate(token)

        assert exc_info.value.message == "Invalid token"

    async def test_foreign_signature(self, gate, registered):
        forger = TokenIssuer(TokenConfig(secret_key="not-the-server-secret"))
        token = forger.issue_access_token(registered.user, registered.tenant.id)

        with pytest.raises(AuthenticationError):
            await gate.authenticate(token)

    async def test_valid_token(self, gate, registered):
        context = await gate.authenticate(registered.access_token)

        assert context.user.id == registered.user.id
        assert context.tenant_id == registered.tenant.id

    async def test_identity_is_refetched(self, db, gate, registered):
        # The token snapshot predates the login touch; the gate returns live data
        await UserService(db).touch_last_login(registered.user.id)

        context = await gate.authenticate(registered.access_token)

        assert registered.user.last_login_at is None
        assert context.user.last_login_at is not None

    async def test_deactivated_user(self, db, gate, registered):
        await UserService(db).deactivate(registered.user.id)

        with pytest.raises(AuthorizationError) as exc_info:
            await gate.authenticate(registered.access_token)

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "User inactive or not found"

    async def test_deactivated_tenant(self, db, gate, registered):
        await TenantService(db).deactivate(registered.tenant.id)

        with pytest.raises(AuthorizationError) as exc_info:
            await gate.authenticate(registered.access_token)

        assert exc_info.value.message == "Tenant inactive or not found"

    async def test_tenant_mismatch(self, gate, issuer, auth_service, register_request, registered):
        other = await auth_service.register(register_request(email="c@d.com", tenant_name="Gym B"))
        token = issuer.issue_access_token(registered.user, other.tenant.id)

        with pytest.raises(AuthorizationError):
            await gate.authenticate(token)
