"""
Integration test for the Vortex client against a live environment.
Flow: create (backend) -> get -> list by target -> accept -> revoke

Skipped unless the TEST_INTEGRATION_SDKS_* environment variables are set.
"""

import os
import time

import pytest

from vortex_invites import AcceptUser, Vortex, VortexApiError

REQUIRED_ENV = (
    "TEST_INTEGRATION_SDKS_VORTEX_API_KEY",
    "TEST_INTEGRATION_SDKS_VORTEX_PUBLIC_API_URL",
    "TEST_INTEGRATION_SDKS_WIDGET_CONFIGURATION_ID",
    "TEST_INTEGRATION_SDKS_USER_ID",
    "TEST_INTEGRATION_SDKS_USER_EMAIL",
)


@pytest.mark.integration
class TestIntegration:
    """Integration tests for the Vortex client"""

    @pytest.fixture(autouse=True)
    def setup(self):
        missing = [name for name in REQUIRED_ENV if not os.getenv(name)]
        if missing:
            pytest.skip(f"Missing integration environment variables: {', '.join(missing)}")

        timestamp = str(int(time.time()))
        self.api_key = os.environ["TEST_INTEGRATION_SDKS_VORTEX_API_KEY"]
        self.widget_configuration_id = os.environ["TEST_INTEGRATION_SDKS_WIDGET_CONFIGURATION_ID"]
        self.test_user_id = os.environ["TEST_INTEGRATION_SDKS_USER_ID"].replace("{timestamp}", timestamp)
        self.test_user_email = os.environ["TEST_INTEGRATION_SDKS_USER_EMAIL"].replace(
            "{timestamp}", timestamp
        )
        self.test_group_id = f"test-group-{os.getpid()}"
        self.client = Vortex(
            self.api_key,
            base_url=f"{os.environ['TEST_INTEGRATION_SDKS_VORTEX_PUBLIC_API_URL']}/api/v1",
        )

    async def test_full_invitation_flow(self):
        async with self.client:
            created = await self.client.create_invitation(
                widget_configuration_id=self.widget_configuration_id,
                target={"type": "email", "value": self.test_user_email},
                inviter={"user_id": self.test_user_id},
                groups=[{"type": "team", "group_id": self.test_group_id, "name": "SDK Test Group"}],
                source="api",
            )
            assert created.id

            invitation = await self.client.get_invitation(created.id)
            assert invitation.id == created.id

            invitations = await self.client.get_invitations_by_target("email", self.test_user_email)
            assert any(inv.id == created.id for inv in invitations)

            result = await self.client.accept_invitation(
                created.id, AcceptUser(email=self.test_user_email)
            )
            assert result is not None

            await self.client.revoke_invitation(created.id)
            with pytest.raises(VortexApiError):
                await self.client.reinvite(created.id)

    def test_generated_jwt_is_accepted_shape(self):
        token = self.client.generate_jwt(
            user={"id": self.test_user_id, "email": self.test_user_email}
        )
        assert token.count(".") == 2
        self.client.close_sync()
