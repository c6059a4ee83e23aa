"""
Bearer 토큰 검증 테스트
"""
from models.access_credential import AccessCredential
from service.auth.identity import CredentialVerifier, issue_credential


class TestCredentialVerifier:
    """토큰 발급/검증 테스트"""

    async def test_issued_token_verifies(self, test_db):
        token = await issue_credential("user-1")

        assert await CredentialVerifier().verify(token) == "user-1"

    async def test_secret_not_stored(self, test_db):
        token = await issue_credential("user-1")
        credential = await AccessCredential.get(identity_ref="user-1")

        assert token.split(".")[-1] not in credential.token_hash

    async def test_wrong_secret_rejected(self, test_db):
        await issue_credential("user-1")

        assert await CredentialVerifier().verify("user-1.wrong") is None

    async def test_reissue_revokes_old_token(self, test_db):
        old = await issue_credential("user-1")
        new = await issue_credential("user-1")

        verifier = CredentialVerifier()
        assert await verifier.verify(old) is None
        assert await verifier.verify(new) == "user-1"

    async def test_pepper_change_invalidates(self, test_db, monkeypatch):
        token = await issue_credential("user-1")
        monkeypatch.setenv("CREDENTIAL_PEPPER", "rotated")

        assert await CredentialVerifier().verify(token) is None

    async def test_malformed_token(self, test_db):
        verifier = CredentialVerifier()
        assert await verifier.verify("no-separator") is None
        assert await verifier.verify(".secret") is None
        assert await verifier.verify("user-1.") is None
