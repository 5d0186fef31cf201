"""
Adversarial tests for reset code guessing.

Verifies that guessing a password reset code neither succeeds nor
damages the legitimate user's pending reset.

Security rationale:
- Reset codes carry 192 bits of randomness, so guessing is infeasible
  as long as wrong guesses reveal nothing and change nothing
- Every failure mode returns the same InvalidToken error
- A wrong guess never consumes, replaces or discards the real token
"""

import pytest

from accountkit.domain.exceptions import InvalidToken
from accountkit.domain.passwords import PasswordService, generate_reset_code

from tests.adversarial.conftest import Backend, create_victim
from tests.support import FakeClock

pytestmark = pytest.mark.adversarial


class TestResetCodeGuessing:
    """Simulate an attacker guessing codes for a victim's pending reset."""

    GUESSES = 50

    def test_guesses_fail_and_leave_token_usable(
        self, backend: Backend, password_service: PasswordService
    ) -> None:
        guid = create_victim(backend)
        password_service.send_new_password_request(guid)
        code = backend.tokens.get(guid).code

        for _ in range(self.GUESSES):
            with pytest.raises(InvalidToken):
                password_service.execute_new_password_request(
                    guid, generate_reset_code(), "attacker-password"
                )

        token = backend.tokens.get(guid)
        assert token.code == code
        assert token.consumed is False

        outcome = password_service.execute_new_password_request(guid, code, "victim-new-pw")
        assert outcome.success is True

    def test_password_unchanged_after_guesses(
        self, backend: Backend, password_service: PasswordService
    ) -> None:
        guid = create_victim(backend)
        original_hash = backend.accounts.get(guid).password_hash
        password_service.send_new_password_request(guid)

        for guess in ["", "a", "0" * 32, "' OR '1'='1", "%", "_"]:
            with pytest.raises(InvalidToken):
                password_service.execute_new_password_request(guid, guess, "attacker-password")

        assert backend.accounts.get(guid).password_hash == original_hash

    def test_prefix_of_real_code_rejected(
        self, backend: Backend, password_service: PasswordService
    ) -> None:
        guid = create_victim(backend)
        password_service.send_new_password_request(guid)
        code = backend.tokens.get(guid).code

        guesses = [code[:-1], code + "A", code.swapcase()]
        for guess in [g for g in guesses if g != code]:
            with pytest.raises(InvalidToken):
                password_service.execute_new_password_request(guid, guess, "attacker-password")

    def test_all_failure_modes_are_indistinguishable(
        self, backend: Backend, password_service: PasswordService, clock: FakeClock
    ) -> None:
        no_token = create_victim(backend, "notoken")
        wrong = create_victim(backend, "wrongcode")
        used = create_victim(backend, "usedcode")
        expired = create_victim(backend, "expired")

        for guid in (wrong, used, expired):
            password_service.send_new_password_request(guid)
        used_code = backend.tokens.get(used).code
        expired_code = backend.tokens.get(expired).code
        password_service.execute_new_password_request(used, used_code, "first-new-pw")

        clock.advance(3600)
        messages = []
        attempts = [
            (no_token, "anything"),
            (wrong, "not-the-code"),
            (used, used_code),
            (expired, expired_code),
        ]
        for guid, guess in attempts:
            with pytest.raises(InvalidToken) as exc_info:
                password_service.execute_new_password_request(guid, guess, "attacker-password")
            messages.append(str(exc_info.value))

        assert set(messages) == {"Invalid or expired code"}

    def test_reissued_code_invalidates_intercepted_one(
        self, backend: Backend, password_service: PasswordService
    ) -> None:
        guid = create_victim(backend)
        password_service.send_new_password_request(guid)
        intercepted = backend.tokens.get(guid).code
        password_service.send_new_password_request(guid)

        with pytest.raises(InvalidToken):
            password_service.execute_new_password_request(guid, intercepted, "attacker-password")


class TestInviteCodeGuessing:
    """Simulate an attacker guessing invite codes."""

    def test_guesses_never_validate(self, backend: Backend) -> None:
        create_victim(backend, "inviter")
        code = backend.accounts.generate_invite_code("inviter")

        for _ in range(50):
            guess = generate_reset_code()
            assert backend.accounts.validate_invite_code("inviter", guess) is False

        assert backend.accounts.validate_invite_code("inviter", code) is True
