"""Static club credentials.

The club has exactly two accounts, an admin and a shared member login,
both configured in Settings.
"""

import secrets

from pydantic import SecretStr

from shuttlehub.config import Settings
from shuttlehub.models.user import ClubUser, UserRole


def _matches(given: str, expected: str | SecretStr) -> bool:
    if isinstance(expected, SecretStr):
        expected = expected.get_secret_value()
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def authenticate(settings: Settings, username: str, password: str) -> ClubUser | None:
    """Return the user for a username/password pair, or None if they do not match."""
    accounts = (
        (settings.admin_username, settings.admin_password, UserRole.ADMIN),
        (settings.member_username, settings.member_password, UserRole.MEMBER),
    )
    for account_name, account_password, role in accounts:
        # Evaluate both comparisons so timing does not reveal which part failed
        user_ok = _matches(username, account_name)
        password_ok = _matches(password, account_password)
        if user_ok and password_ok:
            return ClubUser(username=account_name, role=role)
    return None
