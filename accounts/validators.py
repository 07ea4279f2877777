from __future__ import annotations

import re
from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _


class PasswordComplexityValidator:
    """Require a mix of character classes for stronger passwords.

    Rules (in addition to minimum length configured separately):
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one symbol (non-alphanumeric)

    Every missing class is reported at once so a client can fix the
    password in a single round-trip.
    """

    rules = (
        (re.compile(r"[A-Z]"), "Password must contain an uppercase letter.", "password_no_upper"),
        (re.compile(r"[a-z]"), "Password must contain a lowercase letter.", "password_no_lower"),
        (re.compile(r"\d"), "Password must contain a digit.", "password_no_digit"),
        (re.compile(r"[^A-Za-z0-9]"), "Password must contain a symbol.", "password_no_symbol"),
    )

    def validate(self, password: str, user=None):  # noqa: D401
        errors = [
            ValidationError(_(message), code=code)
            for pattern, message, code in self.rules
            if not pattern.search(password)
        ]
        if errors:
            raise ValidationError(errors)

    def get_help_text(self):  # noqa: D401
        return _("Password must include uppercase, lowercase, digit, and symbol.")
