from __future__ import annotations

import pytest
from django.core.exceptions import ValidationError

from accounts.validators import PasswordComplexityValidator


def test_password_complexity_validator():
    v = PasswordComplexityValidator()
    # Too weak
    with pytest.raises(ValidationError):
        v.validate("password")
    with pytest.raises(ValidationError):
        v.validate("Password")
    with pytest.raises(ValidationError):
        v.validate("Password1")
    # Strong enough
    v.validate("Strong#Passw0rd")


def test_password_complexity_reports_every_missing_class():
    with pytest.raises(ValidationError) as excinfo:
        PasswordComplexityValidator().validate("abcdefgh")
    codes = {e.code for e in excinfo.value.error_list}
    assert codes == {"password_no_upper", "password_no_digit", "password_no_symbol"}
