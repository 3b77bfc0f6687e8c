"""PhoneNumber value object for contact numbers used at checkout."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from identity.domain import identity

MIN_PHONE_LENGTH = 7


@identity.value_object
class PhoneNumber:
    """Digits, spaces, hyphens and parentheses with an optional leading +.

    Numbers shorter than seven characters cannot be used for COD delivery
    calls and are rejected.
    """

    number: String(required=True, max_length=20)

    @invariant.post
    def validate_phone_format(self):
        number = self.number.strip()

        if len(number) < MIN_PHONE_LENGTH:
            raise ValidationError({"phone": [f"Phone number must be at least {MIN_PHONE_LENGTH} characters"]})

        if not re.match(r"^\+?[\d\s\-()]+$", number):
            raise ValidationError({"phone": [f"Invalid phone number: {number!r}"]})
