"""Buyer contact and shipping details entered on the checkout form.

The details are optional as a whole: a gateway that collects the address on
its hosted page makes them redundant. When they are sent, every required
field must be filled in.
"""

from protean.exceptions import ValidationError

REQUIRED_FIELDS = ("name", "email", "phone", "line1", "city", "state", "postal_code", "country")
OPTIONAL_FIELDS = ("line2",)
CONTACT_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS

# Same limits as the order's ShippingAddress, so a paid order always stores them
MAX_LENGTHS = {
    "name": 255,
    "email": 255,
    "phone": 50,
    "line1": 255,
    "line2": 255,
    "city": 100,
    "state": 100,
    "postal_code": 20,
    "country": 100,
}


def validate_contact(raw: dict) -> dict:
    """Trim the submitted form and check it. Raises ValidationError naming every bad field."""
    values = {key: str(raw.get(key) or "").strip() for key in CONTACT_FIELDS}

    errors = {}
    for key in REQUIRED_FIELDS:
        if not values[key]:
            errors[key] = ["is required"]
    for key, value in values.items():
        if len(value) > MAX_LENGTHS[key]:
            errors.setdefault(key, []).append(f"must be at most {MAX_LENGTHS[key]} characters")
    if values["email"] and "@" not in values["email"]:
        errors.setdefault("email", []).append("must be a valid email address")

    if errors:
        raise ValidationError(errors)
    return {key: value for key, value in values.items() if value}
