"""Naming variant derivation.

Every generated identifier and path starts from one ``NamingVariants`` value.
The kebab form is normalized once from the raw input; the other three forms
are derived from kebab only, so two inputs with the same kebab form always
produce identical variants.

Examples::

    derive_naming_variants("UserProfile").kebab        -> "user-profile"
    derive_naming_variants("user_profile").pascal      -> "UserProfile"
    derive_naming_variants("user profile").upper_snake -> "USER_PROFILE"
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from modforge.errors import ValidationError

_CAMEL_HUMP = re.compile(r"([a-z])([A-Z])")
_SEPARATORS = re.compile(r"[^a-z0-9]+")


class NamingVariants(BaseModel):
    """Canonical casing variants of one base name."""

    model_config = ConfigDict(frozen=True)

    base: str
    pascal: str
    camel: str
    kebab: str
    upper_snake: str


def to_kebab(value: str) -> str:
    """Normalize *value* to kebab-case.

    A boundary is inserted at every lowercase-to-uppercase hump, the string is
    lowercased, and any run of non-alphanumeric characters becomes a single
    hyphen.
    """
    humped = _CAMEL_HUMP.sub(r"\1-\2", value.strip())
    return _SEPARATORS.sub("-", humped.lower()).strip("-")


def kebab_to_pascal(kebab: str) -> str:
    return "".join(segment[:1].upper() + segment[1:] for segment in kebab.split("-") if segment)


def kebab_to_camel(kebab: str) -> str:
    pascal = kebab_to_pascal(kebab)
    return pascal[:1].lower() + pascal[1:]


def kebab_to_upper_snake(kebab: str) -> str:
    return kebab.replace("-", "_").upper()


def derive_naming_variants(base: str) -> NamingVariants:
    """Derive all naming variants for *base*.

    Raises:
        ValidationError: If *base* is empty after trimming, or contains no
            alphanumeric characters at all.
    """
    if base is None or not base.strip():
        raise ValidationError("Name cannot be empty")

    kebab = to_kebab(base)
    if not kebab:
        raise ValidationError(f"Name {base!r} contains no usable characters")

    return NamingVariants(
        base=base,
        pascal=kebab_to_pascal(kebab),
        camel=kebab_to_camel(kebab),
        kebab=kebab,
        upper_snake=kebab_to_upper_snake(kebab),
    )


def to_title(kebab: str) -> str:
    """``"user-profile"`` -> ``"User Profile"``."""
    return " ".join(segment[:1].upper() + segment[1:] for segment in kebab.split("-") if segment)
