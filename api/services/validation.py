"""Format rules for user-supplied names, versions and language codes."""

import re

from api.exceptions import ValidationError
from unlingo.db.models import MAIN_VERSION

VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.-]+)?$")
LANGUAGE_CODE_PATTERN = re.compile(r"^[a-z]{2}(-[A-Z]{2})?$", re.IGNORECASE)
NAMESPACE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

MAX_NAMESPACE_NAME_LENGTH = 100
MAX_VERSION_LENGTH = 100
MAX_RELEASE_NAME_LENGTH = 100
MAX_RELEASE_TAG_LENGTH = 50


def validate_version(version: str) -> str:
    """Return the version string if it is "main" or a semantic version."""
    version = (version or "").strip()
    if version == MAIN_VERSION:
        return version
    if len(version) > MAX_VERSION_LENGTH or not VERSION_PATTERN.match(version):
        raise ValidationError(
            "Version must be 'main' or a semantic version like 1.0.0 or 1.0.0-beta.1"
        )
    return version


def normalize_language_code(code: str) -> str:
    """Validate a language code and return it as "xx" or "xx-YY".

    Codes match case-insensitively; storing one canonical casing keeps
    "en-us" and "en-US" from coexisting in a version.
    """
    code = (code or "").strip()
    if not LANGUAGE_CODE_PATTERN.match(code):
        raise ValidationError(
            f"Invalid language code '{code}'. Use a format like 'en' or 'en-US'"
        )
    language, _, region = code.partition("-")
    return f"{language.lower()}-{region.upper()}" if region else language.lower()


def validate_namespace_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Namespace name is required")
    if len(name) > MAX_NAMESPACE_NAME_LENGTH:
        raise ValidationError(
            f"Namespace name must be at most {MAX_NAMESPACE_NAME_LENGTH} characters"
        )
    if not NAMESPACE_NAME_PATTERN.match(name):
        raise ValidationError(
            "Namespace name can only contain letters, numbers, hyphens and underscores"
        )
    return name


def validate_release_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Release name is required")
    if len(name) > MAX_RELEASE_NAME_LENGTH:
        raise ValidationError(
            f"Release name must be at most {MAX_RELEASE_NAME_LENGTH} characters"
        )
    return name


def validate_release_tag(tag: str) -> str:
    tag = (tag or "").strip()
    if not tag:
        raise ValidationError("Release tag is required")
    if len(tag) > MAX_RELEASE_TAG_LENGTH:
        raise ValidationError(
            f"Release tag must be at most {MAX_RELEASE_TAG_LENGTH} characters"
        )
    return tag
