"""Built-in generators registered in the default factory."""

from dataforge.generators.communication import (
    FilePathGenerator,
    LandlinePhoneGenerator,
    MimeTypeGenerator,
    VerificationCodeGenerator,
)
from dataforge.generators.identifiers import (
    LeiCodeGenerator,
    OrganizationCodeGenerator,
    UuidGenerator,
)

BUILTIN_GENERATORS = (
    VerificationCodeGenerator,
    LandlinePhoneGenerator,
    FilePathGenerator,
    MimeTypeGenerator,
    OrganizationCodeGenerator,
    LeiCodeGenerator,
    UuidGenerator,
)

__all__ = [
    "BUILTIN_GENERATORS",
    "FilePathGenerator",
    "LandlinePhoneGenerator",
    "LeiCodeGenerator",
    "MimeTypeGenerator",
    "OrganizationCodeGenerator",
    "UuidGenerator",
    "VerificationCodeGenerator",
]
