"""Communication-related generators: codes, phone numbers, paths, MIME types."""

import string
from typing import ClassVar, Dict, Tuple

from dataforge.context import GenerationContext
from dataforge.exceptions import ParameterTypeError
from dataforge.generator import DataGenerator

_CHARSETS: Dict[str, str] = {
    "NUMERIC": string.digits,
    "ALPHA": string.ascii_uppercase + string.ascii_lowercase,
    "ALPHANUMERIC": string.digits + string.ascii_uppercase + string.ascii_lowercase,
}


class VerificationCodeGenerator(DataGenerator[str]):
    """Verification codes for SMS or email.

    Parameters:
        length: Number of characters (default 6)
        chars: NUMERIC, ALPHA or ALPHANUMERIC (default NUMERIC). Unknown
            values fall back to NUMERIC.
    """

    name = "verification_code"
    supported_parameters = ("length", "chars")
    shared = True

    def generate(self, context: GenerationContext) -> str:
        length = self._param(context, "length", 6, int)
        chars = self._param(context, "chars", "NUMERIC", str)
        if length < 0:
            raise ParameterTypeError(
                f"Parameter 'length' must be non-negative, got {length}",
                context={"generator": self.name, "parameter": "length", "value": length},
            )

        charset = _CHARSETS.get(chars.upper(), _CHARSETS["NUMERIC"])
        rng = self._rng(context)
        return "".join(rng.choice(charset) for _ in range(length))


class LandlinePhoneGenerator(DataGenerator[str]):
    """Landline numbers such as ``021-55501234`` or ``010-55501234-123``."""

    name = "landline_phone"
    supported_parameters = ("area_code", "number_length", "extension_length")
    shared = True

    AREA_CODES: ClassVar[Tuple[str, ...]] = ("010", "021", "022", "023", "024", "025", "027", "028")

    def generate(self, context: GenerationContext) -> str:
        rng = self._rng(context)
        area_code = self._param(context, "area_code", rng.choice(self.AREA_CODES), str)
        number_length = self._param(context, "number_length", 8, int)
        extension_length = self._param(context, "extension_length", 0, int)

        number = f"{area_code}-{_digits(rng, number_length)}"
        if extension_length > 0:
            number += f"-{_digits(rng, extension_length)}"
        return number


class FilePathGenerator(DataGenerator[str]):
    """File paths for UNIX or Windows.

    Parameters:
        os: UNIX (default) or WINDOWS
        depth: Number of directories before the file name (default 3)
    """

    name = "file_path"
    supported_parameters = ("os", "depth")
    shared = True

    FOLDERS: ClassVar[Tuple[str, ...]] = ("docs", "images", "videos", "audio", "temp", "logs")
    EXTENSIONS: ClassVar[Tuple[str, ...]] = ("txt", "pdf", "jpg", "png", "mp4", "mp3", "log")

    def generate(self, context: GenerationContext) -> str:
        os_name = self._param(context, "os", "UNIX", str)
        depth = self._param(context, "depth", 3, int)
        rng = self._rng(context)

        windows = os_name.upper() == "WINDOWS"
        separator = "\\" if windows else "/"
        root = "C:\\" if windows else "/"

        folders = [rng.choice(self.FOLDERS) for _ in range(max(depth, 0))]
        file_name = f"file-{rng.randrange(1000)}.{rng.choice(self.EXTENSIONS)}"
        return root + "".join(folder + separator for folder in folders) + file_name


class MimeTypeGenerator(DataGenerator[str]):
    """MIME types, optionally restricted to one top-level ``category``."""

    name = "mime_type"
    supported_parameters = ("category",)
    shared = True

    MIME_TYPES: ClassVar[Tuple[str, ...]] = (
        "application/json", "application/xml", "application/pdf", "application/zip",
        "text/plain", "text/html", "text/css", "text/javascript",
        "image/jpeg", "image/png", "image/gif", "image/svg+xml",
        "audio/mpeg", "audio/ogg", "video/mp4", "video/webm",
    )

    def generate(self, context: GenerationContext) -> str:
        category = self._param(context, "category", "", str).lower()
        candidates = self.MIME_TYPES
        if category:
            candidates = tuple(m for m in self.MIME_TYPES if m.startswith(f"{category}/"))
            if not candidates:
                candidates = self.MIME_TYPES
        return self._rng(context).choice(candidates)


def _digits(rng, count: int) -> str:
    return "".join(rng.choice(string.digits) for _ in range(max(count, 0)))
