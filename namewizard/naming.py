"""Filename suggestion from analysis results.

The analysis core returns an opaque content description or a failure. This
module is the caller-side layer that turns either into a safe filename:
normalise the description into a stem, apply the user's naming options,
keep the original extension, and substitute a fallback label when the
analysis failed. The core itself never invents placeholder content.

Usage:
    from namewizard.naming import RenameOptions, suggest_name

    suggestion = suggest_name("IMG_0042.jpg", result, RenameOptions(separator="-"))
    suggestion.name  # "mountain-lake-at-sunset.jpg"
"""

import re
import unicodedata
from dataclasses import dataclass
from pathlib import PurePath
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from namewizard.ai.invoker import AnalysisResult
from namewizard.models import CAPABILITY_TEXT, CAPABILITY_VISION

FALLBACK_LABEL = "unidentified content"

_WORD_RE = re.compile(r"[A-Za-z0-9]+")


class RenameOptions(BaseModel):
    """User naming preferences applied to every suggestion."""

    model_config = ConfigDict(frozen=True)

    separator: Literal["_", "-", " "] = "_"
    case: Literal["lower", "upper", "keep"] = "lower"
    max_length: int = Field(default=100, ge=8, le=255)
    prefix: str = ""
    suffix: str = ""
    keep_extension: bool = True


@dataclass(frozen=True)
class SuggestedName:
    """A proposed filename and where it came from.

    ``fallback`` is True when the name was built from FALLBACK_LABEL
    because analysis produced nothing usable.
    """

    name: str
    model_id: str | None
    fallback: bool


def capability_for(mime_type: str) -> str:
    """Maps a MIME type to the analysis capability that handles it."""
    if mime_type.lower().startswith("image/"):
        return CAPABILITY_VISION
    return CAPABILITY_TEXT


def _words(text: str) -> list[str]:
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return _WORD_RE.findall(folded)


def slugify(text: str, options: RenameOptions | None = None) -> str:
    """Normalises free text into a filename stem.

    Accents are folded to ASCII, everything that is not a letter or digit
    becomes a single separator, and the result is cut to
    ``options.max_length`` without leaving a trailing separator.
    """
    options = options or RenameOptions()
    words = _words(text)
    if options.case == "lower":
        words = [w.lower() for w in words]
    elif options.case == "upper":
        words = [w.upper() for w in words]
    stem = options.separator.join(words)
    return stem[: options.max_length].rstrip(options.separator)


def suggest_name(
    file_name: str,
    result: AnalysisResult,
    options: RenameOptions | None = None,
) -> SuggestedName:
    """Builds the suggested filename for one analysed file.

    Args:
        file_name: The original filename (extension is taken from here).
        result: The analysis outcome for this file.
        options: Naming preferences. Defaults to RenameOptions().

    Returns:
        The suggestion, flagged as fallback when analysis failed or
        produced no usable words.
    """
    options = options or RenameOptions()

    description = slugify(result.content, options) if result.ok and result.content else ""
    fallback = not description
    if fallback:
        description = slugify(FALLBACK_LABEL, options)

    parts = [
        slugify(options.prefix, options),
        description,
        slugify(options.suffix, options),
    ]
    stem = options.separator.join(p for p in parts if p)
    stem = stem[: options.max_length].rstrip(options.separator)

    extension = PurePath(file_name).suffix if options.keep_extension else ""
    return SuggestedName(
        name=f"{stem}{extension.lower()}",
        model_id=None if fallback else result.model_id,
        fallback=fallback,
    )
