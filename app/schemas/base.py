"""Shared schema building blocks."""

import re
import unicodedata
from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr, StringConstraints
from pydantic.alias_generators import to_camel

# Words of letters and combining marks, joined by single separators
NAME_SEPARATOR = re.compile(r"[ '.\-]")


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _is_name_word(word: str) -> bool:
    return bool(word) and all(unicodedata.category(ch)[0] in "LM" for ch in word)


def _check_name(value: str) -> str:
    if not all(_is_name_word(word) for word in NAME_SEPARATOR.split(value)):
        raise ValueError("Name can only contain letters, spaces, dots, hyphens and apostrophes")
    return unicodedata.normalize("NFC", value)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


NormalizedEmail = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(str.lower)]
Password = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=64), AfterValidator(_check_name)]
CurrencyCode = Annotated[
    str, StringConstraints(strip_whitespace=True, to_upper=True, min_length=3, max_length=3, pattern=r"^[A-Za-z]{3}$")
]
UtcDateTime = Annotated[datetime, AfterValidator(_to_naive_utc)]
