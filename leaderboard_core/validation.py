"""
Race configuration schemas using Pydantic v2
Validates declared categories, feed sources and header aliases
"""

import logging
import math
from typing import Any, Dict, List, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

# ==================== HEADER ALIASES ====================

# Logical field -> accepted header labels (lower-case, matched exactly or as a
# substring). Sheets are edited by hand in Indonesian and English.
HEADER_ALIASES: Dict[str, List[str]] = {
    "identifier": ["epc", "uid", "tag", "rfid", "chip epc", "epc code"],
    "bib": ["bib", "no bib", "bib number", "race bib", "nomor bib", "no. bib"],
    "name": ["nama lengkap", "full name", "name", "nama", "participant name"],
    "gender": ["jenis kelamin", "gender", "sex", "jk"],
    "category": ["kategori", "category", "kelas", "class"],
    "time": ["times", "time", "timestamp", "start time", "finish time", "jam"],
}

FIELDS = tuple(HEADER_ALIASES)


class CategorySource(BaseModel):
    """A declared race category and the feed its roster is read from."""

    key: str = Field(..., min_length=1, max_length=100, description="Category key")
    source_id: str | int = Field(..., description="Feed identifier (e.g. sheet gid)")

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Category key is used as bucket key; surrounding whitespace is noise"""
        v = v.strip()
        if len(v) == 0:
            raise ValueError("category key cannot be empty")
        return v

    model_config = ConfigDict(frozen=True)


class RaceConfig(BaseModel):
    """Feeds and header aliases needed to build one leaderboard snapshot"""

    categories: List[CategorySource] = Field(
        ..., min_length=1, description="Declared categories, in display order"
    )
    start_source: str | int = Field(..., description="Start-time feed identifier")
    finish_source: str | int = Field(..., description="Finish-time feed identifier")
    header_aliases: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in HEADER_ALIASES.items()},
        description="Logical field -> accepted header aliases",
    )

    @field_validator("header_aliases")
    @classmethod
    def validate_header_aliases(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Normalize aliases and fill in fields the caller did not override"""
        merged = {k: list(aliases) for k, aliases in HEADER_ALIASES.items()}
        for field, aliases in v.items():
            if field not in HEADER_ALIASES:
                raise ValueError(f"header_aliases field must be one of {FIELDS}, got {field}")
            normalized = []
            for alias in aliases:
                alias = InputSanitizer.sanitize_cell(alias).lower()
                if alias and alias not in normalized:
                    normalized.append(alias)
            if not normalized:
                raise ValueError(f"header_aliases[{field}] needs at least one alias")
            merged[field] = normalized
        return merged

    @model_validator(mode="after")
    def validate_unique_categories(self) -> Self:
        """Category keys identify buckets, so they must not repeat"""
        seen = set()
        for category in self.categories:
            if category.key in seen:
                raise ValueError(f"duplicate category key: {category.key}")
            seen.add(category.key)
        return self

    @property
    def category_keys(self) -> List[str]:
        return [category.key for category in self.categories]

    @classmethod
    def from_dict(cls, data: dict) -> "RaceConfig":
        """
        Validate a raw configuration mapping

        Returns:
            RaceConfig: Validated configuration

        Raises:
            ValueError: If validation fails
        """
        try:
            return cls(**data)
        except Exception as e:
            logger.warning(f"Race configuration rejected: {e}")
            raise ValueError(f"Invalid race configuration: {str(e)}")

    model_config = ConfigDict(frozen=True)


class InputSanitizer:
    """Utility class for cell sanitization"""

    @staticmethod
    def sanitize_cell(value: Any) -> str:
        """Render a raw cell as trimmed text ("" for missing cells)"""
        if value is None:
            return ""
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, float):
            # Spreadsheet JSON feeds return numbers; 101.0 is bib "101".
            if math.isfinite(value) and value.is_integer():
                return str(int(value))
        text = value if isinstance(value, str) else str(value)

        # Remove null bytes
        return text.replace("\0", "").strip()

    @staticmethod
    def sanitize_header(value: Any) -> str:
        """Header label in the form aliases are compared against"""
        return InputSanitizer.sanitize_cell(value).lower()


# ==================== EXPORT ====================

__all__ = [
    "HEADER_ALIASES",
    "FIELDS",
    "CategorySource",
    "RaceConfig",
    "InputSanitizer",
]
