import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from music_catalog.core.errors import InvalidFilterFieldError
from music_catalog.core.normalizer import NameNormalizer

logger = logging.getLogger(__name__)

FILTER_DATE_FORMAT = "%Y-%m-%d"


class FilterKind(str, Enum):
    ILIKE = "ilike"              # case-insensitive exact or LIKE-pattern match
    CONTAINS = "contains"        # case-insensitive substring match
    DATE_EQUALS = "date_equals"


@dataclass(frozen=True)
class FilterSpec:
    field: str
    kind: FilterKind
    value: Union[str, date]


class FilterQueryBuilder:
    """
    Validates a listing filter and describes the predicate to apply.
    An unknown field is the only hard failure; everything else degrades to
    "no filter".
    """
    ALLOWED_FIELDS = ("song_name", "artist_name", "release_date")

    @staticmethod
    def build(field: Optional[str], value: Optional[str]) -> Optional[FilterSpec]:
        if not field or not value:
            logger.debug("No filtering parameters provided")
            return None

        if field == "song_name":
            return FilterSpec(field, FilterKind.ILIKE, NameNormalizer.normalize(value))

        if field == "artist_name":
            return FilterSpec(field, FilterKind.CONTAINS, NameNormalizer.normalize(value))

        if field == "release_date":
            try:
                release_date = datetime.strptime(value.strip(), FILTER_DATE_FORMAT).date()
            except ValueError:
                logger.debug(f"Ignoring unparseable release_date filter: {value!r}")
                return None
            return FilterSpec(field, FilterKind.DATE_EQUALS, release_date)

        raise InvalidFilterFieldError(
            f"Invalid filter field '{field}', expected one of: {', '.join(FilterQueryBuilder.ALLOWED_FIELDS)}"
        )
