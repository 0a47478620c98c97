"""Text backup format for articles and group articles.

A backup is UTF-8 text. The first line is a fixed header naming the columns;
every following line is one record whose fields are joined by ``&&``. Missing
fields are written as empty strings. Fields are not escaped, so text
containing ``&&`` or a line break cannot be restored; the exporter logs a
warning for such rows.

Article rows have the columns title, description, body, level,
groupIdentifier, keywords, accessLevel, other, links, uniqueID. Group article
rows have title, author, description, body, groupIdentifier, keywords, other,
links, uniqueID, with the body exactly as stored (wrapped when a codec is in
use). The trailing uniqueID may be omitted on restore.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence, TextIO, Tuple, Union

from help_system.core.exceptions import BackupMalformedError, DuplicateKeyError
from help_system.schemas.article import Article, GroupArticle
from help_system.schemas.backup import BackupWarning, RestoreReport
from help_system.schemas.common import AccessLevel, Level, RestoreMode, parse_choice
from help_system.utils.article_manager import ArticleManager
from help_system.utils.group_article_manager import GroupArticleManager

logger = logging.getLogger(__name__)

DELIMITER = "&&"

ARTICLE_HEADER = (
    "Title, Description, Body, Level, Group Identifier, Keywords, "
    "Access Level, Other, Links, Unique ID"
)
ARTICLE_FIELDS = (
    "title",
    "description",
    "body",
    "level",
    "group_identifier",
    "keywords",
    "access_level",
    "other",
    "links",
)

GROUP_ARTICLE_HEADER = (
    "Title, Author, Description, Body, Group Identifier, Keywords, "
    "Other, Links, Unique ID"
)
GROUP_ARTICLE_FIELDS = (
    "title",
    "author",
    "description",
    "body",
    "group_identifier",
    "keywords",
    "other",
    "links",
)

_VALID_LEVELS = {level.value for level in Level}
_VALID_ACCESS_LEVELS = {access.value for access in AccessLevel}

Record = Union[Article, GroupArticle]
ParsedRow = Tuple[int, dict, Optional[int]]


def _field(value) -> str:
    if value is None:
        return ""
    return getattr(value, "value", str(value))


def format_row(record: Record, fields: Sequence[str]) -> str:
    values = [_field(getattr(record, name)) for name in fields]
    values.append(str(record.unique_id))
    for value in values:
        if DELIMITER in value or "\n" in value or "\r" in value:
            logger.warning(
                "Article %s has a field containing the delimiter or a line break; "
                "the row will not restore",
                record.unique_id,
            )
            break
    return DELIMITER.join(values)


def write_records(
    stream: TextIO, header: str, records: Iterable[Record], fields: Sequence[str]
) -> int:
    """Write a header and one line per record.

    Returns:
        Number of records written.
    """
    stream.write(header + "\n")
    count = 0
    for record in records:
        stream.write(format_row(record, fields) + "\n")
        count += 1
    return count


def parse_rows(
    lines: Iterable[str],
    header: str,
    fields: Sequence[str],
    validate: Optional[Callable[[dict], Optional[str]]] = None,
) -> Iterator[Union[ParsedRow, BackupMalformedError]]:
    """Split backup lines into field dicts.

    Yields ``(line_number, values, unique_id)`` for each usable row and a
    BackupMalformedError for each rejected one. ``unique_id`` is None when the
    column is missing, empty or not an integer. Empty fields become None.
    A first line without the delimiter is taken as the header.
    """
    min_columns = len(fields)
    max_columns = len(fields) + 1
    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if line_number == 1 and DELIMITER not in line:
            if line.strip() != header:
                logger.warning("Unexpected backup header: %r", line)
            continue
        if not line.strip():
            continue

        columns = line.split(DELIMITER)
        if not min_columns <= len(columns) <= max_columns:
            yield BackupMalformedError(
                line_number,
                f"Incorrect number of columns: {len(columns)}",
                line,
            )
            continue

        values = {name: (columns[i] or None) for i, name in enumerate(fields)}
        if validate is not None:
            problem = validate(values)
            if problem:
                yield BackupMalformedError(line_number, problem, line)
                continue

        unique_id = None
        if len(columns) == max_columns and columns[-1].strip():
            try:
                unique_id = int(columns[-1].strip())
            except ValueError:
                unique_id = None
        yield line_number, values, unique_id


def _validate_article(values: dict) -> Optional[str]:
    if not values["title"]:
        return "Missing title"
    if values["level"] not in _VALID_LEVELS:
        return f"Invalid level: {values['level']!r}"
    if values["access_level"] not in _VALID_ACCESS_LEVELS:
        return f"Invalid access level: {values['access_level']!r}"
    return None


def _validate_group_article(values: dict) -> Optional[str]:
    if not values["title"]:
        return "Missing title"
    if not values["group_identifier"]:
        return "Missing group identifier"
    return None


def _warn(report: RestoreReport, error: BackupMalformedError) -> None:
    logger.warning("Skipping backup row: %s", error)
    report.warnings.append(BackupWarning.from_error(error))


class BackupCodec:
    """Exports and restores the article catalogues."""

    def __init__(self, articles: ArticleManager, group_articles: GroupArticleManager):
        self.articles = articles
        self.group_articles = group_articles

    # --- Articles ---

    def export_articles(self, stream: TextIO, group: Optional[str] = None) -> int:
        """Write every article, or only those tagged with group."""
        records = self.articles.list_all() if group is None else self.articles.list_by_group(group)
        count = write_records(stream, ARTICLE_HEADER, records, ARTICLE_FIELDS)
        logger.info("Exported %d articles", count)
        return count

    def restore_articles(self, lines: Iterable[str], mode: str) -> RestoreReport:
        """Import article rows.

        In replace mode the catalogue is emptied first and every valid row is
        inserted with its own uniqueID (a fresh one if the column is unusable).
        In merge mode rows whose uniqueID already exists are skipped; rows
        without a usable uniqueID are skipped if an article with the same
        title exists and otherwise get a fresh uniqueID.
        """
        mode = parse_choice(RestoreMode, mode, "restore mode")
        report = RestoreReport(mode=mode)
        if mode is RestoreMode.REPLACE and self.articles.has_any():
            self.articles.delete_all()

        for item in parse_rows(lines, ARTICLE_HEADER, ARTICLE_FIELDS, _validate_article):
            if isinstance(item, BackupMalformedError):
                _warn(report, item)
                continue
            line_number, values, unique_id = item
            if mode is RestoreMode.MERGE:
                duplicate = (
                    self.articles.exists(unique_id)
                    if unique_id is not None
                    else self.articles.exists_title(values["title"])
                )
                if duplicate:
                    logger.info(
                        "Line %d: article %s already exists, skipped",
                        line_number,
                        unique_id if unique_id is not None else values["title"],
                    )
                    report.duplicates += 1
                    continue
            try:
                self.articles.create(unique_id=unique_id, **values)
            except DuplicateKeyError:
                logger.info("Line %d: duplicate unique ID %s, skipped", line_number, unique_id)
                report.duplicates += 1
                continue
            report.imported += 1

        logger.info(
            "Restored articles (%s): %d imported, %d duplicates, %d malformed",
            mode.value,
            report.imported,
            report.duplicates,
            len(report.warnings),
        )
        return report

    # --- Group articles ---

    def export_group_articles(self, stream: TextIO, group: str) -> int:
        records = self.group_articles.list_stored(group)
        count = write_records(stream, GROUP_ARTICLE_HEADER, records, GROUP_ARTICLE_FIELDS)
        logger.info("Exported %d articles of group %s", count, group)
        return count

    def restore_group_articles(
        self, lines: Iterable[str], group: str, mode: str
    ) -> RestoreReport:
        """Import group article rows into one group.

        Rows naming another group are rejected. Bodies are stored as read;
        with a codec set, a row whose body does not unwrap under its uniqueID
        is skipped with a warning.
        """
        mode = parse_choice(RestoreMode, mode, "restore mode")
        report = RestoreReport(mode=mode)
        if mode is RestoreMode.REPLACE and self.group_articles.has_any(group):
            self.group_articles.delete_group(group)

        rows = parse_rows(
            lines, GROUP_ARTICLE_HEADER, GROUP_ARTICLE_FIELDS, _validate_group_article
        )
        for item in rows:
            if isinstance(item, BackupMalformedError):
                _warn(report, item)
                continue
            line_number, values, unique_id = item
            if values["group_identifier"] != group:
                _warn(
                    report,
                    BackupMalformedError(
                        line_number,
                        f"Row belongs to group {values['group_identifier']!r}",
                    ),
                )
                continue
            if mode is RestoreMode.MERGE and unique_id is not None and self.group_articles.exists(unique_id):
                logger.info("Line %d: group article %s already exists, skipped", line_number, unique_id)
                report.duplicates += 1
                continue
            if unique_id is None and values["body"] is not None and self.group_articles.codec is not None:
                # The body was wrapped with an IV derived from the lost identity
                _warn(report, BackupMalformedError(line_number, "Missing unique ID"))
                continue
            readable = unique_id is None or self.group_articles.body_is_readable(
                values["body"], unique_id
            )
            if not readable:
                _warn(report, BackupMalformedError(line_number, "Body cannot be unwrapped"))
                continue
            values["group"] = values.pop("group_identifier")
            try:
                self.group_articles.create(
                    unique_id=unique_id, body_is_stored_form=True, **values
                )
            except DuplicateKeyError:
                report.duplicates += 1
                continue
            report.imported += 1

        logger.info(
            "Restored group %s (%s): %d imported, %d duplicates, %d malformed",
            group,
            mode.value,
            report.imported,
            report.duplicates,
            len(report.warnings),
        )
        return report


def backup_to_file(codec: BackupCodec, path: Union[str, Path], group: Optional[str] = None) -> int:
    with open(path, "w", encoding="utf-8") as f:
        return codec.export_articles(f, group=group)


def restore_from_file(codec: BackupCodec, path: Union[str, Path], mode: str) -> RestoreReport:
    with open(path, "r", encoding="utf-8") as f:
        return codec.restore_articles(f, mode)


def backup_group_to_file(codec: BackupCodec, path: Union[str, Path], group: str) -> int:
    with open(path, "w", encoding="utf-8") as f:
        return codec.export_group_articles(f, group)


def restore_group_from_file(
    codec: BackupCodec, path: Union[str, Path], group: str, mode: str
) -> RestoreReport:
    with open(path, "r", encoding="utf-8") as f:
        return codec.restore_group_articles(f, group, mode)
