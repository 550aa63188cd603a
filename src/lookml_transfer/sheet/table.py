"""CSV-backed transfer sheet used for input rows and status writes."""

import csv
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..api.exceptions import SheetError


class Column:
    """Header names of the transfer sheet."""

    PROJECT = 'Looker Project'
    BASE_BRANCH = 'Base Branch'
    GIT_CONNECTION = 'Git Connection Results'
    TRANSFER = 'Transfer Results'
    VALIDATE = 'Validate Project'
    VALIDATION = 'Validation Results'

    ALL = [PROJECT, BASE_BRANCH, GIT_CONNECTION, TRANSFER, VALIDATE, VALIDATION]
    REQUIRED = [PROJECT, BASE_BRANCH, TRANSFER]


class SheetRow(BaseModel):
    """One data row of the transfer sheet."""

    key: int = Field(..., description='Zero-based row index below the header')
    project: str = Field(default='', description='Looker project id')
    base_branch: str = Field(default='', description='Base branch')
    transfer_results: str = Field(default='', description='Last transfer status')


class TransferSheet:
    """Table with a header row, read for input and written for status.

    Cell writes are buffered until ``flush`` rewrites the file.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self.fieldnames: List[str] = []
        self.records: List[Dict[str, str]] = []
        self._dirty = False
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            raise SheetError(f'Transfer sheet not found: {self.path}')

        with open(self.path, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)
            self.fieldnames = [name.strip() for name in reader.fieldnames or []]
            reader.fieldnames = self.fieldnames
            self.records = [
                {name: (row.get(name) or '') for name in self.fieldnames}
                for row in reader
            ]

        missing = [name for name in Column.REQUIRED if name not in self.fieldnames]
        if missing:
            raise SheetError(
                f'Transfer sheet {self.path} is missing columns: {", ".join(missing)}'
            )

        # Status columns are optional in the input and created on first write
        for name in Column.ALL:
            if name not in self.fieldnames:
                self.fieldnames.append(name)
                for record in self.records:
                    record[name] = ''

        logger.debug(f'Loaded {len(self.records)} rows from {self.path}')

    def rows(self) -> Iterator[SheetRow]:
        for key, record in enumerate(self.records):
            yield SheetRow(
                key=key,
                project=record[Column.PROJECT].strip(),
                base_branch=record[Column.BASE_BRANCH].strip(),
                transfer_results=record[Column.TRANSFER],
            )

    def find_row(self, project_id: str) -> Optional[SheetRow]:
        """First row whose project matches ``project_id``."""
        for row in self.rows():
            if row.project == project_id:
                return row
        return None

    def get(self, row_key: int, column: str) -> str:
        return self.records[row_key].get(column, '')

    def write(self, row_key: int, column: str, value: str) -> None:
        if column not in self.fieldnames:
            raise SheetError(f'Unknown column: {column}')
        self.records[row_key][column] = value
        self._dirty = True

    def report(self, row_key: int, message: str) -> None:
        """Overwrite the row's transfer status and flush."""
        self.write(row_key, Column.TRANSFER, message)
        self.flush()

    def flush(self) -> None:
        """Rewrite the sheet file with every pending change."""
        if not self._dirty:
            return

        fd, temp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f'.{self.path.name}.', suffix='.tmp'
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                writer = csv.DictWriter(f, fieldnames=self.fieldnames)
                writer.writeheader()
                writer.writerows(self.records)
            os.replace(temp_path, self.path)
        except OSError:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        self._dirty = False
