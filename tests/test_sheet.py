"""Tests for the CSV transfer sheet."""

import csv

import pytest

from lookml_transfer.api.exceptions import SheetError
from lookml_transfer.sheet.table import Column, TransferSheet


def _write(path, text):
    path.write_text(text, encoding='utf-8')
    return str(path)


class TestTransferSheet:
    def test_rows(self, tmp_path):
        path = _write(
            tmp_path / 'sheet.csv',
            'Looker Project,Base Branch,Transfer Results\n'
            ' sales ,main,\n'
            'finance, ,Failed.\n',
        )

        rows = list(TransferSheet(path).rows())

        assert [(r.key, r.project, r.base_branch) for r in rows] == [
            (0, 'sales', 'main'),
            (1, 'finance', ''),
        ]
        assert rows[1].transfer_results == 'Failed.'

    def test_missing_sheet(self, tmp_path):
        with pytest.raises(SheetError):
            TransferSheet(str(tmp_path / 'missing.csv'))

    def test_missing_required_column(self, tmp_path):
        path = _write(tmp_path / 'sheet.csv', 'Looker Project,Base Branch\nsales,main\n')

        with pytest.raises(SheetError) as exc_info:
            TransferSheet(path)

        assert 'Transfer Results' in str(exc_info.value)

    def test_report_overwrites_and_flushes(self, tmp_path):
        path = _write(
            tmp_path / 'sheet.csv',
            'Looker Project,Base Branch,Transfer Results,Notes\nsales,main,old,keep\n',
        )
        sheet = TransferSheet(path)

        sheet.report(0, 'Step 1/9: first')
        sheet.report(0, 'Step 2/9: second')

        with open(path, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)
            rows = list(reader)
            fieldnames = reader.fieldnames

        assert rows[0][Column.TRANSFER] == 'Step 2/9: second'
        assert rows[0]['Notes'] == 'keep'
        assert fieldnames[:4] == [
            'Looker Project',
            'Base Branch',
            'Transfer Results',
            'Notes',
        ]
        assert Column.VALIDATION in fieldnames
        assert not list(tmp_path.glob('.sheet.csv.*.tmp'))

    def test_write_is_buffered_until_flush(self, tmp_path):
        path = _write(
            tmp_path / 'sheet.csv',
            'Looker Project,Base Branch,Transfer Results\nsales,main,\n',
        )
        sheet = TransferSheet(path)

        sheet.write(0, Column.VALIDATION, 'Validation succeeded.')
        assert 'Validation succeeded.' not in (tmp_path / 'sheet.csv').read_text()

        sheet.flush()
        assert 'Validation succeeded.' in (tmp_path / 'sheet.csv').read_text()
        assert sheet.get(0, Column.VALIDATION) == 'Validation succeeded.'

    def test_write_unknown_column(self, tmp_path):
        path = _write(
            tmp_path / 'sheet.csv',
            'Looker Project,Base Branch,Transfer Results\nsales,main,\n',
        )

        with pytest.raises(SheetError):
            TransferSheet(path).write(0, 'Nope', 'x')

    def test_find_row(self, tmp_path):
        path = _write(
            tmp_path / 'sheet.csv',
            'Looker Project,Base Branch,Transfer Results\nsales,main,\nfinance,main,\n',
        )
        sheet = TransferSheet(path)

        assert sheet.find_row('finance').key == 1
        assert sheet.find_row('missing') is None
