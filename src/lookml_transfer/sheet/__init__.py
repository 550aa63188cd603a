"""Transfer sheet access."""

from .table import Column, SheetRow, TransferSheet

__all__ = ['Column', 'SheetRow', 'TransferSheet']
