"""
Pagination classes for the ledger API.

Cursor pagination keeps entry listings restartable: the cursor encodes the
last id seen, so clients can resume at any point and entries committed
meanwhile never shift earlier pages.
"""

from django.conf import settings
from rest_framework.pagination import CursorPagination


class LedgerEntryCursorPagination(CursorPagination):
    """
    Cursor pagination for ledger entries in posting order.

    Default: LEDGER_ENTRIES_PAGE_SIZE entries per page
    Maximum: 200 entries per page

    Query parameters:
        cursor: Encoded cursor for position
        page_size: Number of entries (optional override)
    """

    page_size = settings.LEDGER_ENTRIES_PAGE_SIZE
    max_page_size = 200
    page_size_query_param = "page_size"
    ordering = ("id",)
    cursor_query_param = "cursor"

