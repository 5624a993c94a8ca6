"""
FilterSets for ledger listings.
"""

import datetime

import django_filters as filters

from .models import Cashbox, EntryDirection, LedgerEntry, start_of_day


class CashboxFilter(filters.FilterSet):
    class Meta:
        model = Cashbox
        fields = ["branch", "is_active"]


class LedgerEntryFilter(filters.FilterSet):
    """
    Filters for a cashbox's entry listing.

    Date bounds are whole days in the current time zone, both inclusive.
    """

    start_date = filters.DateFilter(method="filter_start_date")
    end_date = filters.DateFilter(method="filter_end_date")
    direction = filters.ChoiceFilter(choices=EntryDirection.choices)

    class Meta:
        model = LedgerEntry
        fields = ["category", "direction", "reference_type", "reference_id"]

    def filter_start_date(self, queryset, name, value):
        return queryset.filter(created_at__gte=start_of_day(value))

    def filter_end_date(self, queryset, name, value):
        return queryset.filter(
            created_at__lt=start_of_day(value + datetime.timedelta(days=1))
        )
