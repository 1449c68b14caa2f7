"""
Derived listing state for pages

Filtering, pagination, the appointment activity calendar and the chart series
of the admin dashboard are computed here from backend payloads, so routes stay
thin and the rules are testable without a browser.
"""
import calendar
import math
import re
from datetime import date


class Page:
    """One page of a client-side paginated list"""

    def __init__(self, items, page, total_pages, total):
        self.items = items
        self.page = page
        self.total_pages = total_pages
        self.total = total

    @property
    def has_prev(self):
        return self.page > 1

    @property
    def has_next(self):
        return self.page < self.total_pages

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)


def filter_records(records, term, fields):
    """Case-insensitive substring match of term across the given fields"""
    records = list(records or [])
    term = (term or '').strip().lower()
    if not term:
        return records

    def matches(record):
        for field in fields:
            value = record.get(field)
            if value is not None and term in str(value).lower():
                return True
        return False

    return [record for record in records if matches(record)]


def paginate(items, page, per_page):
    """Slice items for a 1-based page number, clamped into range"""
    items = list(items or [])
    total_pages = max(1, math.ceil(len(items) / per_page)) if per_page else 1
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return Page(items[start:start + per_page], page, total_pages, len(items))


def compact_params(params):
    """Drop query parameters without a value"""
    return {key: value for key, value in params.items() if value is not None}


def dedupe_by_id(records, key='id'):
    """One record per id, keeping the first position and the last value"""
    unique = {}
    for record in records or []:
        unique[record.get(key)] = record
    return list(unique.values())


def sort_records(records, key, reverse=True):
    """Sort by a (usually ISO date) field; records missing it go last"""
    present = [record for record in records or [] if record.get(key)]
    missing = [record for record in records or [] if not record.get(key)]
    return sorted(present, key=lambda record: record[key], reverse=reverse) + missing


# --- Activity calendar --------------------------------------------------------

WEEKDAY_LABELS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']


def activity_level(count):
    """Colour bucket for a day's appointment count"""
    if count == 0:
        return 0
    if count < 3:
        return 1
    if count < 6:
        return 2
    if count < 9:
        return 3
    return 4


def shift_month(year, month, offset):
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


class ActivityCalendar:
    """Monday-first month grid of appointment counts"""

    def __init__(self, year, month, counts):
        self.year = year
        self.month = month
        self.counts = counts or {}

    @classmethod
    def from_summary(cls, year, month, summary):
        counts = {item.get('date'): item.get('count', 0) for item in summary or []}
        return cls(year, month, counts)

    @property
    def title(self):
        return f'{calendar.month_name[self.month]} {self.year}'

    @property
    def cells(self):
        first = date(self.year, self.month, 1)
        days_in_month = calendar.monthrange(self.year, self.month)[1]

        cells = [None] * first.weekday()
        for day in range(1, days_in_month + 1):
            current = date(self.year, self.month, day)
            key = current.isoformat()
            count = self.counts.get(key, 0)
            cells.append({
                'date': key,
                'day': day,
                'count': count,
                'level': activity_level(count),
            })
        while len(cells) % 7:
            cells.append(None)
        return cells

    @property
    def weeks(self):
        cells = self.cells
        return [cells[i:i + 7] for i in range(0, len(cells), 7)]

    @property
    def previous(self):
        return shift_month(self.year, self.month, -1)

    @property
    def next(self):
        return shift_month(self.year, self.month, 1)


def year_options(today=None, span=10):
    today = today or date.today()
    return [today.year - 5 + i for i in range(span)]


# --- Dashboard series ---------------------------------------------------------

def revenue_series(revenues):
    """Monthly revenue points and the yearly total"""
    points = []
    total = 0
    for item in revenues or []:
        month = str(item.get('month', ''))
        label = month.split('-')[1][:3] if '-' in month else month[:3]
        amount = item.get('totalRevenue') or 0
        points.append({'month': label, 'revenue': amount})
        total += amount
    return points, total


def title_case_reason(reason):
    return re.sub(r'\b\w', lambda match: match.group(0).upper(), str(reason).replace('_', ' '))


def reason_distribution(rows):
    if not isinstance(rows, list):
        return []
    return [{'name': title_case_reason(row.get('reason', '')), 'value': row.get('count', 0)} for row in rows]


def percentages(series, key='value'):
    """Share of each entry in the total, for simple bar/pie rendering"""
    total = sum(entry.get(key) or 0 for entry in series)
    return [dict(entry, percent=round((entry.get(key) or 0) * 100 / total, 1) if total else 0)
            for entry in series]


# --- Callback counters --------------------------------------------------------

def callback_stats_after_complete(stats):
    stats = dict(stats or {})
    stats['pending'] = max(0, (stats.get('pending') or 0) - 1)
    stats['completed'] = (stats.get('completed') or 0) + 1
    return stats


def callback_stats_after_delete(stats, record):
    stats = dict(stats or {})
    stats['total'] = max(0, (stats.get('total') or 0) - 1)
    bucket = 'completed' if record and record.get('completed') else 'pending'
    stats[bucket] = max(0, (stats.get(bucket) or 0) - 1)
    return stats


def filter_callbacks(callbacks, status='all', term=''):
    callbacks = callbacks or []
    if status == 'completed':
        callbacks = [callback for callback in callbacks if callback.get('completed')]
    elif status == 'pending':
        callbacks = [callback for callback in callbacks if not callback.get('completed')]
    return filter_records(callbacks, term, ('name', 'phone'))
