from collections import Counter
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)) + '/..')

from clock import parse_instant
from event_store import JsonEventStore
from settings import settings

STORAGE = sys.argv[1] if len(sys.argv) > 1 else settings.storage_path


def date_range(timestamps):
    parsed = []
    for ts in timestamps:
        try:
            parsed.append(parse_instant(ts))
        except ValueError:
            continue
    if not parsed:
        return None, None
    return min(parsed), max(parsed)


if not os.path.exists(STORAGE):
    print('No storage file at', STORAGE)
    sys.exit(1)

print('File:', STORAGE)
print('Size (KB):', round(os.path.getsize(STORAGE) / 1024, 2))

doc = JsonEventStore(STORAGE).load()

print('\nTotals:')
print('  Visits: ', len(doc.visits))
print('  Actions:', len(doc.actions))

browser_counts = Counter(v.browser or 'unknown' for v in doc.visits)
print('\nTop 10 browsers:')
for b, c in browser_counts.most_common(10):
    print(f'  {c:8d}  {b}')

type_counts = Counter(a.type for a in doc.actions)
print('\nTop 10 action types:')
for t, c in type_counts.most_common(10):
    print(f'  {c:8d}  {t}')

name_counts = Counter(a.name for a in doc.actions)
print('\nTop 20 action names:')
for n, c in name_counts.most_common(20):
    print(f'  {c:8d}  {n}')

for label, records in (('visits', doc.visits), ('actions', doc.actions)):
    earliest, latest = date_range(r.timestamp for r in records)
    print(f'\nDate range for {label}:')
    print('  earliest:', earliest.isoformat() if earliest else 'N/A')
    print('  latest:  ', latest.isoformat() if latest else 'N/A')
