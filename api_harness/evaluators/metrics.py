import re
import pandas as pd

from ..schemas.execution import ExecutionRecord, PASS

PROFILE = 'profile'
RESTAURANT = 'restaurant'
# group key -> sheet name, in sheet order
FEATURE_SHEETS = {PROFILE: 'Profile Tests', RESTAURANT: 'Restaurant Tests'}
_PROFILE_RE = re.compile(r'PROFILE', re.IGNORECASE)

EMPTY_STATS = {'total': 0, 'passed': 0, 'failed': 0, 'passRate': 0.0, 'totalDuration': 0, 'avgDuration': 0.0}


def as_records(rows):
    return [r if isinstance(r, ExecutionRecord) else ExecutionRecord.model_validate(r) for r in (rows or [])]


def split_by_feature(records):
    groups = {PROFILE: [], RESTAURANT: []}
    for r in as_records(records):
        groups[PROFILE if _PROFILE_RE.search(r.name) else RESTAURANT].append(r)
    return groups


def records_frame(records):
    recs = as_records(records)
    return pd.DataFrame({'name': [r.name for r in recs],
                         'result': [r.result for r in recs],
                         'duration': [r.duration or 0 for r in recs]})


def calculate_statistics(records):
    df = records_frame(records)
    if df.empty:
        return dict(EMPTY_STATS)
    total = int(len(df)); passed = int((df['result'] == PASS).sum())
    total_duration = int(df['duration'].sum())
    return {'total': total, 'passed': passed, 'failed': total - passed,
            'passRate': round(passed / total * 100, 2),
            'totalDuration': total_duration,
            'avgDuration': round(total_duration / total, 2)}
