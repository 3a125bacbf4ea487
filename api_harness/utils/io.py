from pathlib import Path
import json
import logging
import datetime as dt

import yaml

log = logging.getLogger(__name__)


def ensure_parent(path): Path(path).parent.mkdir(parents=True, exist_ok=True)


def load_yaml(path):
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def read_json(path, default=None):
    p = Path(path)
    if not p.exists():
        return default
    with open(p, 'r', encoding='utf-8') as f:
        return json.load(f)


def write_json(path, data):
    ensure_parent(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def list_case_files(cases_dir, features=None):
    d = Path(cases_dir)
    if not d.is_dir():
        return []
    files = sorted(d.glob('*.json'))
    if features:
        wanted = set(features)
        files = [f for f in files if f.stem in wanted]
    return files


def load_cases(path):
    """Raw entries of a case file (a JSON array; anything else yields no cases, null entries are dropped).

    Entries are validated when they run so a malformed one fails on its own.
    """
    raw = read_json(path, default=[])
    if not isinstance(raw, list):
        log.warning("%s is not a JSON array, skipped", path)
        return []
    return [x for x in raw if x]


def discover_cases(cases_dir, features=None):
    """-> [(feature_name, raw_case), ...] in file order."""
    out = []
    for f in list_case_files(cases_dir, features):
        out.extend((f.stem, tc) for tc in load_cases(f))
    return out


def now_stamp():
    # 2025-11-11T08-30-12 ; safe in file names
    return dt.datetime.now(dt.timezone.utc).strftime('%Y-%m-%dT%H-%M-%S')
