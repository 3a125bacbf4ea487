# scripts/check_cases.py
import sys, json
from pathlib import Path

if len(sys.argv) != 2:
    print("Usage: python scripts/check_cases.py <cases_dir>")
    sys.exit(1)

cases_dir = Path(sys.argv[1])
REQUIRED = ("name", "path")
# keys the runner understands; anything else is kept but probably a typo
KNOWN = {"name", "description", "method", "path", "headers", "body", "useToken", "saveToken",
         "saveTokenAs", "expectedStatus", "expectedBody", "partialMatch", "validateFields"}

problems = []
seen = {}
total = 0

for f in sorted(cases_dir.glob("*.json")):
    try:
        data = json.loads(f.read_text(encoding="utf-8"))
    except ValueError as e:
        problems.append(f"{f.name}: invalid JSON ({e})")
        continue
    if not isinstance(data, list):
        problems.append(f"{f.name}: top level must be an array")
        continue
    for i, tc in enumerate(data):
        if not tc:
            continue
        if not isinstance(tc, dict):
            problems.append(f"{f.name}[{i}]: case must be an object")
            continue
        total += 1
        for k in REQUIRED:
            if not tc.get(k):
                problems.append(f"{f.name}[{i}]: missing '{k}'")
        unknown = sorted(set(tc) - KNOWN)
        if unknown:
            problems.append(f"{f.name}[{i}]: unknown keys {unknown}")
        if tc.get("partialMatch") and "expectedBody" not in tc:
            problems.append(f"{f.name}[{i}]: partialMatch without expectedBody")
        name = tc.get("name")
        if name:
            if name in seen:
                problems.append(f"{f.name}[{i}]: duplicate name '{name}' (first in {seen[name]})")
            else:
                seen[name] = f.name

for p in problems:
    print(p)
print(f"Checked {total} cases, {len(problems)} problem(s)")
sys.exit(1 if problems else 0)
