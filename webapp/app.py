# webapp/app.py
# -*- coding: utf-8 -*-
import sys, pathlib, json
import pandas as pd
import streamlit as st

# make the api_harness package importable when run via `streamlit run webapp/app.py`
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api_harness.config import load_config, resolve_settings
from api_harness.errors import ConfigError
from api_harness.evaluators.metrics import FEATURE_SHEETS, calculate_statistics, split_by_feature
from api_harness.reporters.excel import detail_rows
from api_harness.runners.request_runner import ExecutionLog
from api_harness.runners.run_suite import run_suite

# ============== page ==============
st.set_page_config(page_title="API Test Report", page_icon="🧪", layout="wide")
st.title("🧪 API test execution")
st.caption("Execution log → statistics per feature → download the Excel report")

settings = resolve_settings(load_config())

with st.sidebar:
    st.header("⚙️ Settings")
    log_file = st.text_input("Execution log", value=settings["log_file"], key="inp_log")
    reports_dir = st.text_input("Reports directory", value=settings["reports_dir"], key="inp_reports")
    result_filter = st.selectbox("Show", ["ALL", "PASS", "FAIL"], index=0, key="sel_result")

    st.divider()
    st.header("🚀 Run")
    base_url = st.text_input("API_BASE_URL", value=settings.get("base_url") or "", key="inp_base")
    run_btn = st.button("Run suite now", type="primary", key="btn_run")

if run_btn:
    cfg = dict(settings, base_url=base_url.strip().rstrip("/"), log_file=log_file, reports_dir=reports_dir)
    with st.spinner("Running cases…"):
        try:
            summary = run_suite(cfg)
        except ConfigError as e:
            st.error(str(e))
            st.stop()
    st.success(f"Done: {summary['passed']}/{summary['total']} passed")
    with st.expander("Run summary JSON", expanded=bool(summary["failed"])):
        st.json(summary)

records = ExecutionLog(log_file).load()
if not records:
    st.info("No execution data yet. Run `python -m api_harness.runners.run_suite` or use the sidebar.")
    st.stop()

groups = split_by_feature(records)

# ============== statistics ==============
st.subheader("📊 Summary")
overall = calculate_statistics(records)
c1, c2, c3, c4 = st.columns(4)
with c1:
    st.metric("Total", overall["total"])
with c2:
    st.metric("Passed", overall["passed"])
with c3:
    st.metric("Failed", overall["failed"])
with c4:
    st.metric("Pass rate", f"{overall['passRate']}%")

per_feature = pd.DataFrame(
    [dict(feature=sheet, **calculate_statistics(groups[key])) for key, sheet in FEATURE_SHEETS.items()]
)
st.dataframe(per_feature, use_container_width=True)

# ============== details ==============
for key, sheet in FEATURE_SHEETS.items():
    rows = groups[key]
    if result_filter != "ALL":
        rows = [r for r in rows if r.result == result_filter]
    if not rows:
        continue
    st.subheader(f"🔎 {sheet} ({len(rows)})")
    st.dataframe(pd.DataFrame(detail_rows(rows)), use_container_width=True, height=360)

# ============== download ==============
st.subheader("⬇️ Download")
latest = pathlib.Path(reports_dir) / "test-report-latest.xlsx"
if latest.exists():
    st.download_button("Download latest Excel report", data=latest.read_bytes(), file_name=latest.name,
                       mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", key="dl_xlsx")
else:
    st.caption("No workbook yet; `python -m api_harness.runners.run_report` builds one from the log.")
st.download_button("Download execution log (JSON)",
                   data=json.dumps([r.to_wire() for r in records], ensure_ascii=False, indent=2),
                   file_name="test-execution-data.json", mime="application/json", key="dl_json")
