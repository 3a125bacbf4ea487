import argparse, json, logging, sys
from contextlib import nullcontext
import requests

from .. import log_util
from ..config import load_config, resolve_settings, require_base_url
from ..errors import ConfigError, HarnessError
from ..reporters.excel import write_reports
from ..utils.io import discover_cases, read_json
from .request_runner import ExecutionLog, TokenStore, case_name, run_case

log = logging.getLogger(__name__)


def run_suite(settings, features=None, session=None, report=True):
    """Run every case sequentially; a failing case never stops the next one."""
    base = require_base_url(settings)
    variables = read_json(settings['variables_file'], default={}) or {}
    tokens = TokenStore.from_variables(variables)
    execution_log = ExecutionLog(settings['log_file'])
    execution_log.clear()

    cases = discover_cases(settings['cases_dir'], features)
    log.info("Loaded %s cases from %s", len(cases), settings['cases_dir'])
    outcomes = []
    with (nullcontext(session) if session is not None else requests.Session()) as http:
        for feature, tc in cases:
            name = case_name(tc)
            try:
                run_case(tc, tokens=tokens, execution_log=execution_log, base_url=base,
                         variables=variables, session=http, timeout=settings['timeout'])
                outcomes.append((feature, name, 'PASS', ''))
            except (HarnessError, AssertionError, requests.RequestException) as e:
                log.warning("[%s] %s failed: %s", feature, name, e)
                outcomes.append((feature, name, 'FAIL', str(e)))

    reports = write_reports(execution_log.records, settings['reports_dir']) if report and len(execution_log) else []
    failed = [o for o in outcomes if o[2] == 'FAIL']
    return {'total': len(outcomes), 'passed': len(outcomes) - len(failed), 'failed': len(failed),
            'failures': [{'feature': f, 'name': n, 'error': err} for f, n, _, err in failed],
            'log': settings['log_file'], 'reports': reports}


def main(argv=None):
    ap = argparse.ArgumentParser(description='Run the declarative API test cases against API_BASE_URL')
    ap.add_argument('--config', default=None, help='YAML config (default: configs/harness.yaml if present)')
    ap.add_argument('--cases', default=None, help='directory of *.json case files')
    ap.add_argument('--base-url', default=None)
    ap.add_argument('--feature', action='append', help='only run this case file (stem); repeatable')
    ap.add_argument('--no-report', action='store_true')
    args = ap.parse_args(argv)

    settings = resolve_settings(load_config(args.config))
    if args.cases: settings['cases_dir'] = args.cases
    if args.base_url: settings['base_url'] = args.base_url.rstrip('/')
    log_util.init(settings['log_level'])

    try:
        summary = run_suite(settings, features=args.feature, report=not args.no_report)
    except ConfigError as e:
        log.error("%s", e)
        return 2
    print(json.dumps(summary, ensure_ascii=False))
    return 1 if summary['failed'] else 0


if __name__ == '__main__': sys.exit(main())
