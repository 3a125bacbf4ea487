import argparse, json, sys

from .. import log_util
from ..config import load_config, resolve_settings
from ..reporters.excel import write_reports
from .request_runner import ExecutionLog


def main(argv=None):
    ap = argparse.ArgumentParser(description='Build the Excel report from an existing execution log')
    ap.add_argument('--config', default=None); ap.add_argument('--log', default=None); ap.add_argument('--out-dir', default=None)
    args = ap.parse_args(argv)
    settings = resolve_settings(load_config(args.config)); log_util.init(settings['log_level'])
    records = ExecutionLog(args.log or settings['log_file']).load()
    if not records:
        print('No test execution data found. Please run the suite first: python -m api_harness.runners.run_suite', file=sys.stderr)
        return 1
    paths = write_reports(records, args.out_dir or settings['reports_dir'])
    print(json.dumps({'records': len(records), 'reports': paths}, ensure_ascii=False))
    return 0


if __name__ == '__main__': sys.exit(main())
