"""
命令列入口

    meter-billing notice   -i INPUT [-o OUTPUT] [--title T] [--per-page N] [--meter-reader R] [--meter-date D]
    meter-billing template -i INPUT [-o OUTPUT] [--config TEMPLATE.json] [--meter-reader R] [--meter-date D]

成功回傳 0；輸入或排版錯誤回傳 1，錯誤訊息輸出至 stderr。
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from meter_billing.utils import config_manager, ensure_directory_exists, get_logger
from meter_billing.tasks.meter_billing.exceptions import MeterBillingError
from meter_billing.tasks.meter_billing.models import GenerateOptions, TemplateConfig
from meter_billing.tasks.meter_billing.pipeline_orchestrator import run_meter_billing

logger = get_logger('cli')


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('-i', '--input', required=True, help='抄表資料 (.xlsx / .csv)')
    parser.add_argument('-o', '--output', help='輸出 .docx 路徑，預設依標題或年月產生檔名')
    parser.add_argument('--meter-reader', help='抄表人')
    parser.add_argument('--meter-date', help='抄表日期')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='meter-billing',
        description='商戶水電抄表計費通知單產生工具',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    notice = subparsers.add_parser('notice', help='產生固定版面的抄表計費通知單')
    _add_common_arguments(notice)
    notice.add_argument('--title', help='自訂通知單標題')
    notice.add_argument('--per-page', type=int,
                        default=config_manager.get_int('billing', 'per_page', 1),
                        help='每頁通知單數，0 表示不分頁')

    template = subparsers.add_parser('template', help='依 JSON 模板產生帳單')
    _add_common_arguments(template)
    template.add_argument('--config', help='模板 JSON 檔，預設使用內建模板')

    return parser


def _resolve_output(args, filename: str) -> Path:
    if args.output:
        return Path(args.output)
    return Path(config_manager.get('paths', 'output_path', './output')) / filename


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.command == 'notice':
            options = GenerateOptions(
                custom_title=args.title,
                per_page=args.per_page,
                meter_reader=args.meter_reader,
                meter_date=args.meter_date,
            )
            result = run_meter_billing(args.input, mode='notice', options=options)
        else:
            template_config = (TemplateConfig.load_from_file(args.config) if args.config
                               else TemplateConfig.load_default())
            options = GenerateOptions(meter_reader=args.meter_reader, meter_date=args.meter_date)
            result = run_meter_billing(args.input, mode='template', options=options,
                                       template_config=template_config)

        output_path = _resolve_output(args, result.filename)
        ensure_directory_exists(str(output_path.parent))
        output_path.write_bytes(result.document_bytes)

    except (MeterBillingError, FileNotFoundError, ValueError) as e:
        print(f"錯誤: {e}", file=sys.stderr)
        return 1

    logger.info(f"已輸出 {len(result.batch)} 筆通知單: {output_path}")
    print(str(output_path))
    return 0


if __name__ == '__main__':
    sys.exit(main())
