"""
直接執行入口（未安裝套件時使用）

    python main.py notice -i meters.xlsx -o notice.docx
"""

import sys

from meter_billing.cli import main


if __name__ == '__main__':
    sys.exit(main())
