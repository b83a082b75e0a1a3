"""
basezipメインエントリポイント

`python -m basezip` として実行することができます
"""

import sys
from basezip.cli import main

if __name__ == "__main__":
    sys.exit(main())
