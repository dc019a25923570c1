#!/usr/bin/env python3
"""
claude-switch - Claude Code API 提供商切换工具

主入口文件，可以通过 python -m claudeswitch 或直接运行 python main.py 来使用。
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from claudeswitch.cli import main

if __name__ == "__main__":
    main()
