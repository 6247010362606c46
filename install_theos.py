#!/usr/bin/env python3
"""
install-theos - Bootstrap Theos on macOS, Linux (including WSL) and jailbroken iOS.

Usage:
    install_theos.py                 # Interactive install
    install_theos.py --unattended    # Never prompt (also implied by CI=1)
    install_theos.py --config FILE   # Use a YAML/JSON configuration file

Exit codes:
    0 success, 1 run as root, 2 unsupported platform, 3 dependency issue,
    4 unsupported shell, 5 THEOS not set, 6 clone/update failed,
    7 toolchain failed, 8 SDKs failed, 9 shared directory setup failed,
    10 WSL1 fakeroot fix failed, 130 interrupted
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from theos_install.cli import main


if __name__ == "__main__":
    sys.exit(main())
