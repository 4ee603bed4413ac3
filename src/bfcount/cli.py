#!/usr/bin/env python3

import importlib
import signal
import sys

from bfcount import VERSION

MODULES = ["count", "eval", "hist"]


def print_help():
    print(f"usage: bfcount {{{', '.join(MODULES)}}} ...", file=sys.stderr)


def main():
    if len(sys.argv) < 2:
        print("no module selected", file=sys.stderr)
        print_help()
        sys.exit(1)
    module_name = sys.argv[1]
    if module_name in ("-v", "--version"):
        print(f"bfcount {VERSION}")
        sys.exit(0)
    if module_name not in MODULES:
        print(f"invalid module: {module_name}", file=sys.stderr)
        print_help()
        sys.exit(1)
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    module = importlib.import_module(f"bfcount.modules.{module_name}.main")
    sys.exit(module.run(sys.argv[1:]))


if __name__ == "__main__":
    main()
