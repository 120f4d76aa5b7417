#!/usr/bin/env python3
import sys

from hypertext.cli import main

if __name__ == "__main__":
    main(["build", *sys.argv[1:]])
