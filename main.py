# main.py
import sys

from triunity.cli.cli import main

if __name__ == "__main__":
    # Default to serving the API when run without arguments
    sys.exit(main(sys.argv[1:] or ["serve"]))
