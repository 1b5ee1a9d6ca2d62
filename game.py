import sys

from shift2048.cli import main


if __name__ == "__main__":
    sys.exit(main())
