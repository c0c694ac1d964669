"""Allow `python -m rollingohlc`."""

from rollingohlc.cli import main

if __name__ == "__main__":
    main()
