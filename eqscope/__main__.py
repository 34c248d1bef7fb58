"""Entry point for `python -m eqscope`."""
from eqscope.gui import run


if __name__ == "__main__":
    run()
