import logging
import sys


def setup_logging(level: str = "WARNING") -> None:
    """
    One handler on the root logger:
    - level from settings
    - a single stderr handler, replacing any previous ones so repeated
      calls never print twice
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)
