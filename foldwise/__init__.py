"""Train/test splitting, stratified k-fold resampling and grid search over pandas data."""

import logging

from foldwise.api import *  # noqa: F401,F403

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
