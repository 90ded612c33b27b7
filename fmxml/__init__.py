# fmxml/__init__.py

from .fmxml import __doc__, __all__, __version__
from .fmxml import *
