# Schemas package (re-export feature modules for stable imports)
from .screen.screen import *
from .common.common import *
