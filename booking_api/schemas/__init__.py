# Schemas package (re-export request models for stable imports)
from .auth import *
from .appointments import *
