# All application routes are in v1/, including the unversioned probes
from . import v1 as v1
