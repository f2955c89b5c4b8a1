from __future__ import annotations

OK = 0
ERR_LINT = 1
ERR_USAGE = 2
ERR_CONFIG = 3
ERR_CONTEXT = 4
ERR_PREREQ = 5
ERR_VALIDATION = 6
ERR_INTERNAL = 99
