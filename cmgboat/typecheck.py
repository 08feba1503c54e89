"""Runtime type checking shared by the package.

``float`` hints accept ``int`` values (PEP 484 numeric tower), so callers
may pass integer literals for angles, gains and time steps.
"""

from beartype import BeartypeConf
from beartype import beartype as _beartype

beartype = _beartype(conf=BeartypeConf(is_pep484_tower=True))
