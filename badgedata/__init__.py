"""Badge data: download counts from other websites, re-served for badgen.net.

Data sources attach themselves to a ``Registry`` under a route name; the
application seals the registry and mounts the resulting dispatcher under
``/badgedata``.
"""

from badgedata.registry import Dispatcher, Handler, Registry

__all__ = ["Dispatcher", "Handler", "Registry"]
