"""HTTP routers: ``/track``, ``/retention`` and ``/health``."""
