from claimfix.api.main import app

__all__ = ["app"]
