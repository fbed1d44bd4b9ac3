"""
gae-deploy prepares an App Engine `app.yml` and deploys it with `gcloud`.
"""

__all__ = [
    "config",
    "descriptor",
    "secrets",
    "gcloud",
    "orchestrator",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
