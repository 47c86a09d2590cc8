"""repo-backport: cherry-pick merged pull requests onto release branches."""

__version__ = "0.1.0"
