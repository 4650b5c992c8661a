"""webide-provisioner — one-shot code-server + Codex CLI host setup."""

__version__ = "0.1.0"
