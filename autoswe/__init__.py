"""autoswe: plan-then-execute software engineering agent."""

__version__ = "0.1.0"
