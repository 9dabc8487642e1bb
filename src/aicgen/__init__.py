"""aicgen - project analysis for AI coding assistant configuration.

Characterizes a codebase (language, project type, architecture pattern,
datasource, level and testing maturity) so matching assistant guidelines can
be selected.

Core principles:
- Static-first: every analysis starts from deterministic static signals
- Cached by fingerprint: an unchanged project never triggers a second AI call
- Bounded: file sampling respects file and token budgets
- Resilient: provider calls run under a deadline with retry and backoff
"""

__version__ = "0.1.0"
