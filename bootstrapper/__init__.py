"""
bootstrapper package

Creates a new project from the dev template, as a CLI-first utility.

Key responsibilities are split across modules:
- `validation.py` / `settings.py`: invocation parameters and configuration
- `credentials.py` / `paths.py`: secrets collection and target directory conflicts
- `materializer.py` / `customizer.py`: template copy and literal renaming
- `git_repo.py` / `github_client.py` / `remote.py`: local repo, GitHub repo and secrets
- `scaffold.py` / `containers.py`: stack starter files, image builds, smoke tests
- `pipeline.py` / `cli.py`: step orchestration and the command line
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
