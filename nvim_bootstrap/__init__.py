"""nvim-bootstrap: install and sync a personal Neovim setup.

Core design goals:
- One explicit, immutable host context per run
- Install strategy chosen from OS, distro and GLIBC version, with a single
  PPA -> AppImage fallback
- Installs are verified by running the binary, not by trusting the package manager
- Idempotent: every command can be re-run after a partial failure
- Centralized logging
"""

__all__ = []
