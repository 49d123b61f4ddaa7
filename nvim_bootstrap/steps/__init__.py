from .step_10_probe_host import ProbeHostStep
from .step_20_fix_apt_repos import FixAptReposStep
from .step_25_install_homebrew import InstallHomebrewStep
from .step_30_install_neovim import InstallNeovimStep
from .step_40_install_dependencies import InstallDependenciesStep
from .step_50_install_python_tools import InstallPythonToolsStep
from .step_60_setup_config import SetupConfigStep
from .step_70_finalize import FinalizeStep

__all__ = [
    "ProbeHostStep",
    "FixAptReposStep",
    "InstallHomebrewStep",
    "InstallNeovimStep",
    "InstallDependenciesStep",
    "InstallPythonToolsStep",
    "SetupConfigStep",
    "FinalizeStep",
]
