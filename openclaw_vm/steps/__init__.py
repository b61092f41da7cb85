from .step_10_clean_package_cache import CleanPackageCacheStep
from .step_15_update_system import UpdateSystemStep
from .step_20_install_desktop import InstallDesktopStep
from .step_25_install_guest_additions import InstallGuestAdditionsStep
from .step_30_install_applications import InstallApplicationsStep
from .step_35_install_browser import InstallBrowserStep
from .step_40_install_snapd import InstallSnapdStep
from .step_50_install_agent import InstallAgentStep
from .step_55_configure_gateway_service import ConfigureGatewayServiceStep
from .step_60_configure_autologin import ConfigureAutologinStep
from .step_65_configure_openbox import ConfigureOpenboxStep
from .step_70_create_desktop_shortcuts import CreateDesktopShortcutsStep
from .step_80_enable_graphical_target import EnableGraphicalTargetStep
from .step_90_final_cleanup import FinalCleanupStep

__all__ = [
    "CleanPackageCacheStep",
    "UpdateSystemStep",
    "InstallDesktopStep",
    "InstallGuestAdditionsStep",
    "InstallApplicationsStep",
    "InstallBrowserStep",
    "InstallSnapdStep",
    "InstallAgentStep",
    "ConfigureGatewayServiceStep",
    "ConfigureAutologinStep",
    "ConfigureOpenboxStep",
    "CreateDesktopShortcutsStep",
    "EnableGraphicalTargetStep",
    "FinalCleanupStep",
]
