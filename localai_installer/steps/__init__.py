from .step_10_check_prerequisites import CheckPrerequisitesStep
from .step_20_install_runtime import InstallRuntimeStep
from .step_30_prepare_web_stack import PrepareWebStackStep
from .step_40_install_web_ui import InstallWebUIStep
from .step_50_fetch_models import FetchModelsStep
from .step_60_create_shortcuts import CreateShortcutsStep

__all__ = [
    "CheckPrerequisitesStep",
    "InstallRuntimeStep",
    "PrepareWebStackStep",
    "InstallWebUIStep",
    "FetchModelsStep",
    "CreateShortcutsStep",
]
