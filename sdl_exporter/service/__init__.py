"""Target service process management."""

from .launcher import RESTRICTED_ENVIRONMENT_ARGUMENT, ServiceLauncher, ServiceProcess

__all__ = ["ServiceLauncher", "ServiceProcess", "RESTRICTED_ENVIRONMENT_ARGUMENT"]
