"""
Domain models for the provisioner.

All models are re-exported here for convenient access:

    from provisioner.core.models import ProvisioningConfig, PrivilegeContext, CommandResult
"""

from provisioner.core.models.command import CommandResult
from provisioner.core.models.config import ProvisioningConfig
from provisioner.core.models.extension import ExtensionList, ExtensionReport
from provisioner.core.models.privilege import PrivilegeContext
from provisioner.core.models.service import (
    ActivationState,
    ServiceActivation,
    ServiceUnitDescriptor,
)

__all__ = [
    "ActivationState",
    "CommandResult",
    "ExtensionList",
    "ExtensionReport",
    "PrivilegeContext",
    "ProvisioningConfig",
    "ServiceActivation",
    "ServiceUnitDescriptor",
]
