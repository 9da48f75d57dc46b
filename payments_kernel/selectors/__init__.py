"""Read-only query selectors."""

from payments_kernel.selectors.base import BaseSelector
from payments_kernel.selectors.registry_selector import (
    ContractView,
    JobView,
    RegistrySelector,
)
from payments_kernel.selectors.reporting_selector import (
    ClientPayments,
    ProfessionEarnings,
    ReportingSelector,
)

__all__ = [
    "BaseSelector",
    "ContractView",
    "JobView",
    "RegistrySelector",
    "ClientPayments",
    "ProfessionEarnings",
    "ReportingSelector",
]
