"""ORM models: profiles (accounts), contracts, jobs."""

from payments_kernel.models.contract import Contract, ContractStatus
from payments_kernel.models.job import Job
from payments_kernel.models.profile import Profile, ProfileType

__all__ = [
    "Profile",
    "ProfileType",
    "Contract",
    "ContractStatus",
    "Job",
]
