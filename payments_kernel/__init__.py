"""
Payments Kernel

Transactional core for client/contractor contracts:
- Atomic job payment (client debit, contractor credit, job marked paid once)
- Capped client deposits against outstanding unpaid jobs
- Row-level locking for every balance mutation
- Typed results and exceptions, structured JSON logging
"""

__version__ = "0.1.0"
