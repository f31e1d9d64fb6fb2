from querybridge.packages.federation.executor.execution import ConnectionFactory, QueryExecution
from querybridge.packages.federation.executor.warehouse import create_warehouse_pool, warehouse_options
from querybridge.packages.federation.executor.worker_pool import QueryWorkerPool

__all__ = [
    "ConnectionFactory",
    "QueryExecution",
    "QueryWorkerPool",
    "create_warehouse_pool",
    "warehouse_options",
]
