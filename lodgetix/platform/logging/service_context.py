"""
Service identification for log lines.

Every log record carries `<service>@<env>:<instance>` so that lines from
several API replicas sharing one Kvrocks/PostgreSQL pair can be told apart.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'lodgetix-api')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')
    # HOSTNAME is the pod/container name under docker and k8s
    instance = os.getenv('HOSTNAME') or str(os.getpid())
    return f'{service_name}@{deploy_env}:{instance[:12]}'
