"""HTTP routers, one per area."""

from injaz.api.routes import (
    ai,
    documents,
    finance,
    imports,
    parties,
    payments,
    projects,
    reports,
    tasks,
    telegram,
    users,
)

ROUTERS = [
    ai.router,
    telegram.router,
    imports.router,
    parties.router,
    payments.router,
    documents.router,
    projects.router,
    tasks.router,
    finance.router,
    reports.router,
    users.router,
]

__all__ = ["ROUTERS"]
