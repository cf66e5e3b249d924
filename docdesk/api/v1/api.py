"""
V1 API router aggregator: wires all endpoint modules together.
"""

from __future__ import annotations

from fastapi import APIRouter

from docdesk.api.v1.endpoints import (attendance, auth, documents, finance,
                                      salary, system, tasks)

api_router = APIRouter()

# Auth (login, refresh, user management)
api_router.include_router(auth.router)

# Documents and the parties linked to them
api_router.include_router(documents.router)

# Payments, challans
api_router.include_router(finance.router)

api_router.include_router(tasks.router)

# Attendance, leave requests
api_router.include_router(attendance.router)

# Salary configs, records, payroll
api_router.include_router(salary.router)

api_router.include_router(system.router)
