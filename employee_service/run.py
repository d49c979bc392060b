#!/usr/bin/env python3
"""Run the employee service"""
import uvicorn
from employee_service.app.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "employee_service.app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.debug,
        log_level=settings.LOG_LEVEL.lower()
    )
