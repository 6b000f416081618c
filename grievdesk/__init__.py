"""
GrievDesk SLA Engine
====================

Business-hours SLA computation for the grievance ticketing service.

Clean Architecture Layers:
- Application: Services and DTOs
- Domain: Calendar, calculator, evaluator, entities and value objects
- Infrastructure: YAML configuration with hot-reload
"""

__version__ = "1.0.0"
