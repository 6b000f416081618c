"""
SLA Module
==========

Bounded Context for business-hours Service Level Agreement tracking.

Responsibilities:
- Measure elapsed business time between two instants
- Classify tickets as on time, near breach, pending or breached
- Aggregate compliance and turnaround metrics over ticket batches
- Scan open tickets for upcoming breaches
- Hot-reload working hours, holidays and budgets from YAML
"""

__version__ = "1.0.0"
