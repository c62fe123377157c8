"""Services layer for the intake pipeline.

Organized by feature:
- collector: Source connectors, scoring, eligibility, dedup and orchestration
- review: Staging into review queues and approval into production
- store: Persistence of queue and production records
"""
