"""
Application Layer - Use Cases and Orchestration

Responsibility:
    Coordinates application records, the submission worklist and the
    submission worker. Hosts the worker inside Celery when requested.

Contains:
    - Commands (CQRS write operations)
    - Application services (AutoSenderService)
    - Worker loop (ApplicationWorker)
    - Celery tasks (periodic worker cycle)
    - Worker configuration (WorkerSettings)

Does NOT contain:
    - Domain business rules (belongs to Domain layer)
    - Infrastructure details (belongs to Infrastructure layer)
"""
