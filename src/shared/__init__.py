"""
Shared Layer

Responsibility:
    Helpers that every layer may use and that carry no submission rules:
    the retry executor and the circuit breaker (see shared.utils).

Does NOT contain:
    - Application status rules (domain.applications)
    - Redis or HTTP code (infrastructure)
"""
